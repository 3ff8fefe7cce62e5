from hlc_core import AmbiguousMergeError, Clock, ManualWallClock, SharedClock
from hlc_core.utils.codec import decode_timestamp, encode_timestamp

def run_example():
    print("--- Hybrid Logical Clock: Two Nodes ---")
    
    # 1. Node B's host clock runs 50 ms behind node A's
    wall_a = ManualWallClock(1679924536986)
    wall_b = ManualWallClock(1679924536936)
    node_a = SharedClock(wall_clock=wall_a)
    node_b = SharedClock(wall_clock=wall_b)
    
    # 2. Node A stamps a few local events in the same millisecond
    for _ in range(3):
        print(f"A local: {node_a.advance().format()}")
    
    # 3. Node A sends a message; the timestamp travels as 8 bytes
    wire = encode_timestamp(node_a.send())
    print(f"A -> B: {wire.hex()}")
    
    # 4. Node B receives it; its stamp follows A's despite the skewed wall clock
    received = node_b.merge(decode_timestamp(wire))
    print(f"B receive: {received.format()}")
    
    # 5. Once B's wall clock passes A's physical time the counter resets
    wall_b.advance(100)
    print(f"B local: {node_b.advance().format()}")
    
    # 6. Identical timestamps from independent clocks cannot be ordered
    clock = Clock.at(1679924536986, 7)
    try:
        clock.merge(clock.timestamp, now=1679924536986)
    except AmbiguousMergeError as e:
        print(f"Collision: {e}")

if __name__ == "__main__":
    run_example()
