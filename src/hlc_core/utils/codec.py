"""
codec.py - Wire encoding for packed timestamps.

A timestamp travels as one unsigned 64-bit integer. Two encodings are
provided:
- Fixed 8-byte integer, byte order agreed out of band (default big endian)
- MessagePack uint64, for embedding in msgpack framed messages

Decoding always re-validates the packed value, so a peer can never
inject a timestamp with reserved bits set.
"""

import msgpack

from hlc_core.config import DEFAULT_BYTE_ORDER, WIRE_SIZE_BYTES
from hlc_core.errors import ValidationError
from hlc_core.timestamp import Timestamp

_BYTE_ORDERS = ("big", "little")


def _check_byte_order(byteorder: str) -> None:
    if byteorder not in _BYTE_ORDERS:
        raise ValidationError(
            f"byteorder must be 'big' or 'little', got {byteorder!r}",
            field="byteorder",
            value=byteorder,
        )


def encode_timestamp(ts: Timestamp, byteorder: str = DEFAULT_BYTE_ORDER) -> bytes:
    """
    Serialize a timestamp to 8 bytes.
    
    Args:
        ts: Timestamp to serialize
        byteorder: "big" (network order) or "little"
        
    Returns:
        8 bytes
    """
    _check_byte_order(byteorder)
    return ts.value.to_bytes(WIRE_SIZE_BYTES, byteorder)


def decode_timestamp(data: bytes, byteorder: str = DEFAULT_BYTE_ORDER) -> Timestamp:
    """
    Deserialize a timestamp from 8 bytes.
    
    Raises:
        ValidationError: If data is not 8 bytes or has reserved bits set
    """
    _check_byte_order(byteorder)
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise ValidationError(
            f"Expected bytes, got {type(data).__name__}",
            field="data",
            value=data,
        )
    if len(data) != WIRE_SIZE_BYTES:
        raise ValidationError(
            f"Timestamp must be {WIRE_SIZE_BYTES} bytes, got {len(data)}",
            field="data",
            value=bytes(data),
        )
    return Timestamp.from_value(int.from_bytes(data, byteorder))


def pack_timestamp(ts: Timestamp) -> bytes:
    """
    Serialize a timestamp to MessagePack.
    
    Raises:
        ValidationError: If the value cannot be serialized
    """
    try:
        return msgpack.packb(ts.value, use_bin_type=True)
    except (TypeError, ValueError, OverflowError) as e:
        raise ValidationError(
            f"Cannot serialize timestamp to MessagePack: {e}",
            field="ts",
            value=ts,
        ) from e


def unpack_timestamp(data: bytes) -> Timestamp:
    """
    Deserialize a timestamp from MessagePack.
    
    Raises:
        ValidationError: If data is not a msgpack unsigned integer
            or does not hold a valid packed timestamp
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise ValidationError(
            f"Expected bytes, got {type(data).__name__}",
            field="data",
            value=data,
        )

    try:
        value = msgpack.unpackb(data, raw=False)
    except (msgpack.UnpackException, ValueError) as e:
        raise ValidationError(
            f"Cannot deserialize MessagePack: {e}",
            field="data",
            value=data[:50] if len(data) > 50 else data,
        ) from e

    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(
            f"Expected integer timestamp, got {type(value).__name__}",
            field="data",
            value=value,
        )

    return Timestamp.from_value(value)
