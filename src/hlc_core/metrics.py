"""
metrics.py - Clock observability.

Provides:
- Labeled counters and gauges exported in Prometheus text format
- A JSON log formatter that carries clock event fields
- ClockLogger, which logs each clock event and updates the metrics
"""

import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List

from hlc_core.config import OverflowPolicy
from hlc_core.errors import ValidationError


@dataclass
class MetricValue:
    """One exported sample."""
    name: str
    value: float
    labels: Dict[str, str] = field(default_factory=dict)


class _LabeledMetric:
    """Values keyed by label tuple; subclasses decide how values change."""

    kind = "untyped"

    def __init__(self, name: str, help_text: str, labels: List[str] = None):
        self.name = name
        self.help = help_text
        self.labels = labels or []
        self._values: Dict[tuple, float] = {}
        self._lock = threading.Lock()

    def get(self, **label_values) -> float:
        return self._values.get(self._label_key(label_values), 0)

    def collect(self) -> List[MetricValue]:
        with self._lock:
            return [
                MetricValue(self.name, value, dict(zip(self.labels, key)))
                for key, value in self._values.items()
            ]

    def _label_key(self, label_values: dict) -> tuple:
        return tuple(label_values.get(l, "") for l in self.labels)


class Counter(_LabeledMetric):
    """Monotonic count of clock events."""

    kind = "counter"

    def inc(self, value: float = 1, **label_values) -> None:
        key = self._label_key(label_values)
        with self._lock:
            self._values[key] = self._values.get(key, 0) + value


class Gauge(_LabeledMetric):
    """Last observed value."""

    kind = "gauge"

    def set(self, value: float, **label_values) -> None:
        key = self._label_key(label_values)
        with self._lock:
            self._values[key] = value


class MetricsRegistry:
    """Named metrics sharing one prefix."""

    def __init__(self, prefix: str = "hlc"):
        self.prefix = prefix
        self._metrics: Dict[str, _LabeledMetric] = {}
        self._lock = threading.Lock()

    def _register(self, cls, name: str, help_text: str, labels: List[str] = None):
        full_name = f"{self.prefix}_{name}"
        with self._lock:
            if full_name not in self._metrics:
                self._metrics[full_name] = cls(full_name, help_text, labels)
            return self._metrics[full_name]

    def counter(self, name: str, help_text: str, labels: List[str] = None) -> Counter:
        """Register or get a counter."""
        return self._register(Counter, name, help_text, labels)

    def gauge(self, name: str, help_text: str, labels: List[str] = None) -> Gauge:
        """Register or get a gauge."""
        return self._register(Gauge, name, help_text, labels)

    def export_prometheus(self) -> str:
        """Render every metric in Prometheus text format."""
        with self._lock:
            metrics = list(self._metrics.values())

        lines = []
        for metric in metrics:
            lines.append(f"# HELP {metric.name} {metric.help}")
            lines.append(f"# TYPE {metric.name} {metric.kind}")
            for sample in metric.collect():
                if sample.labels:
                    label_str = ",".join(f'{k}="{v}"' for k, v in sample.labels.items())
                    lines.append(f"{sample.name}{{{label_str}}} {sample.value}")
                else:
                    lines.append(f"{sample.name} {sample.value}")
        return "\n".join(lines)


_registry = MetricsRegistry()

clock_transitions_total = _registry.counter(
    "transitions_total",
    "Clock transitions by primitive and outcome",
    labels=["primitive", "outcome"]
)

clock_failures_total = _registry.counter(
    "failures_total",
    "Transitions that raised instead of producing a timestamp",
    labels=["kind"]
)

logical_overflows_total = _registry.counter(
    "logical_overflows_total",
    "Logical counter exhaustions by overflow policy",
    labels=["policy"]
)

logical_counter = _registry.gauge(
    "logical_counter",
    "Logical counter of the most recently produced timestamp"
)


def get_registry() -> MetricsRegistry:
    """Get the global metrics registry."""
    return _registry


# Attributes every LogRecord has; anything else arrived through extra=
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, including clock event fields."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(
            (k, v) for k, v in record.__dict__.items() if k not in _RECORD_ATTRS
        )
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


class ClockLogger:
    """
    Structured logger for clock transitions.

    Routine transitions go to DEBUG, failures to WARNING.
    Every event also updates the clock metrics.
    """

    def __init__(self, name: str = "hlc_core.clock"):
        self._logger = logging.getLogger(name)

    def clock_advanced(
        self,
        primitive: str,
        previous: int,
        result: int,
        logical: int
    ) -> None:
        """Log a local transition; an unchanged resync is logged too."""
        outcome = "unchanged" if previous == result else "advanced"
        self._logger.debug(
            f"{primitive}: {previous} -> {result}",
            extra={
                "event": "clock_advanced",
                "primitive": primitive,
                "previous": previous,
                "result": result,
                "outcome": outcome
            }
        )

        clock_transitions_total.inc(1, primitive=primitive, outcome=outcome)
        logical_counter.set(logical)

    def clock_merged(
        self,
        local: int,
        remote: int,
        result: int,
        logical: int
    ) -> None:
        """Log a successful merge of a remote timestamp."""
        self._logger.debug(
            f"merge: local={local} remote={remote} -> {result}",
            extra={
                "event": "clock_merged",
                "local": local,
                "remote": remote,
                "result": result
            }
        )

        clock_transitions_total.inc(1, primitive="merge", outcome="advanced")
        logical_counter.set(logical)

    def merge_collision(self, packed: int) -> None:
        """Log a merge that found identical local and remote timestamps."""
        self._logger.warning(
            f"Merge collision on timestamp {packed}",
            extra={
                "event": "merge_collision",
                "packed": packed
            }
        )

        clock_transitions_total.inc(1, primitive="merge", outcome="failed")
        clock_failures_total.inc(1, kind="ambiguous_merge")

    def logical_overflow(
        self,
        primitive: str,
        physical: int,
        policy: str
    ) -> None:
        """Log a logical counter that ran out within one millisecond."""
        self._logger.warning(
            f"Logical counter exhausted at {physical} during {primitive} (policy={policy})",
            extra={
                "event": "logical_overflow",
                "primitive": primitive,
                "physical": physical,
                "policy": policy
            }
        )

        logical_overflows_total.inc(1, policy=policy)
        if policy == OverflowPolicy.FAIL.value:
            clock_failures_total.inc(1, kind="logical_overflow")


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(level: str = "INFO", json_format: bool = True) -> None:
    """
    Configure root logging for the CLI.

    Args:
        level: One of LOG_LEVELS (case-insensitive)
        json_format: Use JSONFormatter instead of plain text

    Raises:
        ValidationError: If level is not a known level name
    """
    if level.upper() not in LOG_LEVELS:
        raise ValidationError(
            f"Unknown log level {level!r}, expected one of {', '.join(LOG_LEVELS)}",
            field="level",
            value=level,
        )

    console = logging.StreamHandler()
    if json_format:
        console.setFormatter(JSONFormatter())
    else:
        console.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))

    logging.basicConfig(level=level.upper(), handlers=[console])
