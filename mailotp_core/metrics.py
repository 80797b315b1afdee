"""
Service Metrics
===============
In-memory counters with Prometheus text export.
"""

import threading
from typing import Dict, Optional
from dataclasses import dataclass
import structlog

logger = structlog.get_logger(__name__)


@dataclass
class MetricLabels:
    """Common labels for metrics."""
    service: str
    environment: str = "development"


class SimpleMetrics:
    """
    Simple in-memory metrics collector.

    Counters and gauges only; values reset when the process restarts.
    """

    def __init__(self, labels: Optional[MetricLabels] = None):
        self.labels = labels or MetricLabels(service="unknown")
        self._counters: Dict[str, int] = {}
        self._gauges: Dict[str, float] = {}
        self._lock = threading.Lock()

    def increment(self, name: str, value: int = 1, labels: Optional[Dict] = None) -> None:
        """Increment a counter."""
        key = self._make_key(name, labels)
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + value

    def set_gauge(self, name: str, value: float, labels: Optional[Dict] = None) -> None:
        """Set a gauge value."""
        key = self._make_key(name, labels)
        with self._lock:
            self._gauges[key] = value

    def _make_key(self, name: str, labels: Optional[Dict] = None) -> str:
        """Create a unique key for a metric."""
        if labels:
            label_str = ",".join(f'{k}="{v}"' for k, v in sorted(labels.items()))
            return f"{name}{{{label_str}}}"
        return name

    def get_counter(self, name: str, labels: Optional[Dict] = None) -> int:
        """Get counter value."""
        return self._counters.get(self._make_key(name, labels), 0)

    def get_gauge(self, name: str, labels: Optional[Dict] = None) -> Optional[float]:
        """Get gauge value."""
        return self._gauges.get(self._make_key(name, labels))

    def export_prometheus(self) -> str:
        """Export metrics in Prometheus text format."""
        lines = []
        base_labels = f'service="{self.labels.service}",env="{self.labels.environment}"'

        with self._lock:
            counters = sorted(self._counters.items())
            gauges = sorted(self._gauges.items())

        for key, value in counters:
            name, extra = self._split_key(key)
            lines.append(f"{name}_total{{{base_labels}{extra}}} {value}")

        for key, value in gauges:
            name, extra = self._split_key(key)
            lines.append(f"{name}{{{base_labels}{extra}}} {value}")

        return "\n".join(lines) + ("\n" if lines else "")

    @staticmethod
    def _split_key(key: str):
        name = key.split("{")[0]
        if "{" in key:
            return name, "," + key[len(name) + 1:-1]
        return name, ""


# Pre-defined metric names
class MetricNames:
    OTP_ISSUED = "mailotp_otp_issued"
    OTP_VERIFICATIONS = "mailotp_otp_verifications"
    OTP_LIVE_RECORDS = "mailotp_otp_live_records"

    MAIL_DISPATCH = "mailotp_mail_dispatch"

    RATE_LIMIT_HITS = "mailotp_rate_limit_hits"
