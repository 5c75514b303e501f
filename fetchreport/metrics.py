import threading
import time
from dataclasses import dataclass
from typing import Optional

from .types import FailureKind


@dataclass
class Totals:
    requests: int = 0
    bytes: int = 0
    successes: int = 0
    transport_errors: int = 0
    status_errors: int = 0
    parse_errors: int = 0
    fetch_ms_sum: float = 0.0

    @property
    def failures(self) -> int:
        return self.transport_errors + self.status_errors + self.parse_errors


_FAILURE_FIELDS = {
    FailureKind.TRANSPORT: "transport_errors",
    FailureKind.STATUS: "status_errors",
    FailureKind.PARSE: "parse_errors",
}


class Metrics:
    def __init__(self):
        self._totals = Totals()
        self._lock = threading.Lock()
        self._start = time.time()

    def record(self, kind: Optional[FailureKind], bytes_read: int, fetch_ms: float) -> None:
        """Count one fetch; ``kind`` is None for a success."""
        with self._lock:
            self._totals.requests += 1
            self._totals.bytes += max(0, bytes_read)
            if kind is None:
                self._totals.successes += 1
            else:
                field_name = _FAILURE_FIELDS[kind]
                setattr(self._totals, field_name, getattr(self._totals, field_name) + 1)
            self._totals.fetch_ms_sum += fetch_ms

    def snapshot(self) -> tuple[Totals, float]:
        with self._lock:
            t = Totals(
                requests=self._totals.requests,
                bytes=self._totals.bytes,
                successes=self._totals.successes,
                transport_errors=self._totals.transport_errors,
                status_errors=self._totals.status_errors,
                parse_errors=self._totals.parse_errors,
                fetch_ms_sum=self._totals.fetch_ms_sum,
            )
        elapsed = max(1e-6, time.time() - self._start)
        return t, elapsed
