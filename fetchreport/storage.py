import json
import threading
from pathlib import Path
from typing import Any, Dict, Iterator

from .types import Outcome


class OutcomeLog:
    """Append-only JSON-lines record of reported outcomes, one per line."""

    def __init__(self, path: str, truncate: bool = False) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._fh = self.path.open("w" if truncate else "a", encoding="utf-8")
        self.written = 0

    def write(self, outcome: Outcome) -> None:
        line = json.dumps(outcome.to_record(), ensure_ascii=False, allow_nan=False)
        with self._lock:
            self._fh.write(line + "\n")
            self._fh.flush()
            self.written += 1

    def close(self) -> None:
        with self._lock:
            if not self._fh.closed:
                self._fh.close()

    def __enter__(self) -> "OutcomeLog":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def read_outcomes(path: str) -> Iterator[Dict[str, Any]]:
    with Path(path).open("r", encoding="utf-8") as fh:
        for line in fh:
            if line.strip():
                yield json.loads(line)
