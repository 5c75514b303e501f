from dataclasses import dataclass, field
from typing import Dict, Optional


DEFAULT_USER_AGENT = "fetchreport/1.0 (+https://example.com; contact: fetchreport@example.com)"

EXPECTED_SHAPES = ("object", "array")


@dataclass(frozen=True)
class FetchConfig:
    user_agent: str = DEFAULT_USER_AGENT
    # None leaves the socket without a timeout
    connect_timeout: Optional[float] = None
    read_timeout: Optional[float] = None
    max_connections: int = 4
    concurrency: int = 4
    expect: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    output_path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.expect is not None and self.expect not in EXPECTED_SHAPES:
            raise ValueError(f"expect must be one of {EXPECTED_SHAPES} or None, got {self.expect!r}")
        for name in ("connect_timeout", "read_timeout"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.max_connections < 1 or self.concurrency < 1:
            raise ValueError("max_connections and concurrency must be at least 1")
