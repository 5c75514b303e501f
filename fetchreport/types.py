import enum
from dataclasses import dataclass
from typing import Any, Dict, Protocol, Union


@dataclass(frozen=True)
class RawResponse:
    status: int
    content_type: str
    body: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.body)


class FailureKind(enum.Enum):
    TRANSPORT = "transport"
    STATUS = "status"
    PARSE = "parse"


@dataclass(frozen=True)
class Success:
    url: str
    payload: Any
    status: int = 200

    ok = True

    def to_record(self) -> Dict[str, Any]:
        return {"url": self.url, "ok": True, "status": self.status, "payload": self.payload}


@dataclass(frozen=True)
class Failure:
    url: str
    kind: FailureKind
    reason: str

    ok = False

    def to_record(self) -> Dict[str, Any]:
        return {"url": self.url, "ok": False, "kind": self.kind.value, "reason": self.reason}


Outcome = Union[Success, Failure]


class HttpClientProtocol(Protocol):
    def request(self, url: str) -> RawResponse:
        """Retrieve ``url`` or raise ``TransportError``."""
        ...
