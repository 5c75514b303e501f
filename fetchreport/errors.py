from typing import Optional


class FetchError(Exception):
    """Base for the three ways a single fetch can fail."""

    message = "fetch failed"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail
        super().__init__(self.describe())

    def describe(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


class TransportError(FetchError):
    message = "transport error"


class StatusError(FetchError):
    message = "non-success response status"

    def __init__(self, status: int, detail: Optional[str] = None):
        self.status = status
        super().__init__(detail or f"HTTP {status}")


class ParseError(FetchError):
    message = "malformed body"
