import json
import logging
import sys
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Iterable, List, TextIO

from .config import FetchConfig
from .errors import FetchError, ParseError, StatusError, TransportError
from .metrics import Metrics
from .net import HttpClient
from .parsing import parse_document
from .storage import OutcomeLog
from .types import Failure, FailureKind, HttpClientProtocol, Outcome, Success


logger = logging.getLogger(__name__)

_KINDS = {
    TransportError: FailureKind.TRANSPORT,
    StatusError: FailureKind.STATUS,
    ParseError: FailureKind.PARSE,
}


def kind_of(exc: FetchError) -> FailureKind:
    for exc_type, kind in _KINDS.items():
        if isinstance(exc, exc_type):
            return kind
    raise TypeError(f"unclassified fetch error: {exc!r}")


def is_success_status(status: int) -> bool:
    return 200 <= status < 300


class Fetcher:
    """Retrieve one JSON document per call and turn the result into an ``Outcome``.

    ``fetch`` never raises for network, status or body problems; those come
    back as a ``Failure`` naming the kind. ``submit`` and ``fetch_all`` run the
    same call on worker threads.
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        http_client: HttpClientProtocol | None = None,
        metrics: Metrics | None = None,
    ):
        self.config = config or FetchConfig()
        self._owns_http = http_client is None
        self.http = http_client or HttpClient(self.config)
        self.metrics = metrics or Metrics()
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.concurrency, thread_name_prefix="fetch"
        )

    def fetch(self, url: str) -> Outcome:
        t0 = time.perf_counter()
        size_bytes = 0
        try:
            response = self.http.request(url)
            size_bytes = response.size_bytes
            if not is_success_status(response.status):
                raise StatusError(response.status)
            payload = parse_document(response.body, response.content_type, expect=self.config.expect)
        except FetchError as exc:
            kind = kind_of(exc)
            dt_ms = (time.perf_counter() - t0) * 1000.0
            self.metrics.record(kind, size_bytes, dt_ms)
            logger.debug("Fetch of %s failed (%s) after %.1f ms", url, kind.value, dt_ms)
            return Failure(url=url, kind=kind, reason=exc.describe())
        dt_ms = (time.perf_counter() - t0) * 1000.0
        self.metrics.record(None, size_bytes, dt_ms)
        logger.debug("Fetched %s in %.1f ms", url, dt_ms)
        return Success(url=url, payload=payload, status=response.status)

    def submit(self, url: str) -> "Future[Outcome]":
        return self._executor.submit(self.fetch, url)

    def fetch_all(self, urls: Iterable[str]) -> List[Outcome]:
        futures = [self.submit(url) for url in urls]
        return [f.result() for f in futures]

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class Reporter:
    def __init__(
        self,
        log: logging.Logger | None = None,
        outcome_log: OutcomeLog | None = None,
        out: TextIO | None = None,
        err: TextIO | None = None,
    ):
        self.log = log or logger
        self.outcome_log = outcome_log
        self._out = out
        self._err = err

    def report(self, outcome: Outcome) -> None:
        if isinstance(outcome, Success):
            rendered = json.dumps(outcome.payload, ensure_ascii=False, sort_keys=True)
            self.log.info("%s -> %s", outcome.url, rendered)
            print(rendered, file=self._out or sys.stdout)
        else:
            self.log.error("%s -> %s", outcome.url, outcome.reason)
            print(f"{outcome.url}: {outcome.reason}", file=self._err or sys.stderr)
        if self.outcome_log is not None:
            self.outcome_log.write(outcome)


def fetch_and_report(
    url: str,
    config: FetchConfig | None = None,
    http_client: HttpClientProtocol | None = None,
) -> Outcome:
    config = config or FetchConfig()
    outcome_log = OutcomeLog(config.output_path) if config.output_path else None
    try:
        with Fetcher(config, http_client=http_client) as fetcher:
            outcome = fetcher.fetch(url)
        Reporter(outcome_log=outcome_log).report(outcome)
    finally:
        if outcome_log is not None:
            outcome_log.close()
    return outcome
