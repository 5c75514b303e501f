import logging

import urllib3
from urllib3.util.retry import Retry
from urllib3 import exceptions as urllib3_exc

from .config import FetchConfig
from .errors import TransportError
from .types import RawResponse


logger = logging.getLogger(__name__)

MAX_REDIRECTS = 5


class HttpClient:
    def __init__(self, config: FetchConfig):
        self.config = config
        self.timeout = urllib3.Timeout(connect=config.connect_timeout, read=config.read_timeout)
        headers = {
            "User-Agent": config.user_agent,
            "Accept": "application/json, */*;q=0.8",
            "Accept-Encoding": "gzip, deflate",
        }
        headers.update(config.headers)
        self.http = urllib3.PoolManager(
            num_pools=max(4, config.concurrency),
            maxsize=config.max_connections,
            headers=headers,
            # follow redirects, never repeat a failed request
            retries=Retry(
                total=None,
                connect=0,
                read=0,
                other=0,
                status=0,
                redirect=MAX_REDIRECTS,
                raise_on_status=False,
            ),
        )

    def request(self, url: str) -> RawResponse:
        try:
            response = self.http.request(
                "GET",
                url,
                timeout=self.timeout,
                preload_content=True,
            )
        except urllib3_exc.MaxRetryError as exc:
            logger.debug("Transport failure for %s: %s", url, exc.reason)
            raise TransportError(str(exc.reason or exc)) from exc
        except urllib3_exc.HTTPError as exc:
            logger.debug("Transport failure for %s: %s", url, exc)
            raise TransportError(str(exc)) from exc
        logger.debug("GET %s -> %d (%d bytes)", url, response.status, len(response.data or b""))
        return RawResponse(
            status=response.status,
            content_type=response.headers.get("Content-Type", "") or "",
            body=response.data or b"",
        )

    def close(self) -> None:
        self.http.clear()
