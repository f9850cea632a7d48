"""requests-based downloader for the ECB euro foreign exchange reference rates."""

from __future__ import annotations

from typing import Literal, Optional

import requests

from ecb_rates.exceptions import FetchError
from ecb_rates.utils.logger import get_logger

LOGGER = get_logger(__name__)

FeedName = Literal["daily", "hist-90d", "hist"]

ECB_FEED_URLS: dict[str, str] = {
    "daily": "https://www.ecb.europa.eu/stats/eurofxref/eurofxref-daily.xml",
    "hist-90d": "https://www.ecb.europa.eu/stats/eurofxref/eurofxref-hist-90d.xml",
    "hist": "https://www.ecb.europa.eu/stats/eurofxref/eurofxref-hist.xml",
}
DEFAULT_FEED: FeedName = "hist-90d"


class ECBFeedClient:
    """Fetch one reference-rate XML document per call.

    The payload is read completely before it is returned; there are no
    retries, so any transport failure surfaces as :class:`FetchError`.
    """

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = 30,
        feed_urls: Optional[dict[str, str]] = None,
        user_agent: str = "ecb-rates-ingestor/1.0",
    ) -> None:
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", user_agent)
        self.session.headers.setdefault("Accept", "application/xml,text/xml;q=0.9,*/*;q=0.8")
        self.timeout = timeout
        self.feed_urls = dict(feed_urls or ECB_FEED_URLS)

    def url_for(self, feed: str) -> str:
        try:
            return self.feed_urls[feed]
        except KeyError:
            supported = ", ".join(sorted(self.feed_urls))
            raise ValueError(f"Unsupported ECB feed '{feed}'. Supported feeds: {supported}") from None

    def fetch(self, feed: str = DEFAULT_FEED) -> bytes:
        """Download ``feed`` and return the raw XML bytes."""

        url = self.url_for(feed)
        LOGGER.info("Fetching ECB reference rates from %s", url)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise FetchError(f"Failed to reach ECB feed {url}: {exc}") from exc
        self._raise_with_context(response, url)
        payload = response.content
        LOGGER.info("Fetched %s bytes from %s", len(payload), url)
        return payload

    @staticmethod
    def _raise_with_context(response: requests.Response, url: str) -> None:
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            status = response.status_code
            hint = " The ECB throttles aggressive clients; try again later." if status == 429 else ""
            raise FetchError(f"ECB feed responded with HTTP {status} for {url}.{hint}") from exc

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "ECBFeedClient":  # pragma: no cover - trivial
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # pragma: no cover - trivial
        self.close()


__all__ = ["ECBFeedClient", "ECB_FEED_URLS", "DEFAULT_FEED", "FeedName"]
