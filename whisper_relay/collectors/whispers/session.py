"""Earnings Whispers HTTP session using aiohttp."""
import asyncio
import logging

import aiohttp
from aiohttp.abc import AbstractCookieJar

from whisper_relay.collectors.whispers.parsers import parse_reports
from whisper_relay.core.config import SourceConfig
from whisper_relay.core.errors import FetchError
from whisper_relay.models import ReportRecord

logger = logging.getLogger(__name__)


class WhispersSessionClient:
    """Fetches today's earnings results from Earnings Whispers.

    The JSON API only answers requests that carry the cookies issued by the
    public site, so every fetch first loads the human-facing news page and
    then calls the API with the same cookie jar, posing as the page's own
    XHR.

    Attributes:
        config: Upstream URLs, timeout and user agent
    """

    def __init__(
        self,
        config: SourceConfig,
        cookie_jar: AbstractCookieJar | None = None,
    ):
        """Initialize the client. No connection is made until the first fetch.

        Args:
            config: Upstream feed configuration
            cookie_jar: Cookie jar to hold session cookies (default: a new CookieJar)
        """
        self.config = config
        self._cookie_jar = cookie_jar
        self._session: aiohttp.ClientSession | None = None

        logger.debug(
            "INIT: WhispersSessionClient initialized",
            extra={
                "extra_data": {
                    "action": "client_init",
                    "warmup_url": config.warmup_url,
                    "data_url": config.data_url,
                    "timeout": config.timeout_seconds,
                }
            },
        )

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            jar = self._cookie_jar if self._cookie_jar is not None else aiohttp.CookieJar()
            self._session = aiohttp.ClientSession(
                cookie_jar=jar,
                timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
            )
        return self._session

    async def fetch_reports(self) -> list[ReportRecord]:
        """Warm the cookie jar, then fetch and parse the results feed.

        Returns:
            Reports in feed order

        Raises:
            FetchError: If either request fails or the body is not a JSON array
        """
        session = self._get_session()

        logger.debug(
            "STEP 1/2: Warming session cookies",
            extra={"extra_data": {"action": "warmup_start", "url": self.config.warmup_url}},
        )
        await self._warm_up(session)

        logger.debug(
            "STEP 2/2: Requesting results feed",
            extra={
                "extra_data": {
                    "action": "fetch_start",
                    "url": self.config.data_url,
                    "cookies": len(session.cookie_jar),
                }
            },
        )
        body = await self._get_text(
            session,
            self.config.data_url,
            headers={
                "User-Agent": self.config.user_agent,
                "Accept": "application/json, text/javascript, */*; q=0.01",
                "Accept-Language": "en-US,en;q=0.5",
                "Cache-Control": "no-cache",
                "Pragma": "no-cache",
                "Referer": self.config.warmup_url,
                "X-Requested-With": "XMLHttpRequest",
            },
        )

        try:
            reports = parse_reports(body)
        except ValueError as e:
            raise FetchError(f"Unusable response from {self.config.data_url}: {e}") from e

        logger.info(f"Fetched {len(reports)} reports from Earnings Whispers")
        return reports

    async def _warm_up(self, session: aiohttp.ClientSession) -> None:
        """Load the news page so the server issues session cookies."""
        await self._get_text(
            session,
            self.config.warmup_url,
            headers={
                "User-Agent": self.config.user_agent,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            },
        )

    async def _get_text(self, session: aiohttp.ClientSession, url: str, headers: dict[str, str]) -> str:
        try:
            async with session.get(url, headers=headers) as response:
                if not 200 <= response.status < 300:
                    raise FetchError(f"GET {url} returned HTTP {response.status}")
                return await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeDecodeError) as e:
            raise FetchError(f"GET {url} failed: {type(e).__name__}: {e}") from e

    async def close(self) -> None:
        """Release the HTTP session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
            logger.debug("Closed Earnings Whispers session")
        self._session = None
