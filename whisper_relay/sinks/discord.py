"""Discord webhook notification sink using aiohttp."""
import asyncio
import logging
from typing import Protocol

import aiohttp
from yarl import URL

from whisper_relay.core.config import SinkConfig
from whisper_relay.core.errors import DeliveryError
from whisper_relay.models import FormattedNotification

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    """Protocol for notification delivery targets."""

    async def send(self, notification: FormattedNotification) -> None:
        """Deliver one notification. Raises DeliveryError on failure."""
        ...

    async def close(self) -> None:
        """Release any held connections."""
        ...


class DiscordWebhookSink:
    """Posts notifications to a Discord webhook as single-embed messages.

    Mentions are always suppressed. Discord's own rate limiting is not
    retried here; a 429 is reported as a failed delivery.
    """

    def __init__(self, config: SinkConfig):
        self.config = config
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
            )
        return self._session

    async def send(self, notification: FormattedNotification) -> None:
        """Post one embed.

        Raises:
            DeliveryError: On network failure, timeout or a non-2xx response
        """
        payload = {
            "embeds": [notification.to_embed()],
            "allowed_mentions": {"parse": []},
        }

        session = self._get_session()
        try:
            async with session.post(
                URL(self.config.webhook_url).update_query(wait="true"), json=payload
            ) as response:
                if not 200 <= response.status < 300:
                    detail = (await response.text(errors="replace"))[:200]
                    raise DeliveryError(
                        f"Discord webhook returned HTTP {response.status} "
                        f"for {notification.ticker}: {detail}"
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DeliveryError(
                f"Discord webhook request failed for {notification.ticker}: "
                f"{type(e).__name__}: {e}"
            ) from e

        logger.debug(
            "SEND: Notification delivered",
            extra={
                "extra_data": {
                    "action": "notification_sent",
                    "ticker": notification.ticker,
                    "eps_date": notification.eps_date,
                    "classification": notification.classification.value,
                }
            },
        )

    async def close(self) -> None:
        """Release the HTTP session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
            logger.debug("Closed Discord webhook session")
        self._session = None
