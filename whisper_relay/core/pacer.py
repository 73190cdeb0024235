"""Sequential, rate-limited delivery of notifications."""
import asyncio
import logging
from typing import Awaitable, Callable, Iterable

from whisper_relay.models import FormattedNotification
from whisper_relay.sinks.discord import NotificationSink

logger = logging.getLogger(__name__)

# Pause after each send, in milliseconds
DEFAULT_SEND_DELAY_MS = 3000


class DeliveryPacer:
    """Sends notifications one at a time with a fixed pause after each send."""

    def __init__(
        self,
        sink: NotificationSink,
        delay_ms: int = DEFAULT_SEND_DELAY_MS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.sink = sink
        self.delay_ms = delay_ms
        self._sleep = sleep

    async def send_all(
        self,
        payloads: Iterable[FormattedNotification],
        on_sent: Callable[[int], None],
    ) -> int:
        """Send payloads in order.

        Payloads are pulled one at a time, so a lazy iterable is only advanced
        after the previous payload went out. on_sent(index) is called right
        after each successful send, before the pause. The first failure, from
        the sink or from producing the next payload, propagates and nothing
        after it is sent.

        Args:
            payloads: Notifications in delivery order
            on_sent: Callback receiving the index of each delivered payload

        Returns:
            Number of payloads sent
        """
        sent = 0
        for index, payload in enumerate(payloads):
            await self.sink.send(payload)
            on_sent(index)
            sent += 1
            await self._sleep(self.delay_ms / 1000)
        return sent
