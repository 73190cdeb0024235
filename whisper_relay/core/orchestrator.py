"""Orchestrator for one relay run: load, fetch, dedupe, deliver, persist."""
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

from whisper_relay.collectors.whispers.session import WhispersSessionClient
from whisper_relay.core.config import Config
from whisper_relay.core.errors import DeliveryError, FetchError, PersistenceError
from whisper_relay.core.pacer import DeliveryPacer
from whisper_relay.core.state_store import JsonStateStore, StateStore
from whisper_relay.formatters.earnings import format_report
from whisper_relay.models import ReportRecord
from whisper_relay.sinks.discord import DiscordWebhookSink, NotificationSink

logger = logging.getLogger(__name__)


class RunPhase(Enum):
    """Lifecycle phases of a run."""
    INIT = "init"
    LOADED = "loaded"
    FETCHED = "fetched"
    DELIVERING = "delivering"
    DONE = "done"


@dataclass
class RunResult:
    """Totals reported at the end of a run."""
    fetched: int = 0
    new: int = 0
    delivered: int = 0
    total: int = 0            # records in state after the run
    saved: bool = False
    last_phase: RunPhase = RunPhase.INIT   # last phase reached before DONE
    error: str | None = None


def select_new(reports: list[ReportRecord], state: list[ReportRecord]) -> list[ReportRecord]:
    """Reports whose (epsDate, ticker) is not in state, in feed order.

    Repeats of a key within the same feed are dropped after the first.
    """
    seen = {r.key for r in state}
    new = []
    for report in reports:
        if report.key in seen:
            continue
        seen.add(report.key)
        new.append(report)
    return new


class Orchestrator:
    """Wires the relay components together and runs one pass.

    Responsibilities:
    1. Load the delivered-report state
    2. Fetch today's results and keep only unseen reports
    3. Format and deliver them sequentially, recording each success
    4. Persist state and release HTTP sessions on every exit path
    """

    def __init__(
        self,
        config: Config,
        state_store: StateStore | None = None,
        client: WhispersSessionClient | None = None,
        sink: NotificationSink | None = None,
    ):
        """Initialize the orchestrator.

        Args:
            config: System configuration
            state_store: State backend (default: JsonStateStore at config.state.path)
            client: Feed client (default: WhispersSessionClient)
            sink: Delivery target (default: DiscordWebhookSink)
        """
        self.config = config
        self.state_store = state_store or JsonStateStore(config.state.path)
        self.client = client or WhispersSessionClient(config.source)
        self.sink = sink or DiscordWebhookSink(config.sink)
        self.pacer = DeliveryPacer(self.sink, delay_ms=config.sink.send_delay_ms)

        self.phase = RunPhase.INIT
        self.state: list[ReportRecord] = []

        logger.info("Orchestrator initialized")

    def _enter(self, phase: RunPhase) -> None:
        logger.debug(
            f"PHASE: {self.phase.name} -> {phase.name}",
            extra={"extra_data": {"action": "phase_change", "from": self.phase.value, "to": phase.value}},
        )
        self.phase = phase

    async def run(self) -> RunResult:
        """Run one load/fetch/deliver/save pass.

        Fetch failures and any error while formatting or delivering are
        logged and end the pass early; state is saved regardless. Unexpected
        exceptions outside those steps propagate after cleanup.

        Returns:
            RunResult with the run's totals
        """
        result = RunResult()

        try:
            self.state = self.state_store.load()
            self._enter(RunPhase.LOADED)

            try:
                reports = await self.client.fetch_reports()
            except FetchError as e:
                logger.error(f"Error fetching earnings: {e}")
                result.error = str(e)
                return result
            result.fetched = len(reports)
            self._enter(RunPhase.FETCHED)

            new_reports = select_new(reports, self.state)
            result.new = len(new_reports)
            logger.info(
                f"{len(new_reports)} new of {len(reports)} fetched reports "
                f"({len(reports) - len(new_reports)} already delivered)"
            )

            self._enter(RunPhase.DELIVERING)
            # Formatted one at a time as the pacer pulls them
            notifications = (format_report(r) for r in new_reports)

            def on_sent(index: int) -> None:
                report = new_reports[index]
                self.state.append(report)
                result.delivered += 1
                logger.info(f"Posted: {report.ticker} ({report.eps_date})")

            try:
                await self.pacer.send_all(notifications, on_sent)
            except DeliveryError as e:
                logger.error(f"Error delivering earnings: {e}")
                result.error = str(e)
            except Exception as e:
                logger.exception(f"Error delivering earnings: {e}")
                result.error = f"{type(e).__name__}: {e}"

            if result.error is not None:
                undelivered = len(new_reports) - result.delivered
                logger.error(
                    f"{undelivered} of {len(new_reports)} new reports not delivered; "
                    f"they will be retried on the next run"
                )

        finally:
            result.last_phase = self.phase
            self._enter(RunPhase.DONE)
            if result.last_phase is RunPhase.INIT:
                logger.error("State was never loaded; leaving state file untouched")
            else:
                result.saved = self._save_state()
            result.total = len(self.state)
            logger.info(f"Total records: {result.total}")
            await self._close()

        return result

    def _save_state(self) -> bool:
        try:
            self.state_store.save(self.state)
            return True
        except PersistenceError as e:
            logger.error(f"Error saving state: {e}")
            return False

    async def _close(self) -> None:
        """Release the feed client and sink, even if one of them fails to close."""
        for name, resource in (("feed client", self.client), ("sink", self.sink)):
            try:
                await resource.close()
            except Exception as e:
                logger.warning(f"Error closing {name}: {e}")

    def start(self) -> RunResult:
        """Run a pass on a fresh event loop. Blocks until the pass is done."""
        logger.info("Starting relay run...")
        return asyncio.run(self.run())
