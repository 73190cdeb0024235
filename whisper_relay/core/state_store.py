"""Notification state protocol and JSON file implementation."""
import json
import logging
import time
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from whisper_relay.core.errors import PersistenceError
from whisper_relay.models import ReportRecord

logger = logging.getLogger(__name__)


@runtime_checkable
class StateStore(Protocol):
    """Protocol for the durable log of already-notified reports."""

    def load(self) -> list[ReportRecord]:
        """Load previously delivered reports. Returns [] if nothing usable is stored."""
        ...

    def save(self, records: list[ReportRecord]) -> None:
        """Overwrite stored state with the given reports."""
        ...


class JsonStateStore:
    """Stores delivered reports as a pretty-printed JSON array of full records.

    Entries that cannot be read as reports (no epsDate/ticker, not an object)
    are left out of the loaded state but written back at their original
    positions on the next save.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._unusable: list[tuple[int, Any]] = []

    def load(self) -> list[ReportRecord]:
        """Read state from disk.

        A missing, unreadable or malformed file counts as a first run and
        yields an empty list. Individual unusable entries are skipped.
        """
        self._unusable = []

        if not self.path.exists():
            logger.info(f"No state file at {self.path}, starting with empty state")
            return []

        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read state file {self.path}, starting empty: {e}")
            return []

        if not isinstance(raw, list):
            logger.warning(
                f"State file {self.path} does not hold a JSON array "
                f"({type(raw).__name__}), starting empty"
            )
            return []

        records = []
        for index, entry in enumerate(raw):
            try:
                records.append(ReportRecord.from_dict(entry))
            except (AttributeError, TypeError, ValueError) as e:
                logger.warning(f"Skipping state entry {index} in {self.path}: {e}")
                self._unusable.append((index, entry))

        logger.info(f"Loaded {len(records)} delivered reports from {self.path}")
        return records

    def save(self, records: list[ReportRecord]) -> None:
        """Write state to disk.

        Raises:
            PersistenceError: If the file cannot be written
        """
        logger.info(f"Saving state to {self.path}...")
        t0 = time.monotonic()

        entries = [r.to_dict() for r in records]
        for index, entry in self._unusable:
            entries.insert(index, entry)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(entries, f, indent=2, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Failed to write state file {self.path}: {e}") from e

        elapsed_ms = (time.monotonic() - t0) * 1000
        logger.info(f"State saved in {elapsed_ms:.0f} ms")
        logger.debug(
            "PERSIST: State written",
            extra={
                "extra_data": {
                    "action": "state_saved",
                    "path": str(self.path),
                    "records": len(entries),
                }
            },
        )
