"""Formatted notification model for the Discord sink."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

# Discord embed limits
MAX_TITLE = 256
MAX_DESCRIPTION = 4096
MAX_FIELD_NAME = 256
MAX_FIELD_VALUE = 1024
MAX_FIELDS = 25


class Classification(Enum):
    """Outcome of a report relative to expectations."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"

    @property
    def marker(self) -> str:
        return _MARKERS[self]


_MARKERS = {
    Classification.POSITIVE: "\U0001F7E2",  # green circle
    Classification.NEGATIVE: "\U0001F534",  # red circle
    Classification.NEUTRAL: "\U0001F535",   # blue circle
}


@dataclass
class EmbedField:
    """A labelled value in the notification body."""
    name: str
    value: str
    inline: bool = True


@dataclass
class FormattedNotification:
    """Rich message built from one ReportRecord. Never persisted."""
    ticker: str
    eps_date: str
    classification: Classification
    title: str
    url: str
    author: str
    description: str
    footer: str
    timestamp: datetime
    color: int
    fields: list[EmbedField] = field(default_factory=list)

    def to_embed(self) -> dict[str, Any]:
        """Render as a Discord embed object, truncated to Discord's limits."""
        embed: dict[str, Any] = {
            "title": _truncate(self.title, MAX_TITLE),
            "url": self.url,
            "color": self.color,
            "author": {"name": _truncate(self.author, MAX_FIELD_NAME)},
            "fields": [
                {
                    "name": _truncate(f.name, MAX_FIELD_NAME),
                    "value": _truncate(f.value, MAX_FIELD_VALUE),
                    "inline": f.inline,
                }
                for f in self.fields[:MAX_FIELDS]
            ],
            "footer": {"text": self.footer},
            "timestamp": self.timestamp.isoformat(),
        }
        if self.description:
            embed["description"] = _truncate(self.description, MAX_DESCRIPTION)
        return embed


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"
