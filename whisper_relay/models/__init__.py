"""Data models for the earnings relay."""

from whisper_relay.models.report import ReportRecord
from whisper_relay.models.notification import (
    Classification,
    EmbedField,
    FormattedNotification,
)

__all__ = [
    "ReportRecord",
    "Classification",
    "EmbedField",
    "FormattedNotification",
]
