"""Formats earnings reports as Discord embed notifications."""
import re
from datetime import datetime, timezone

from whisper_relay.models import Classification, EmbedField, FormattedNotification, ReportRecord

DETAIL_URL = "https://www.earningswhispers.com/epsdetails/{ticker}"
CONFERENCE_CALL_URL = "https://app.webinar.net/{file_name}"
FOOTER = "Source: Earnings Whispers"
EMBED_COLOR = 0x1ABC9C
NOT_AVAILABLE = "N/A"

POSITIVE_MARKERS = ("Beat Expectations", "Beat Consensus Estimates")
NEGATIVE_MARKERS = ("Missed Expectations", "Missed Consensus Estimates")

_BREAK_RE = re.compile(r"<br />")
_ANCHOR_RE = re.compile(r"<a [^>]+>([^<]+)</a>")


def classify(subject: str | None) -> Classification:
    """Classify a report from its subject line. Beat markers win over Missed."""
    if not subject:
        return Classification.NEUTRAL
    if any(marker in subject for marker in POSITIVE_MARKERS):
        return Classification.POSITIVE
    if any(marker in subject for marker in NEGATIVE_MARKERS):
        return Classification.NEGATIVE
    return Classification.NEUTRAL


def fmt_money(millions: float | None) -> str:
    """Format an amount given in millions at B/M/K scale.

    >>> fmt_money(48742.0)
    '$48.74B'
    >>> fmt_money(999)
    '$999.00M'
    >>> fmt_money(0.5)
    '$500.00K'
    """
    if millions is None:
        return NOT_AVAILABLE
    if millions > 999:
        return f"${millions / 1000:.2f}B"
    if millions >= 1:
        return f"${millions:.2f}M"
    return f"${millions * 1000:.2f}K"


def fmt_percent(fraction: float | None, decimals: int = 2, prefix: str = "") -> str:
    """Format a fraction as a percentage, e.g. 0.1008 -> '10.08%'."""
    if fraction is None:
        return NOT_AVAILABLE
    return f"{prefix}{fraction * 100:.{decimals}f}%"


def fmt_number(value: float | None) -> str:
    """Render a feed number the way it appears in the JSON (6.0 -> '6')."""
    if value is None:
        return NOT_AVAILABLE
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def fmt_eps_date(eps_date: str) -> str:
    """Render an ISO timestamp as 'M/D/YYYY, h:MM:SS AM'. Unparseable input is returned as-is."""
    try:
        dt = datetime.fromisoformat(eps_date)
    except (TypeError, ValueError):
        return eps_date
    hour = dt.hour % 12 or 12
    meridiem = "AM" if dt.hour < 12 else "PM"
    return f"{dt.month}/{dt.day}/{dt.year}, {hour}:{dt.minute:02d}:{dt.second:02d} {meridiem}"


def clean_summary(summary: str | None) -> str:
    """Turn the feed's summary markup into plain text.

    Line breaks become newlines and links collapse to their bracketed text;
    the link target itself is dropped.
    """
    if not summary:
        return ""
    text = _BREAK_RE.sub("\n", summary)
    return _ANCHOR_RE.sub(r"[\1]", text)


def _conference_call(file_name: str | None) -> str:
    if not file_name:
        return NOT_AVAILABLE
    return f"[Link]({CONFERENCE_CALL_URL.format(file_name=file_name)})"


def format_report(record: ReportRecord, now: datetime | None = None) -> FormattedNotification:
    """Build the notification for one report.

    Args:
        record: Report to format
        now: Embed timestamp (default: current UTC time)

    Returns:
        FormattedNotification ready for the sink
    """
    classification = classify(record.subject)

    fields = [
        EmbedField("Earnings Date", fmt_eps_date(record.eps_date)),
        EmbedField(
            "EPS (est/whisp)",
            f"{fmt_number(record.eps)} (Estimate: {fmt_number(record.estimate)} "
            f"/ Whisper: {fmt_number(record.whisper)})",
        ),
        EmbedField("Revenue", fmt_money(record.revenue)),
        EmbedField("Revenue Estimate", fmt_money(record.revenue_estimate)),
        EmbedField("Earnings Surprise %", fmt_percent(record.earnings_surprise, 2, prefix="EPS ")),
        EmbedField("Revenue Surprise %", fmt_percent(record.revenue_surprise, 2)),
        EmbedField("Previous Earnings Growth", fmt_percent(record.prev_earnings_growth, 1)),
        EmbedField("Previous Revenue Growth", fmt_percent(record.prev_revenue_growth, 1)),
        EmbedField(
            "High / Low Est.",
            f"{fmt_number(record.high_estimate)} / {fmt_number(record.low_estimate)}",
        ),
        EmbedField("Earnings Whispers Grade", record.ew_grade or NOT_AVAILABLE),
        EmbedField("Power Rating", record.pwr_rating or NOT_AVAILABLE),
        EmbedField("Conference Call", _conference_call(record.file_name)),
    ]

    return FormattedNotification(
        ticker=record.ticker,
        eps_date=record.eps_date,
        classification=classification,
        title=f"{classification.marker} {record.ticker} — {record.subject or NOT_AVAILABLE}",
        url=DETAIL_URL.format(ticker=record.ticker),
        author=record.name or record.ticker,
        description=clean_summary(record.summary),
        footer=FOOTER,
        timestamp=now or datetime.now(timezone.utc),
        color=EMBED_COLOR,
        fields=fields,
    )
