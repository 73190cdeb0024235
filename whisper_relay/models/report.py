"""Earnings report record as published by the Earnings Whispers feed."""
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ReportRecord:
    """One earnings report, identified by (eps_date, ticker)."""
    eps_date: str          # "2025-07-27T12:50:00", local to the feed
    ticker: str
    name: str | None = None
    summary: str | None = None       # may contain <br /> and <a> markup
    subject: str | None = None       # "Centene Missed Consensus Estimates"
    quarter: str | None = None
    file_name: str | None = None     # conference call reference

    # EPS figures
    eps: float | None = None
    estimate: float | None = None
    whisper: float | None = None
    high_estimate: float | None = None
    low_estimate: float | None = None

    # Revenue figures, in millions
    revenue: float | None = None
    revenue_estimate: float | None = None

    # Fractions (0.1 == 10%)
    earnings_growth: float | None = None
    revenue_growth: float | None = None
    earnings_surprise: float | None = None
    revenue_surprise: float | None = None
    prev_earnings_growth: float | None = None
    prev_revenue_growth: float | None = None

    # Ratings
    ew_grade: str | None = None
    pwr_rating: str | None = None

    # Untouched upstream object, persisted as-is
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def key(self) -> tuple[str, str]:
        """Composite dedup key."""
        return (self.eps_date, self.ticker)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReportRecord":
        """Build a record from a feed/state JSON object.

        Raises:
            ValueError: If epsDate or ticker is missing or empty
        """
        eps_date = data.get("epsDate")
        ticker = data.get("ticker")
        if not eps_date or not ticker:
            raise ValueError(
                f"Report is missing epsDate/ticker: epsDate={eps_date!r} ticker={ticker!r}"
            )

        kwargs = {attr: data.get(wire) for wire, attr in _WIRE_FIELDS.items()}
        return cls(eps_date=str(eps_date), ticker=str(ticker), raw=dict(data), **kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the feed's JSON shape for persistence."""
        if self.raw:
            return dict(self.raw)
        d: dict[str, Any] = {"epsDate": self.eps_date, "ticker": self.ticker}
        for wire, attr in _WIRE_FIELDS.items():
            d[wire] = getattr(self, attr)
        return d


# Feed key -> attribute, excluding the key fields
_WIRE_FIELDS = {
    "name": "name",
    "summary": "summary",
    "subject": "subject",
    "quarter": "quarter",
    "fileName": "file_name",
    "eps": "eps",
    "estimate": "estimate",
    "whisper": "whisper",
    "highEstimate": "high_estimate",
    "lowEstimate": "low_estimate",
    "revenue": "revenue",
    "revenueEstimate": "revenue_estimate",
    "earningsGrowth": "earnings_growth",
    "revenueGrowth": "revenue_growth",
    "earningsSurprise": "earnings_surprise",
    "revenueSurprise": "revenue_surprise",
    "prevEarningsGrowth": "prev_earnings_growth",
    "prevRevenueGrowth": "prev_revenue_growth",
    "ewGrade": "ew_grade",
    "pwrRating": "pwr_rating",
}
