"""Shared fixtures: sample Earnings Whispers records."""
import copy

import pytest

CNC_REPORT = {
    "epsDate": "2025-07-27T12:50:00",
    "ticker": "CNC",
    "name": "Centene Corporation",
    "summary": (
        "Centene (CNC) reported a loss of $0.16 per share on revenue of $48.74 billion for the .  "
        "The consensus earnings estimate was $0.68 per share on  revenue of $44.28 billion. "
        "The company missed consensus estimates by 123.53% while revenue grew 22.36% on a "
        "year-over-year basis.<br /><br />The company  said during its "
        "<a href=\"https://app.webinar.net/NR6KbwxLVn8\">conference call</a> it expects  2025  "
        "earnings of approximately $1.75 per share."
    ),
    "subject": "Centene Missed Consensus Estimates",
    "quarter": "",
    "fileName": "2507277994",
    "eps": -0.16,
    "ewGrade": None,
    "pwrRating": None,
    "estimate": 0.68,
    "whisper": 999,
    "highEstimate": 2.1,
    "lowEstimate": 0.3,
    "revenue": 48742.0,
    "revenueEstimate": 44280.0,
    "earningsGrowth": -1.0661157024793389,
    "revenueGrowth": 0.22356662315493523,
    "earningsSurprise": -1.2352941176470589,
    "revenueSurprise": 0.10076784101174345,
    "prevEarningsGrowth": None,
    "prevRevenueGrowth": 0.153760487044324,
}

HCA_REPORT = {
    "epsDate": "2025-07-25T07:30:00",
    "ticker": "HCA",
    "name": "HCA Healthcare, Inc.",
    "summary": (
        "HCA Healthcare (HCA) reported earnings of $6.84 per share on revenue of $18.61 billion "
        "for the .  The Earnings Whisper number was $6.35 per share. The company beat "
        "expectations by 7.72% while revenue grew 6.36% on a year-over-year basis."
    ),
    "subject": "HCA Healthcare Beat Expectations",
    "quarter": "",
    "fileName": "2507259537",
    "eps": 6.84,
    "ewGrade": None,
    "pwrRating": None,
    "estimate": 6.19,
    "whisper": 6.35,
    "highEstimate": 6.51,
    "lowEstimate": 5.6,
    "revenue": 18605.0,
    "revenueEstimate": 18460.0,
    "earningsGrowth": 0.24363636363636363,
    "revenueGrowth": 0.06362908758289504,
    "earningsSurprise": 0.07716535433070866,
    "revenueSurprise": 0.007854821235102925,
    "prevEarningsGrowth": None,
    "prevRevenueGrowth": 0.05663533075725244,
}


def make_report_dict(ticker: str, eps_date: str = "2025-07-28T16:05:00", **overrides) -> dict:
    """A feed object for an arbitrary ticker, based on the CNC sample."""
    d = copy.deepcopy(CNC_REPORT)
    d.update(
        ticker=ticker,
        epsDate=eps_date,
        name=f"{ticker} Inc.",
        subject=f"{ticker} Reported Results",
    )
    d.update(overrides)
    return d


@pytest.fixture
def cnc_dict():
    return copy.deepcopy(CNC_REPORT)


@pytest.fixture
def hca_dict():
    return copy.deepcopy(HCA_REPORT)


@pytest.fixture
def report_factory():
    return make_report_dict
