"""
delivery_stats.py
-----------------
Open/click rate summary for Postmark's /stats/outbound response.

Rates are capped at 100%: Postmark can report more unique opens than
tracked messages (e.g. opens counted on messages sent before the window),
and a rate above 100 is never shown.
"""

import math
from dataclasses import dataclass
from typing import Any, Mapping


def _count(data: Mapping[str, Any], key: str) -> float:
    """Numeric field from the stats payload; missing, null or non-finite → 0."""
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value):
        return 0
    return value


def rate(numerator: float, denominator: float) -> str:
    """Percentage with one decimal, clamped to [0, 100]. Zero denominator → "0.0"."""
    if not denominator or not math.isfinite(denominator) or not math.isfinite(numerator):
        return "0.0"
    percent = min(numerator / denominator * 100, 100.0)
    return f"{max(percent, 0.0):.1f}"


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


@dataclass(frozen=True)
class DeliverySummary:
    sent: float
    tracked: float
    unique_opens: float
    total_tracked_links: float
    unique_links_clicked: float

    @classmethod
    def from_stats(cls, data: Mapping[str, Any]) -> "DeliverySummary":
        data = data or {}
        return cls(
            sent=_count(data, "Sent"),
            tracked=_count(data, "Tracked"),
            unique_opens=_count(data, "UniqueOpens"),
            total_tracked_links=_count(data, "TotalTrackedLinksSent"),
            unique_links_clicked=_count(data, "UniqueLinksClicked"),
        )

    @property
    def open_rate(self) -> str:
        return rate(self.unique_opens, self.tracked)

    @property
    def click_rate(self) -> str:
        return rate(self.unique_links_clicked, self.total_tracked_links)

    def to_text(self) -> str:
        return (
            f"You sent {_fmt(self.sent)} emails in the selected period.\n"
            f"Out of {_fmt(self.tracked)} emails with open tracking, {self.open_rate}% were opened.\n"
            f"Out of {_fmt(self.total_tracked_links)} tracked links, "
            f"{_fmt(self.unique_links_clicked)} unique links were clicked ({self.click_rate}%)."
        )
