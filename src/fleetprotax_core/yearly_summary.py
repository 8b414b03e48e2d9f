"""Year-level totals folded from monthly summaries."""

from collections.abc import Iterable
from typing import Optional

import structlog

from .aggregator import aggregate
from .models import MonthlySummary, TaxRateSet, YearlySummary
from .store import EntrySnapshot

logger = structlog.get_logger()


def build_year(
    monthly_summaries: Iterable[MonthlySummary],
    year: Optional[int] = None,
) -> YearlySummary:
    """Fold monthly summaries into a YearlySummary.

    ``year_total`` is the exact sum of the monthly net amounts. Empty input
    gives zero totals. Months are ordered by index regardless of input
    order.

    Args:
        monthly_summaries: Output of ``aggregate`` (or any subset of it)
        year: Tax year; taken from the first summary when omitted
    """
    months = tuple(sorted(monthly_summaries, key=lambda s: s.month))
    if year is None and months:
        year = months[0].year

    summary = YearlySummary(year=year, months=months)
    logger.info("year_summary_built", year=year, year_total=str(summary.year_total))
    return summary


def summarize_year(snapshot: EntrySnapshot, rates: TaxRateSet, year: int) -> YearlySummary:
    """Aggregate a store snapshot and fold it into the year summary."""
    monthly = aggregate(
        snapshot.trips,
        snapshot.equipment,
        snapshot.expenses,
        snapshot.employer_expenses,
        rates,
        year,
    )
    return build_year(monthly, year=year)


class YearlySummaryBuilder:
    """Build year summaries; stateless, kept for symmetry with the aggregator."""

    def build_year(
        self,
        monthly_summaries: Iterable[MonthlySummary],
        year: Optional[int] = None,
    ) -> YearlySummary:
        return build_year(monthly_summaries, year=year)
