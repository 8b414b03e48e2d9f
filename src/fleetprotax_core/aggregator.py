"""Monthly reconciliation of computed allowances against employer reimbursements."""

from collections.abc import Iterable
from decimal import Decimal

import structlog

from .calculator import equipment_deduction, trip_allowance_breakdown
from .models import (
    EquipmentEntry,
    ExpenseEntry,
    MonthlyEmployerExpense,
    MonthlySummary,
    TaxRateSet,
    TripEntry,
)

logger = structlog.get_logger()

MONTHS_PER_YEAR = 12


class _MonthTotals:
    """Running sums for one month while aggregating."""

    __slots__ = ("meals", "mileage", "equipment", "expenses", "trip_count", "depreciable_ids")

    def __init__(self) -> None:
        self.meals = Decimal("0")
        self.mileage = Decimal("0")
        self.equipment = Decimal("0")
        self.expenses = Decimal("0")
        self.trip_count = 0
        self.depreciable_ids: list[str] = []


def employer_amounts_by_month(
    employer_expenses: Iterable[MonthlyEmployerExpense],
    year: int,
) -> dict[int, Decimal]:
    """Employer reimbursement per month index for one year.

    ``(year, month)`` is unique; if the input still holds duplicates the
    later record overwrites the earlier one.
    """
    amounts: dict[int, Decimal] = {}
    for record in employer_expenses:
        if record.year == year:
            amounts[record.month] = record.amount
    return amounts


def aggregate(
    trip_entries: Iterable[TripEntry],
    equipment_entries: Iterable[EquipmentEntry],
    expense_entries: Iterable[ExpenseEntry],
    employer_expenses: Iterable[MonthlyEmployerExpense],
    rates: TaxRateSet,
    year: int,
) -> list[MonthlySummary]:
    """
    Build the twelve monthly summaries for one year.

    Trips contribute their meal and mileage allowance, equipment its
    immediate deduction (depreciable items contribute nothing and are
    listed by id), expenses their raw amount. Each month is then netted
    against the employer reimbursement for that month; a missing record
    counts as zero and a negative net is kept as is.

    Args:
        trip_entries: Trip snapshot (any year)
        equipment_entries: Equipment snapshot (any year)
        expense_entries: Expense snapshot (any year)
        employer_expenses: Employer reimbursements (any year)
        rates: Effective rate set
        year: Tax year to aggregate

    Returns:
        Exactly 12 MonthlySummary values, January (0) first
    """
    totals = [_MonthTotals() for _ in range(MONTHS_PER_YEAR)]

    for trip in trip_entries:
        if trip.year != year:
            continue
        allowance = trip_allowance_breakdown(trip, rates)
        bucket = totals[trip.month]
        bucket.meals += allowance.meal_allowance
        bucket.mileage += allowance.mileage_allowance
        bucket.trip_count += 1

    for item in equipment_entries:
        if item.year != year:
            continue
        deduction = equipment_deduction(item, rates)
        bucket = totals[item.month]
        if deduction.is_immediate:
            bucket.equipment += deduction.deductible_amount
        else:
            bucket.depreciable_ids.append(item.id)

    for expense in expense_entries:
        if expense.year != year:
            continue
        totals[expense.month].expenses += expense.amount

    employer = employer_amounts_by_month(employer_expenses, year)

    summaries = [
        MonthlySummary(
            year=year,
            month=month,
            meal_total=bucket.meals,
            mileage_total=bucket.mileage,
            equipment_total=bucket.equipment,
            expense_total=bucket.expenses,
            employer_amount=employer.get(month, Decimal("0")),
            trip_count=bucket.trip_count,
            depreciable_equipment_ids=tuple(bucket.depreciable_ids),
        )
        for month, bucket in enumerate(totals)
    ]

    logger.info(
        "year_aggregated",
        year=year,
        active_months=sum(1 for s in summaries if s.has_activity),
        depreciable_items=sum(len(s.depreciable_equipment_ids) for s in summaries),
    )
    return summaries


class MonthlyAggregator:
    """Aggregate entries into monthly summaries using one rate set."""

    def __init__(self, rates: TaxRateSet):
        self.rates = rates

    def aggregate(
        self,
        trip_entries: Iterable[TripEntry],
        equipment_entries: Iterable[EquipmentEntry],
        expense_entries: Iterable[ExpenseEntry],
        employer_expenses: Iterable[MonthlyEmployerExpense],
        year: int,
    ) -> list[MonthlySummary]:
        return aggregate(
            trip_entries,
            equipment_entries,
            expense_entries,
            employer_expenses,
            self.rates,
            year,
        )
