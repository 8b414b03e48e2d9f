"""Derived values produced by the calculators and aggregators.

Nothing in this module is a source of truth. Every instance is recomputed
from entries and rates on demand and can be thrown away at any time.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


MONTH_NAMES = [
    "Januar", "Februar", "März", "April", "Mai", "Juni",
    "Juli", "August", "September", "Oktober", "November", "Dezember",
]

MONTH_NAMES_SHORT = [
    "Jan", "Feb", "Mär", "Apr", "Mai", "Jun",
    "Jul", "Aug", "Sep", "Okt", "Nov", "Dez",
]


def get_month_name(index: int, short: bool = False) -> str:
    """Get the German month name for a zero-based month index.

    Returns an empty string for indexes outside 0-11.
    """
    names = MONTH_NAMES_SHORT if short else MONTH_NAMES
    if 0 <= index < len(names):
        return names[index]
    return ""


class EquipmentClassification(str, Enum):
    """How an equipment purchase is deducted."""
    IMMEDIATE = "immediate"  # cost <= GWG limit, deducted in the purchase month
    DEPRECIABLE = "depreciable"  # cost > GWG limit, needs multi-year depreciation


class TripAllowance(BaseModel):
    """Meal and mileage breakdown for one trip."""

    model_config = ConfigDict(frozen=True)

    entry_id: str
    meal_allowance: Decimal
    mileage_allowance: Decimal

    @computed_field
    @property
    def total(self) -> Decimal:
        return self.meal_allowance + self.mileage_allowance


class EquipmentDeduction(BaseModel):
    """Classification and deductible amount for one equipment purchase.

    ``deductible_amount`` is the full cost for immediate items and zero for
    depreciable items, whose schedule is not computed here.
    """

    model_config = ConfigDict(frozen=True)

    entry_id: str
    classification: EquipmentClassification
    cost: Decimal
    deductible_amount: Decimal

    @property
    def is_immediate(self) -> bool:
        return self.classification == EquipmentClassification.IMMEDIATE


class MonthlySummary(BaseModel):
    """Allowances and employer reimbursement for one month.

    ``net_amount`` may be negative when the employer reimbursed more than the
    computed allowance; it is never clamped.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "year": 2025,
                    "month": 2,
                    "meal_total": "14.0",
                    "mileage_total": "36.0",
                    "equipment_total": "0",
                    "expense_total": "0",
                    "employer_amount": "50.0",
                }
            ]
        },
    )

    year: int
    month: int = Field(ge=0, le=11, description="Zero-based month index (0 = January)")
    meal_total: Decimal = Decimal("0")
    mileage_total: Decimal = Decimal("0")
    equipment_total: Decimal = Decimal("0")
    expense_total: Decimal = Decimal("0")
    employer_amount: Decimal = Decimal("0")
    trip_count: int = 0
    depreciable_equipment_ids: tuple[str, ...] = ()

    @computed_field
    @property
    def total_computed_allowance(self) -> Decimal:
        """Trips plus immediate equipment plus expenses."""
        return self.meal_total + self.mileage_total + self.equipment_total + self.expense_total

    @computed_field
    @property
    def net_amount(self) -> Decimal:
        """Computed allowance minus what the employer already paid."""
        return self.total_computed_allowance - self.employer_amount

    @computed_field
    @property
    def label(self) -> str:
        """Human-readable label for the month (e.g., 'März 2025')."""
        return f"{get_month_name(self.month)} {self.year}"

    @property
    def has_activity(self) -> bool:
        return self.total_computed_allowance != 0 or self.employer_amount != 0


class YearlySummary(BaseModel):
    """Year-level fold over twelve monthly summaries."""

    model_config = ConfigDict(frozen=True)

    year: Optional[int] = None
    months: tuple[MonthlySummary, ...] = ()

    @computed_field
    @property
    def year_total(self) -> Decimal:
        """Sum of the monthly net amounts."""
        return sum((m.net_amount for m in self.months), Decimal("0"))

    @computed_field
    @property
    def total_computed_allowance(self) -> Decimal:
        return sum((m.total_computed_allowance for m in self.months), Decimal("0"))

    @computed_field
    @property
    def total_employer_amount(self) -> Decimal:
        return sum((m.employer_amount for m in self.months), Decimal("0"))

    @property
    def total_meals(self) -> Decimal:
        return sum((m.meal_total for m in self.months), Decimal("0"))

    @property
    def total_mileage(self) -> Decimal:
        return sum((m.mileage_total for m in self.months), Decimal("0"))

    @property
    def total_equipment(self) -> Decimal:
        return sum((m.equipment_total for m in self.months), Decimal("0"))

    @property
    def total_expenses(self) -> Decimal:
        return sum((m.expense_total for m in self.months), Decimal("0"))

    @property
    def depreciable_equipment_ids(self) -> list[str]:
        """Ids of equipment flagged for depreciation, in month order."""
        return [eid for m in self.months for eid in m.depreciable_equipment_ids]

    def get_month(self, month: int) -> Optional[MonthlySummary]:
        """Get the summary for a zero-based month index, if present."""
        for summary in self.months:
            if summary.month == month:
                return summary
        return None
