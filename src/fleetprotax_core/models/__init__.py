"""Data models for fleetprotax-core.

This package provides:
- Entry records created by the user (entries.py)
- Tax rate sets and user overrides (rates.py)
- Derived per-entry, monthly and yearly values (summary.py)
"""

from fleetprotax_core.models.entries import (
    CommuteMode,
    DefaultCommute,
    DurationTier,
    EquipmentEntry,
    ExpenseEntry,
    MonthlyEmployerExpense,
    PublicTransportCommute,
    TripEntry,
    VehicleType,
)
from fleetprotax_core.models.rates import (
    RATE_FIELD_ALIASES,
    RATE_FIELDS,
    CustomTaxRates,
    TaxRateSet,
)
from fleetprotax_core.models.summary import (
    MONTH_NAMES,
    MONTH_NAMES_SHORT,
    EquipmentClassification,
    EquipmentDeduction,
    MonthlySummary,
    TripAllowance,
    YearlySummary,
    get_month_name,
)

__all__ = [
    # Entries
    "VehicleType",
    "DurationTier",
    "TripEntry",
    "EquipmentEntry",
    "ExpenseEntry",
    "MonthlyEmployerExpense",
    "CommuteMode",
    "PublicTransportCommute",
    "DefaultCommute",
    # Rates
    "RATE_FIELDS",
    "RATE_FIELD_ALIASES",
    "TaxRateSet",
    "CustomTaxRates",
    # Derived values
    "EquipmentClassification",
    "TripAllowance",
    "EquipmentDeduction",
    "MonthlySummary",
    "YearlySummary",
    "MONTH_NAMES",
    "MONTH_NAMES_SHORT",
    "get_month_name",
]
