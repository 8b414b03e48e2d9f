"""FleetProTax Core - Travel and equipment tax deductions with monthly reconciliation."""

__version__ = "1.0.0"

from .aggregator import MonthlyAggregator, aggregate
from .calculator import (
    AllowanceCalculator,
    classify_equipment,
    equipment_deduction,
    meal_allowance,
    mileage_rate,
    trip_allowance,
    trip_allowance_breakdown,
    trip_duration_hours,
)
from .exceptions import (
    ConfigurationError,
    EntryNotFoundError,
    FleetProTaxError,
    ImportDataError,
    ValidationError,
)
from .export import (
    ExportData,
    ExportSettings,
    create_backup_data,
    export_to_json,
    import_from_json,
    parse_backup,
    restore_backup,
    validate_backup,
)
from .models import (
    CustomTaxRates,
    DefaultCommute,
    DurationTier,
    EquipmentClassification,
    EquipmentDeduction,
    EquipmentEntry,
    ExpenseEntry,
    MonthlyEmployerExpense,
    MonthlySummary,
    TaxRateSet,
    TripAllowance,
    TripEntry,
    VehicleType,
    YearlySummary,
)
from .report_generator import YearlyReportGenerator
from .store import EntrySnapshot, EntryStore, InMemoryBackend, KeyValueBackend, StorageKey
from .tax_rates import DEFAULT_TAX_RATES, TAX_RATES_VERSION, resolve
from .yearly_summary import YearlySummaryBuilder, build_year, summarize_year

__all__ = [
    # Rates
    "resolve",
    "DEFAULT_TAX_RATES",
    "TAX_RATES_VERSION",
    "TaxRateSet",
    "CustomTaxRates",
    # Calculation
    "AllowanceCalculator",
    "trip_allowance",
    "trip_allowance_breakdown",
    "meal_allowance",
    "mileage_rate",
    "classify_equipment",
    "equipment_deduction",
    "trip_duration_hours",
    "MonthlyAggregator",
    "aggregate",
    "YearlySummaryBuilder",
    "build_year",
    "summarize_year",
    # Models
    "VehicleType",
    "DurationTier",
    "TripEntry",
    "EquipmentEntry",
    "ExpenseEntry",
    "MonthlyEmployerExpense",
    "DefaultCommute",
    "EquipmentClassification",
    "EquipmentDeduction",
    "TripAllowance",
    "MonthlySummary",
    "YearlySummary",
    # State and persistence
    "EntryStore",
    "EntrySnapshot",
    "StorageKey",
    "KeyValueBackend",
    "InMemoryBackend",
    "ExportData",
    "ExportSettings",
    "export_to_json",
    "import_from_json",
    "create_backup_data",
    "validate_backup",
    "parse_backup",
    "restore_backup",
    # Reporting
    "YearlyReportGenerator",
    # Errors
    "FleetProTaxError",
    "ValidationError",
    "ImportDataError",
    "ConfigurationError",
    "EntryNotFoundError",
]
