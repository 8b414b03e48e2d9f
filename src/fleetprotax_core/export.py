"""JSON export, import and backup of a user's record set.

Two payload shapes are supported:

1. Export - the entry collections and settings at the top level, plus
   ``exportDate``, ``version`` and ``format``. ``import_from_json``
   accepts exactly what ``export_to_json`` produces.
2. Backup - a versioned envelope (``app``, ``backup``, ``data``,
   ``metadata``) that is validated as a whole before anything is restored.

Receipts are carried by file name only; packaging receipt files into an
archive is left to the caller.
"""

import json
from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from . import __version__
from .exceptions import ImportDataError
from .models import (
    CustomTaxRates,
    DefaultCommute,
    EquipmentEntry,
    ExpenseEntry,
    MonthlyEmployerExpense,
    TripEntry,
    YearlySummary,
)
from .store import EntrySnapshot

logger = structlog.get_logger()

APP_NAME = "FleetProTax"
EXPORT_VERSION = "1.0.0"
EXPORT_FORMAT = "fleetprotax-export-v1"
BACKUP_VERSION = "1.0.0"
BACKUP_FORMAT = "fleetprotax-backup-v1"

REQUIRED_BACKUP_FIELDS = ("trips", "equipment", "expenses", "settings")


def _utc_now() -> datetime:
    """Return current UTC datetime with timezone info."""
    return datetime.now(timezone.utc)


# =============================================================================
# PAYLOAD MODELS
# =============================================================================

class ExportSettings(BaseModel):
    """User settings carried alongside the entries."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    tax_rates: CustomTaxRates = Field(default_factory=CustomTaxRates, alias="taxRates")
    default_commute: DefaultCommute = Field(default_factory=DefaultCommute, alias="defaultCommute")
    selected_year: Optional[int] = Field(default=None, alias="selectedYear")


class ExportData(BaseModel):
    """Entry collections and settings as exported and imported."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    trips: tuple[TripEntry, ...] = ()
    equipment: tuple[EquipmentEntry, ...] = ()
    expenses: tuple[ExpenseEntry, ...] = ()
    monthly_employer_expenses: tuple[MonthlyEmployerExpense, ...] = Field(
        default=(), alias="monthlyEmployerExpenses"
    )
    settings: ExportSettings = Field(default_factory=ExportSettings)

    @classmethod
    def from_snapshot(cls, snapshot: EntrySnapshot) -> "ExportData":
        return cls(
            trips=snapshot.trips,
            equipment=snapshot.equipment,
            expenses=snapshot.expenses,
            monthly_employer_expenses=snapshot.employer_expenses,
            settings=ExportSettings(
                tax_rates=snapshot.custom_rates,
                default_commute=snapshot.default_commute,
                selected_year=snapshot.selected_year,
            ),
        )

    def to_snapshot(self) -> EntrySnapshot:
        values: dict[str, Any] = {
            "trips": self.trips,
            "equipment": self.equipment,
            "expenses": self.expenses,
            "employer_expenses": self.monthly_employer_expenses,
            "default_commute": self.settings.default_commute,
            "custom_rates": self.settings.tax_rates,
        }
        if self.settings.selected_year is not None:
            values["selected_year"] = self.settings.selected_year
        return EntrySnapshot(**values)

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict using the persisted (camelCase) field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class BackupValidation(BaseModel):
    """Outcome of checking a backup envelope."""

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    version: str = "unknown"


class ParsedBackup(BaseModel):
    """A backup read from text; ``data`` is None when the JSON itself was broken."""

    is_valid: bool
    data: Optional[dict[str, Any]] = None
    metadata: Optional[dict[str, Any]] = None
    errors: list[str] = Field(default_factory=list)


# =============================================================================
# EXPORT / IMPORT
# =============================================================================

def export_to_json(
    data: ExportData,
    summary: Optional[YearlySummary] = None,
    now: Optional[datetime] = None,
) -> str:
    """Serialize entries and settings with export metadata.

    Args:
        data: Entry collections and settings
        summary: Optional year summary to embed for display in other tools;
            it is ignored on import
        now: Export timestamp (default: current UTC time)

    Returns:
        Indented JSON string
    """
    payload = data.to_payload()
    if summary is not None:
        payload["summary"] = summary.model_dump(mode="json")
    payload["exportDate"] = (now or _utc_now()).isoformat()
    payload["version"] = EXPORT_VERSION
    payload["format"] = EXPORT_FORMAT

    logger.info(
        "data_exported",
        trips=len(data.trips),
        equipment=len(data.equipment),
        expenses=len(data.expenses),
    )
    return json.dumps(payload, indent=2, ensure_ascii=False)


def import_from_json(json_string: str, source: Optional[str] = None) -> ExportData:
    """Parse an export produced by ``export_to_json``.

    Raises:
        ImportDataError: If the text is not JSON, not an object, or any
            record fails validation. Nothing is partially imported.
    """
    try:
        payload = json.loads(json_string)
    except json.JSONDecodeError as e:
        raise ImportDataError(
            f"Invalid JSON format: {e.msg}",
            source=source,
            errors=[str(e)],
        ) from e

    if not isinstance(payload, dict):
        raise ImportDataError(
            "Data must be a JSON object",
            source=source,
            errors=[f"Top-level value is {type(payload).__name__}"],
        )

    version = payload.get("version")
    if version is not None and version != EXPORT_VERSION:
        logger.warning("export_version_mismatch", found=version, expected=EXPORT_VERSION)

    try:
        data = ExportData.model_validate(payload)
    except PydanticValidationError as e:
        raise ImportDataError(
            "Export contains invalid records",
            source=source,
            errors=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()],
        ) from e

    logger.info("data_imported", trips=len(data.trips), equipment=len(data.equipment))
    return data


# =============================================================================
# BACKUP
# =============================================================================

def generate_backup_filename(now: Optional[datetime] = None) -> str:
    """Backup file name, e.g. ``FleetProTax-Backup-2025-03-05-14-30.json``."""
    return f"{APP_NAME}-Backup-{(now or datetime.now()).strftime('%Y-%m-%d-%H-%M')}.json"


def calculate_backup_metadata(data: ExportData) -> dict[str, Any]:
    """Entry counts, covered date range and receipt counts of a record set."""
    dates = sorted(
        [t.trip_date for t in data.trips]
        + [e.purchase_date for e in data.equipment]
        + [e.expense_date for e in data.expenses]
    )
    receipts = [
        entry.receipt_ref
        for entry in (*data.trips, *data.equipment, *data.expenses)
        if entry.receipt_ref
    ]

    return {
        "totalEntries": len(data.trips) + len(data.equipment) + len(data.expenses),
        "dateRange": {"start": dates[0].isoformat(), "end": dates[-1].isoformat()} if dates else None,
        "hasReceipts": bool(receipts),
        "receiptsCount": len(receipts),
    }


def create_backup_data(
    data: ExportData,
    platform: str = "python",
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """Wrap a record set in the versioned backup envelope."""
    return {
        "app": {"name": APP_NAME, "version": __version__, "platform": platform},
        "backup": {
            "version": BACKUP_VERSION,
            "createdAt": (now or _utc_now()).isoformat(),
            "format": BACKUP_FORMAT,
        },
        "data": data.to_payload(),
        "metadata": calculate_backup_metadata(data),
    }


def validate_backup(payload: Any) -> BackupValidation:
    """Check a backup envelope and report every problem found."""
    errors: list[str] = []

    if not payload or not isinstance(payload, dict):
        return BackupValidation(is_valid=False, errors=["Backup data is empty or not an object"])

    backup = payload.get("backup")
    if not isinstance(backup, dict) or not backup.get("version"):
        return BackupValidation(is_valid=False, errors=["Backup version is missing"])

    version = str(backup["version"])
    if version != BACKUP_VERSION:
        errors.append(f"Incompatible backup version: {version} (expected: {BACKUP_VERSION})")

    app = payload.get("app")
    if not isinstance(app, dict) or not app.get("name"):
        errors.append("App information is missing")

    data = payload.get("data")
    if not isinstance(data, dict):
        errors.append("Backup contains no data")
        return BackupValidation(is_valid=False, errors=errors, version=version)

    for field in REQUIRED_BACKUP_FIELDS:
        if field not in data:
            errors.append(f"Missing required field: {field}")

    return BackupValidation(is_valid=not errors, errors=errors, version=version)


def parse_backup(json_string: str) -> ParsedBackup:
    """Parse and validate backup text without raising."""
    try:
        parsed = json.loads(json_string)
    except json.JSONDecodeError as e:
        return ParsedBackup(is_valid=False, errors=[f"JSON parse error: {e.msg}"])

    validation = validate_backup(parsed)
    return ParsedBackup(
        is_valid=validation.is_valid,
        data=parsed if isinstance(parsed, dict) else None,
        metadata=parsed.get("metadata") if isinstance(parsed, dict) else None,
        errors=validation.errors,
    )


def restore_backup(json_string: str, source: Optional[str] = None) -> ExportData:
    """Validate backup text and return its typed record set.

    Raises:
        ImportDataError: If the envelope is invalid or any record fails
            validation.
    """
    parsed = parse_backup(json_string)
    if not parsed.is_valid or parsed.data is None:
        logger.warning("backup_rejected", source=source, errors=parsed.errors)
        raise ImportDataError("Backup is not valid", source=source, errors=parsed.errors)

    try:
        data = ExportData.model_validate(parsed.data["data"])
    except PydanticValidationError as e:
        raise ImportDataError(
            "Backup contains invalid records",
            source=source,
            errors=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()],
        ) from e

    logger.info("backup_restored", source=source, trips=len(data.trips))
    return data
