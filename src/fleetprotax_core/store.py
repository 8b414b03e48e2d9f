"""Application-state container for a user's entry collections.

The ``EntryStore`` is the single owner of the canonical collections. The
calculation core never sees the store itself, only an ``EntrySnapshot``
of immutable tuples taken after an edit completes.

Durable storage is an external concern. The store can mirror itself to
any ``KeyValueBackend`` (one JSON string per ``StorageKey``) and load back
from one.

Usage:
    store = EntryStore()
    store.add_trip(TripEntry(date="2025-03-05", distance_km=120, duration_hours=10.5))
    store.set_employer_expense(2025, 2, Decimal("50"))

    snapshot = store.snapshot()
    summary = summarize_year(snapshot, store.effective_rates(), 2025)
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Protocol, TypeVar, runtime_checkable

import structlog
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .exceptions import EntryNotFoundError, ImportDataError
from .models import (
    CustomTaxRates,
    DefaultCommute,
    EquipmentEntry,
    ExpenseEntry,
    MonthlyEmployerExpense,
    TaxRateSet,
    TripEntry,
)
from .tax_rates import resolve

logger = structlog.get_logger()

EntryT = TypeVar("EntryT", TripEntry, EquipmentEntry, ExpenseEntry, MonthlyEmployerExpense)


class StorageKey(str, Enum):
    """Logical keys of the persisted record sets."""
    TRIP_ENTRIES = "tripEntries"
    EQUIPMENT_ENTRIES = "equipmentEntries"
    EXPENSE_ENTRIES = "expenseEntries"
    MONTHLY_EMPLOYER_EXPENSES = "monthlyEmployerExpenses"
    DEFAULT_COMMUTE = "defaultCommute"
    TAX_RATES = "taxRates"
    SELECTED_YEAR = "selectedYear"


@runtime_checkable
class KeyValueBackend(Protocol):
    """Durable string storage keyed by ``StorageKey`` values."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class InMemoryBackend:
    """Dict-backed ``KeyValueBackend``."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def keys(self) -> list[str]:
        return list(self._data)


class EntrySnapshot(BaseModel):
    """Immutable view of every collection at one point in time."""

    model_config = ConfigDict(frozen=True)

    trips: tuple[TripEntry, ...] = ()
    equipment: tuple[EquipmentEntry, ...] = ()
    expenses: tuple[ExpenseEntry, ...] = ()
    employer_expenses: tuple[MonthlyEmployerExpense, ...] = ()
    default_commute: DefaultCommute = Field(default_factory=DefaultCommute)
    custom_rates: CustomTaxRates = Field(default_factory=CustomTaxRates)
    selected_year: int = Field(default_factory=lambda: date.today().year)


_LIST_ADAPTERS: dict[StorageKey, TypeAdapter] = {
    StorageKey.TRIP_ENTRIES: TypeAdapter(list[TripEntry]),
    StorageKey.EQUIPMENT_ENTRIES: TypeAdapter(list[EquipmentEntry]),
    StorageKey.EXPENSE_ENTRIES: TypeAdapter(list[ExpenseEntry]),
    StorageKey.MONTHLY_EMPLOYER_EXPENSES: TypeAdapter(list[MonthlyEmployerExpense]),
}


def _unique_by_month(records: Iterable[MonthlyEmployerExpense]) -> list[MonthlyEmployerExpense]:
    """One record per (year, month); a later duplicate replaces the earlier one in place."""
    by_key: dict[tuple[int, int], MonthlyEmployerExpense] = {}
    total = 0
    for record in records:
        by_key[record.key] = record
        total += 1
    if total > len(by_key):
        logger.warning("employer_expense_duplicates_collapsed", dropped=total - len(by_key))
    return list(by_key.values())


class EntryStore:
    """
    Own the user's entries and settings and hand out snapshots.

    Edits are applied one at a time; every read used for a computation
    should go through ``snapshot()`` so the core works on a consistent,
    immutable copy.
    """

    def __init__(self, snapshot: Optional[EntrySnapshot] = None):
        snapshot = snapshot or EntrySnapshot()
        self._trips: list[TripEntry] = list(snapshot.trips)
        self._equipment: list[EquipmentEntry] = list(snapshot.equipment)
        self._expenses: list[ExpenseEntry] = list(snapshot.expenses)
        self._employer_expenses: list[MonthlyEmployerExpense] = _unique_by_month(
            snapshot.employer_expenses
        )
        self.default_commute: DefaultCommute = snapshot.default_commute
        self.custom_rates: CustomTaxRates = snapshot.custom_rates
        self.selected_year: int = snapshot.selected_year

    # -------------------------------------------------------------------------
    # Entries
    # -------------------------------------------------------------------------

    def add_trip(self, entry: TripEntry) -> TripEntry:
        self._trips.append(entry)
        logger.info("entry_added", collection=StorageKey.TRIP_ENTRIES.value, entry_id=entry.id)
        return entry

    def delete_trip(self, entry_id: str) -> TripEntry:
        return self._delete(self._trips, StorageKey.TRIP_ENTRIES, entry_id)

    def update_trip(self, entry_id: str, **changes: Any) -> TripEntry:
        """Replace a trip with a copy carrying ``changes``; the copy is re-validated."""
        return self._update(self._trips, StorageKey.TRIP_ENTRIES, entry_id, changes)

    def add_equipment(self, entry: EquipmentEntry) -> EquipmentEntry:
        self._equipment.append(entry)
        logger.info("entry_added", collection=StorageKey.EQUIPMENT_ENTRIES.value, entry_id=entry.id)
        return entry

    def delete_equipment(self, entry_id: str) -> EquipmentEntry:
        return self._delete(self._equipment, StorageKey.EQUIPMENT_ENTRIES, entry_id)

    def add_expense(self, entry: ExpenseEntry) -> ExpenseEntry:
        self._expenses.append(entry)
        logger.info("entry_added", collection=StorageKey.EXPENSE_ENTRIES.value, entry_id=entry.id)
        return entry

    def delete_expense(self, entry_id: str) -> ExpenseEntry:
        return self._delete(self._expenses, StorageKey.EXPENSE_ENTRIES, entry_id)

    def set_employer_expense(self, year: int, month: int, amount: Decimal) -> MonthlyEmployerExpense:
        """Record the employer reimbursement for a month, overwriting any earlier value."""
        for index, existing in enumerate(self._employer_expenses):
            if existing.key == (year, month):
                updated = MonthlyEmployerExpense(id=existing.id, year=year, month=month, amount=amount)
                self._employer_expenses[index] = updated
                logger.info("employer_expense_updated", year=year, month=month, amount=str(amount))
                return updated

        record = MonthlyEmployerExpense(year=year, month=month, amount=amount)
        self._employer_expenses.append(record)
        logger.info("employer_expense_added", year=year, month=month, amount=str(amount))
        return record

    def add_employer_expense(self, record: MonthlyEmployerExpense) -> MonthlyEmployerExpense:
        """Store ``record`` under its own id unless its month already has one."""
        if self.get_employer_expense(record.year, record.month) is not None:
            return self.set_employer_expense(record.year, record.month, record.amount)

        self._employer_expenses.append(record)
        logger.info(
            "employer_expense_added",
            year=record.year,
            month=record.month,
            amount=str(record.amount),
        )
        return record

    def delete_employer_expense(self, entry_id: str) -> MonthlyEmployerExpense:
        return self._delete(self._employer_expenses, StorageKey.MONTHLY_EMPLOYER_EXPENSES, entry_id)

    def get_employer_expense(self, year: int, month: int) -> Optional[MonthlyEmployerExpense]:
        for record in self._employer_expenses:
            if record.key == (year, month):
                return record
        return None

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    def set_custom_rates(self, custom_rates: CustomTaxRates) -> None:
        self.custom_rates = custom_rates

    def set_default_commute(self, commute: DefaultCommute) -> None:
        self.default_commute = commute

    def set_selected_year(self, year: int) -> None:
        self.selected_year = year

    def effective_rates(self) -> TaxRateSet:
        """Resolve the stored overrides against the defaults."""
        return resolve(self.custom_rates)

    # -------------------------------------------------------------------------
    # Snapshots and persistence
    # -------------------------------------------------------------------------

    def snapshot(self) -> EntrySnapshot:
        return EntrySnapshot(
            trips=tuple(self._trips),
            equipment=tuple(self._equipment),
            expenses=tuple(self._expenses),
            employer_expenses=tuple(self._employer_expenses),
            default_commute=self.default_commute,
            custom_rates=self.custom_rates,
            selected_year=self.selected_year,
        )

    def save(self, backend: KeyValueBackend) -> None:
        """Mirror every collection and setting to ``backend`` as JSON strings."""
        collections = {
            StorageKey.TRIP_ENTRIES: self._trips,
            StorageKey.EQUIPMENT_ENTRIES: self._equipment,
            StorageKey.EXPENSE_ENTRIES: self._expenses,
            StorageKey.MONTHLY_EMPLOYER_EXPENSES: self._employer_expenses,
        }
        for key, items in collections.items():
            backend.set(key.value, _LIST_ADAPTERS[key].dump_json(items, by_alias=True).decode())

        backend.set(StorageKey.DEFAULT_COMMUTE.value, self.default_commute.model_dump_json())
        backend.set(
            StorageKey.TAX_RATES.value,
            self.custom_rates.model_dump_json(by_alias=True, exclude_none=True),
        )
        backend.set(StorageKey.SELECTED_YEAR.value, json.dumps(self.selected_year))
        logger.info("store_saved", trips=len(self._trips), equipment=len(self._equipment))

    @classmethod
    def load(cls, backend: KeyValueBackend) -> "EntryStore":
        """Build a store from ``backend``; missing keys leave their defaults.

        Raises:
            ImportDataError: If a stored value cannot be parsed.
        """
        values: dict[str, Any] = {}
        field_by_key = {
            StorageKey.TRIP_ENTRIES: "trips",
            StorageKey.EQUIPMENT_ENTRIES: "equipment",
            StorageKey.EXPENSE_ENTRIES: "expenses",
            StorageKey.MONTHLY_EMPLOYER_EXPENSES: "employer_expenses",
        }

        try:
            for key, field in field_by_key.items():
                raw = backend.get(key.value)
                if raw is not None:
                    values[field] = tuple(_LIST_ADAPTERS[key].validate_json(raw))

            raw = backend.get(StorageKey.DEFAULT_COMMUTE.value)
            if raw is not None:
                values["default_commute"] = DefaultCommute.model_validate_json(raw)

            raw = backend.get(StorageKey.TAX_RATES.value)
            if raw is not None:
                values["custom_rates"] = CustomTaxRates.model_validate_json(raw)

            raw = backend.get(StorageKey.SELECTED_YEAR.value)
            if raw is not None:
                values["selected_year"] = json.loads(raw)

            snapshot = EntrySnapshot(**values)
        except (PydanticValidationError, ValueError) as e:
            raise ImportDataError(
                "Stored entries could not be loaded",
                source="key_value_backend",
                errors=[str(e)],
            ) from e

        logger.info("store_loaded", trips=len(snapshot.trips), equipment=len(snapshot.equipment))
        return cls(snapshot)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _find(items: list[EntryT], key: StorageKey, entry_id: str) -> int:
        for index, item in enumerate(items):
            if item.id == entry_id:
                return index
        raise EntryNotFoundError(
            f"No entry with id {entry_id!r} in {key.value}",
            collection=key.value,
            entry_id=entry_id,
        )

    def _delete(self, items: list[EntryT], key: StorageKey, entry_id: str) -> EntryT:
        removed = items.pop(self._find(items, key, entry_id))
        logger.info("entry_deleted", collection=key.value, entry_id=entry_id)
        return removed

    def _update(self, items: list[EntryT], key: StorageKey, entry_id: str, changes: dict[str, Any]) -> EntryT:
        index = self._find(items, key, entry_id)
        current = items[index]
        data = current.model_dump()
        data.update(changes)
        data["id"] = current.id
        updated = type(current).model_validate(data)
        items[index] = updated
        logger.info("entry_updated", collection=key.value, entry_id=entry_id, fields=sorted(changes))
        return updated
