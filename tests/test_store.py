"""Tests for the entry store and its persistence mirror."""

import json
from decimal import Decimal

import pytest

from fleetprotax_core import (
    CustomTaxRates,
    DefaultCommute,
    EntryNotFoundError,
    EntrySnapshot,
    EntryStore,
    ImportDataError,
    InMemoryBackend,
    KeyValueBackend,
    MonthlyEmployerExpense,
    StorageKey,
    aggregate,
    create_backup_data,
    import_from_json,
    resolve,
    restore_backup,
)
from fleetprotax_core.models import CommuteMode


@pytest.fixture
def store(march_trip, monitor, laptop, train_ticket) -> EntryStore:
    """Store holding one of each entry type."""
    store = EntryStore()
    store.add_trip(march_trip)
    store.add_equipment(monitor)
    store.add_equipment(laptop)
    store.add_expense(train_ticket)
    store.set_employer_expense(2025, 2, Decimal("50"))
    store.set_selected_year(2025)
    return store


class TestEmployerExpenses:
    """(year, month) uniqueness."""

    def test_second_write_overwrites(self):
        """Writing the same month twice keeps one record with the new amount."""
        store = EntryStore()
        first = store.set_employer_expense(2025, 4, Decimal("10"))
        second = store.set_employer_expense(2025, 4, Decimal("35"))

        employer = store.snapshot().employer_expenses
        assert len(employer) == 1
        assert employer[0].amount == Decimal("35")
        assert second.id == first.id

    def test_distinct_months_append(self):
        """Different months are separate records."""
        store = EntryStore()
        store.set_employer_expense(2025, 4, Decimal("10"))
        store.set_employer_expense(2025, 5, Decimal("10"))
        store.set_employer_expense(2026, 4, Decimal("10"))

        assert len(store.snapshot().employer_expenses) == 3

    def test_get_employer_expense(self, store):
        """Lookup by (year, month)."""
        assert store.get_employer_expense(2025, 2).amount == Decimal("50")
        assert store.get_employer_expense(2025, 3) is None

    def test_add_keeps_caller_id(self):
        """A record for a new month is stored under its own id."""
        store = EntryStore()
        record = MonthlyEmployerExpense(id="emp-jan", year=2025, month=0, amount=Decimal("10"))

        assert store.add_employer_expense(record).id == "emp-jan"
        assert store.get_employer_expense(2025, 0).id == "emp-jan"

    def test_add_existing_month_keeps_stored_id(self):
        """Adding for a month that already has a record updates that record."""
        store = EntryStore()
        first = store.set_employer_expense(2025, 0, Decimal("10"))
        added = store.add_employer_expense(
            MonthlyEmployerExpense(id="other", year=2025, month=0, amount=Decimal("30"))
        )

        assert added.id == first.id
        assert len(store.snapshot().employer_expenses) == 1
        assert store.get_employer_expense(2025, 0).amount == Decimal("30")

    def test_negative_amount_rejected(self):
        """Negative reimbursements never enter the store."""
        with pytest.raises(ValueError):
            EntryStore().set_employer_expense(2025, 1, Decimal("-1"))


DUPLICATE_JANUARY = (
    '[{"id": "a", "year": 2025, "month": 0, "amount": 10},'
    ' {"id": "b", "year": 2025, "month": 0, "amount": 25},'
    ' {"id": "c", "year": 2025, "month": 1, "amount": 5}]'
)


class TestDuplicateEmployerRecords:
    """Duplicates arriving from outside collapse to one record per month."""

    def assert_edit_reaches_aggregate(self, store: EntryStore):
        snapshot = store.snapshot()
        assert [(r.key, r.amount) for r in snapshot.employer_expenses] == [
            ((2025, 0), Decimal("25")),
            ((2025, 1), Decimal("5")),
        ]

        store.set_employer_expense(2025, 0, Decimal("40"))
        snapshot = store.snapshot()
        january = aggregate([], [], [], snapshot.employer_expenses, resolve(), 2025)[0]

        assert len(snapshot.employer_expenses) == 2
        assert store.get_employer_expense(2025, 0).amount == Decimal("40")
        assert january.employer_amount == Decimal("40")

    def test_from_snapshot(self):
        """The last duplicate wins when building from a snapshot."""
        records = tuple(
            MonthlyEmployerExpense(id=i, year=2025, month=m, amount=Decimal(a))
            for i, m, a in (("a", 0, "10"), ("b", 0, "25"), ("c", 1, "5"))
        )
        store = EntryStore(EntrySnapshot(employer_expenses=records))

        assert store.get_employer_expense(2025, 0).id == "b"
        self.assert_edit_reaches_aggregate(store)

    def test_from_backend(self):
        """Loading stored duplicates keeps only the last one per month."""
        backend = InMemoryBackend({StorageKey.MONTHLY_EMPLOYER_EXPENSES.value: DUPLICATE_JANUARY})
        self.assert_edit_reaches_aggregate(EntryStore.load(backend))

    def test_from_import(self):
        """Imported exports with duplicates behave like a single record."""
        data = import_from_json(f'{{"monthlyEmployerExpenses": {DUPLICATE_JANUARY}}}')
        self.assert_edit_reaches_aggregate(EntryStore(data.to_snapshot()))

    def test_from_backup(self):
        """Restored backups with duplicates behave like a single record."""
        data = import_from_json(f'{{"monthlyEmployerExpenses": {DUPLICATE_JANUARY}}}')
        text = json.dumps(create_backup_data(data))

        self.assert_edit_reaches_aggregate(EntryStore(restore_backup(text).to_snapshot()))


class TestEntries:
    """Adding, updating and deleting entries."""

    def test_delete(self, store):
        """Deleting removes the entry and returns it."""
        removed = store.delete_equipment("eq-monitor")

        assert removed.id == "eq-monitor"
        assert [e.id for e in store.snapshot().equipment] == ["eq-laptop"]

    def test_delete_unknown_raises(self, store):
        """Unknown ids raise EntryNotFoundError."""
        with pytest.raises(EntryNotFoundError) as exc_info:
            store.delete_trip("missing")

        assert exc_info.value.collection == StorageKey.TRIP_ENTRIES.value
        assert exc_info.value.entry_id == "missing"

    def test_update_trip(self, store):
        """Updates produce a re-validated copy under the same id."""
        updated = store.update_trip("trip-march", distance_km=Decimal("200"))

        assert updated.id == "trip-march"
        assert updated.distance_km == Decimal("200")
        assert store.snapshot().trips[0].distance_km == Decimal("200")

    def test_update_trip_revalidates(self, store):
        """Invalid updates are rejected and leave the entry unchanged."""
        with pytest.raises(ValueError):
            store.update_trip("trip-march", distance_km=Decimal("-5"))

        assert store.snapshot().trips[0].distance_km == Decimal("120")


class TestSnapshot:
    """Snapshots are immutable copies."""

    def test_snapshot_not_affected_by_later_edits(self, store, march_trip):
        """Edits after taking a snapshot do not leak into it."""
        snapshot = store.snapshot()
        store.delete_trip(march_trip.id)

        assert len(snapshot.trips) == 1
        assert len(store.snapshot().trips) == 0

    def test_snapshot_collections_are_tuples(self, store):
        """Collections cannot be mutated through the snapshot."""
        snapshot = store.snapshot()
        assert isinstance(snapshot.trips, tuple)
        assert isinstance(snapshot.employer_expenses, tuple)

    def test_store_from_snapshot(self, store):
        """A store rebuilt from a snapshot has the same content."""
        assert EntryStore(store.snapshot()).snapshot() == store.snapshot()


class TestSettings:
    """Rates and commute settings."""

    def test_effective_rates(self, store):
        """Stored overrides resolve against the defaults."""
        store.set_custom_rates(CustomTaxRates(mileage_rate_bike=Decimal("0.10")))
        assert store.effective_rates() == resolve({"mileage_rate_bike": "0.10"})

    def test_default_commute(self, store):
        """Commute settings are kept as given."""
        commute = DefaultCommute(bike=CommuteMode(active=True, distance=Decimal("12")))
        store.set_default_commute(commute)

        assert store.snapshot().default_commute == commute


class TestPersistence:
    """Mirroring to a key-value backend."""

    def test_backend_protocol(self):
        """InMemoryBackend satisfies KeyValueBackend."""
        assert isinstance(InMemoryBackend(), KeyValueBackend)

    def test_save_writes_every_key(self, store):
        """One record set is written per storage key."""
        backend = InMemoryBackend()
        store.save(backend)

        assert set(backend.keys()) == {key.value for key in StorageKey}

    def test_save_load_round_trip(self, store):
        """Loading what was saved restores the same snapshot."""
        store.set_custom_rates(CustomTaxRates(gwg_limit=Decimal("1000")))
        backend = InMemoryBackend()
        store.save(backend)

        loaded = EntryStore.load(backend)
        assert loaded.snapshot() == store.snapshot()

    def test_load_empty_backend(self):
        """Missing keys leave defaults in place."""
        loaded = EntryStore.load(InMemoryBackend())

        assert loaded.snapshot().trips == ()
        assert loaded.effective_rates() == resolve()

    def test_load_legacy_numeric_ids(self):
        """Records written with numeric ids load with string ids."""
        backend = InMemoryBackend({
            StorageKey.EXPENSE_ENTRIES.value:
                '[{"id": 1735689600000, "date": "2025-01-01", "amount": 12.5}]',
        })
        loaded = EntryStore.load(backend)

        assert loaded.snapshot().expenses[0].id == "1735689600000"

    def test_load_corrupt_value(self):
        """Unparseable stored data raises ImportDataError."""
        backend = InMemoryBackend({StorageKey.TRIP_ENTRIES.value: "not json"})

        with pytest.raises(ImportDataError):
            EntryStore.load(backend)
