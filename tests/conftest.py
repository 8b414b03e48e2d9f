"""Shared fixtures for fleetprotax-core tests."""

from datetime import date
from decimal import Decimal

import pytest

from fleetprotax_core import (
    DEFAULT_TAX_RATES,
    EquipmentEntry,
    ExpenseEntry,
    MonthlyEmployerExpense,
    TaxRateSet,
    TripEntry,
    VehicleType,
)


@pytest.fixture
def rates() -> TaxRateSet:
    """Statutory default rates."""
    return DEFAULT_TAX_RATES


@pytest.fixture
def march_trip() -> TripEntry:
    """Car trip on 2025-03-05: 10.5 hours, 120 km."""
    return TripEntry(
        id="trip-march",
        trip_date=date(2025, 3, 5),
        vehicle_type=VehicleType.CAR,
        distance_km=Decimal("120"),
        duration_hours=Decimal("10.5"),
        destination="Kunde A",
    )


@pytest.fixture
def march_employer_expense() -> MonthlyEmployerExpense:
    """Employer reimbursement of 50.00 for March 2025."""
    return MonthlyEmployerExpense(year=2025, month=2, amount=Decimal("50.0"))


@pytest.fixture
def monitor() -> EquipmentEntry:
    """Monitor bought in January 2025, below the GWG limit."""
    return EquipmentEntry(
        id="eq-monitor",
        purchase_date=date(2025, 1, 5),
        cost=Decimal("300"),
        description="Monitor",
        category="Elektronik",
    )


@pytest.fixture
def laptop() -> EquipmentEntry:
    """Laptop bought in June 2025, above the GWG limit."""
    return EquipmentEntry(
        id="eq-laptop",
        purchase_date=date(2025, 6, 1),
        cost=Decimal("1200"),
        description="Laptop",
        category="Elektronik",
        receipt_ref="receipt_1717200000000.jpg",
    )


@pytest.fixture
def train_ticket() -> ExpenseEntry:
    """Train ticket in April 2025."""
    return ExpenseEntry(
        id="exp-train",
        expense_date=date(2025, 4, 10),
        category="transport",
        amount=Decimal("39.90"),
        description="Bahnticket",
        receipt_ref="receipt_ticket.pdf",
    )
