"""Entry models for trips, equipment purchases, expenses and reimbursements.

These are the records a user creates. Validation happens here, at
construction time: negative distances, costs and amounts, malformed dates
and out-of-range months never make it into a model instance, so the
calculators can treat every entry as clean input.

Field names are snake_case; each field also accepts the camelCase key used
by persisted records and exports (e.g. ``distanceKm``, ``receiptFileName``).
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _new_entry_id() -> str:
    return uuid4().hex


class VehicleType(str, Enum):
    """Means of transport for a business trip."""
    CAR = "car"
    MOTORCYCLE = "motorcycle"
    BIKE = "bike"
    PUBLIC_TRANSPORT = "public_transport"


class DurationTier(str, Enum):
    """Meal allowance bracket of a trip.

    ``PARTIAL_DAY`` covers trips of at least 8 hours, ``FULL_DAY`` trips of
    24 hours or more.
    """
    NONE = "none"
    PARTIAL_DAY = "partial_day"
    FULL_DAY = "full_day"


class _EntryModel(BaseModel):
    """Shared configuration for all entry records."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("id", mode="before", check_fields=False)
    @classmethod
    def coerce_id_to_str(cls, v):
        """Accept numeric ids as written by older records."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class TripEntry(_EntryModel):
    """A single business trip.

    The meal component is driven by ``duration_hours`` or, when given, the
    explicit ``duration_tier``. The mileage component is ``distance_km``
    times the rate for ``vehicle_type``.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "id": "7f3c",
                    "date": "2025-03-05",
                    "vehicleType": "car",
                    "distanceKm": "120",
                    "durationHours": "10.5",
                    "destination": "Kunde A",
                }
            ]
        },
    )

    id: str = Field(default_factory=_new_entry_id)
    trip_date: date = Field(alias="date", description="Day the trip started")
    vehicle_type: VehicleType = Field(default=VehicleType.CAR, alias="vehicleType")
    distance_km: Decimal = Field(
        default=Decimal("0"),
        ge=Decimal("0"),
        alias="distanceKm",
        description="Kilometres driven for the trip",
    )
    duration_hours: Optional[Decimal] = Field(
        default=None,
        ge=Decimal("0"),
        alias="durationHours",
        description="Time away from home and first workplace, in hours",
    )
    duration_tier: Optional[DurationTier] = Field(
        default=None,
        alias="durationTier",
        description="Explicit meal allowance bracket; takes precedence over hours",
    )
    destination: Optional[str] = None
    purpose: Optional[str] = None
    receipt_ref: Optional[str] = Field(default=None, alias="receiptFileName")

    @model_validator(mode="after")
    def require_duration(self) -> "TripEntry":
        """A trip needs either a duration in hours or an explicit tier."""
        if self.duration_hours is None and self.duration_tier is None:
            raise ValueError("either duration_hours or duration_tier is required")
        return self

    @property
    def year(self) -> int:
        return self.trip_date.year

    @property
    def month(self) -> int:
        """Zero-based month index (0 = January)."""
        return self.trip_date.month - 1


class EquipmentEntry(_EntryModel):
    """A work equipment purchase, subject to the GWG threshold rule."""

    id: str = Field(default_factory=_new_entry_id)
    purchase_date: date = Field(alias="date")
    cost: Decimal = Field(ge=Decimal("0"), alias="price")
    description: str = Field(default="", alias="name")
    category: Optional[str] = None
    receipt_ref: Optional[str] = Field(default=None, alias="receiptFileName")

    @property
    def year(self) -> int:
        return self.purchase_date.year

    @property
    def month(self) -> int:
        """Zero-based month index (0 = January)."""
        return self.purchase_date.month - 1


class ExpenseEntry(_EntryModel):
    """A generic business expense, summed as-is."""

    id: str = Field(default_factory=_new_entry_id)
    expense_date: date = Field(alias="date")
    category: str = "other"
    amount: Decimal = Field(ge=Decimal("0"))
    description: str = ""
    receipt_ref: Optional[str] = Field(default=None, alias="receiptFileName")

    @property
    def year(self) -> int:
        return self.expense_date.year

    @property
    def month(self) -> int:
        """Zero-based month index (0 = January)."""
        return self.expense_date.month - 1


class MonthlyEmployerExpense(_EntryModel):
    """Reimbursement already paid by the employer for one month.

    ``(year, month)`` is the identity of this record; the store overwrites
    rather than appends on a second write for the same month.
    """

    id: str = Field(default_factory=_new_entry_id)
    year: int = Field(ge=1900, le=2100)
    month: int = Field(ge=0, le=11, description="Zero-based month index (0 = January)")
    amount: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))

    @property
    def key(self) -> tuple[int, int]:
        return (self.year, self.month)


class CommuteMode(BaseModel):
    """Default commute distance for one vehicle type."""

    model_config = ConfigDict(frozen=True)

    active: bool = False
    distance: Decimal = Field(default=Decimal("0"), ge=Decimal("0"))


class PublicTransportCommute(BaseModel):
    """Default public transport ticket cost."""

    model_config = ConfigDict(frozen=True)

    active: bool = False
    cost: Optional[Decimal] = Field(default=None, ge=Decimal("0"))

    @field_validator("cost", mode="before")
    @classmethod
    def blank_cost_is_none(cls, v):
        """Settings forms store an unset cost as an empty string."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class DefaultCommute(BaseModel):
    """Per-vehicle commute defaults used to prefill new trips."""

    model_config = ConfigDict(frozen=True)

    car: CommuteMode = Field(default_factory=lambda: CommuteMode(active=True))
    motorcycle: CommuteMode = Field(default_factory=CommuteMode)
    bike: CommuteMode = Field(default_factory=CommuteMode)
    public_transport: PublicTransportCommute = Field(default_factory=PublicTransportCommute)

    def active_vehicles(self) -> list[VehicleType]:
        """Vehicle types switched on in the commute settings."""
        active = [
            vehicle
            for vehicle, mode in (
                (VehicleType.CAR, self.car),
                (VehicleType.MOTORCYCLE, self.motorcycle),
                (VehicleType.BIKE, self.bike),
            )
            if mode.active
        ]
        if self.public_transport.active:
            active.append(VehicleType.PUBLIC_TRANSPORT)
        return active
