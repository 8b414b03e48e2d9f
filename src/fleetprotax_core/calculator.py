"""Per-entry allowance calculations for German travel and equipment deductions.

This module computes what a single entry is worth as a deduction:

1. Trips - meal allowance by duration tier plus distance times the
   mileage rate of the vehicle used
2. Equipment - immediate deduction up to the GWG limit, otherwise flagged
   as depreciable

Every function is total over validated input: it never raises and never
mutates its arguments.
"""

from datetime import datetime
from decimal import Decimal

import structlog

from .models import (
    DurationTier,
    EquipmentClassification,
    EquipmentDeduction,
    EquipmentEntry,
    TaxRateSet,
    TripAllowance,
    TripEntry,
    VehicleType,
)
from .tax_rates import (
    FULL_DAY_HOURS,
    MILEAGE_RATE_FIELD_BY_VEHICLE,
    PARTIAL_DAY_HOURS,
    DEFAULT_TAX_RATES,
)

logger = structlog.get_logger()

ZERO = Decimal("0")
SECONDS_PER_HOUR = Decimal("3600")


def duration_tier_for(duration_hours: Decimal) -> DurationTier:
    """Map a trip duration to its meal allowance tier.

    Lower bounds are inclusive: exactly 8 hours is a partial day, exactly
    24 hours a full day.
    """
    if duration_hours >= FULL_DAY_HOURS:
        return DurationTier.FULL_DAY
    if duration_hours >= PARTIAL_DAY_HOURS:
        return DurationTier.PARTIAL_DAY
    return DurationTier.NONE


def meal_allowance_for_tier(tier: DurationTier, rates: TaxRateSet) -> Decimal:
    """Meal allowance amount for a duration tier."""
    if tier == DurationTier.FULL_DAY:
        return rates.meal_rate_24h
    if tier == DurationTier.PARTIAL_DAY:
        return rates.meal_rate_8h
    return ZERO


def meal_allowance(duration_hours: Decimal, rates: TaxRateSet) -> Decimal:
    """Meal allowance for a trip duration in hours.

    Args:
        duration_hours: Hours away, >= 0
        rates: Effective rate set

    Returns:
        0 below 8h, ``meal_rate_8h`` from 8h, ``meal_rate_24h`` from 24h
    """
    return meal_allowance_for_tier(duration_tier_for(duration_hours), rates)


def mileage_rate(vehicle_type: VehicleType, rates: TaxRateSet) -> Decimal:
    """Per-kilometre rate for a vehicle type.

    Public transport has no mileage rate; ticket costs belong in an
    expense entry.
    """
    field = MILEAGE_RATE_FIELD_BY_VEHICLE.get(vehicle_type)
    if field is None:
        return ZERO
    return getattr(rates, field)


def trip_tier(entry: TripEntry) -> DurationTier:
    """Duration tier of a trip; an explicit tier takes precedence over hours."""
    if entry.duration_tier is not None:
        return entry.duration_tier
    return duration_tier_for(entry.duration_hours or ZERO)


def trip_allowance_breakdown(entry: TripEntry, rates: TaxRateSet) -> TripAllowance:
    """Meal and mileage components of a trip's allowance."""
    meal = meal_allowance_for_tier(trip_tier(entry), rates)
    mileage = entry.distance_km * mileage_rate(entry.vehicle_type, rates)

    logger.debug(
        "trip_allowance",
        entry_id=entry.id,
        vehicle=entry.vehicle_type.value,
        meal=str(meal),
        mileage=str(mileage),
    )
    return TripAllowance(entry_id=entry.id, meal_allowance=meal, mileage_allowance=mileage)


def trip_allowance(entry: TripEntry, rates: TaxRateSet) -> Decimal:
    """Deductible amount for one trip: meal component plus mileage component."""
    return trip_allowance_breakdown(entry, rates).total


def classify_equipment(cost: Decimal, rates: TaxRateSet) -> EquipmentClassification:
    """Immediate deduction up to and including the GWG limit, depreciable above."""
    if cost <= rates.gwg_limit:
        return EquipmentClassification.IMMEDIATE
    return EquipmentClassification.DEPRECIABLE


def equipment_deduction(entry: EquipmentEntry, rates: TaxRateSet) -> EquipmentDeduction:
    """Classify an equipment purchase and compute its purchase-month deduction.

    Depreciable items deduct nothing here; they are flagged so the caller can
    schedule depreciation separately.
    """
    classification = classify_equipment(entry.cost, rates)
    deductible = entry.cost if classification == EquipmentClassification.IMMEDIATE else ZERO

    logger.debug(
        "equipment_deduction",
        entry_id=entry.id,
        cost=str(entry.cost),
        gwg_limit=str(rates.gwg_limit),
        classification=classification.value,
    )
    return EquipmentDeduction(
        entry_id=entry.id,
        classification=classification,
        cost=entry.cost,
        deductible_amount=deductible,
    )


def trip_duration_hours(start: datetime, end: datetime) -> Decimal:
    """Hours between departure and return; an end before the start counts as 0."""
    seconds = Decimal(str((end - start).total_seconds()))
    if seconds < 0:
        return ZERO
    return seconds / SECONDS_PER_HOUR


class AllowanceCalculator:
    """
    Calculate deductible allowances for trips and equipment.

    Binds one effective rate set so repeated calls share it. The
    calculator holds no other state; identical entries always produce
    identical results.
    """

    def __init__(self, rates: TaxRateSet = DEFAULT_TAX_RATES):
        """
        Initialize calculator with an effective rate set.

        Args:
            rates: Resolved rates (default: statutory defaults)
        """
        self.rates = rates

    def trip_allowance(self, entry: TripEntry) -> Decimal:
        return trip_allowance(entry, self.rates)

    def trip_breakdown(self, entry: TripEntry) -> TripAllowance:
        return trip_allowance_breakdown(entry, self.rates)

    def equipment_deduction(self, entry: EquipmentEntry) -> EquipmentDeduction:
        return equipment_deduction(entry, self.rates)
