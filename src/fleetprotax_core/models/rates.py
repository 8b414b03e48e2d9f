"""Tax rate models.

``TaxRateSet`` is the fully populated, effective rate set handed to the
calculators. ``CustomTaxRates`` is the partial override record a user keeps
in their settings; any field may be missing.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


RATE_FIELDS: tuple[str, ...] = (
    "meal_rate_8h",
    "meal_rate_24h",
    "mileage_rate_car",
    "mileage_rate_motorcycle",
    "mileage_rate_bike",
    "gwg_limit",
)

# Persisted settings use the camelCase names
RATE_FIELD_ALIASES: dict[str, str] = {
    "meal_rate_8h": "mealRate8h",
    "meal_rate_24h": "mealRate24h",
    "mileage_rate_car": "mileageRateCar",
    "mileage_rate_motorcycle": "mileageRateMotorcycle",
    "mileage_rate_bike": "mileageRateBike",
    "gwg_limit": "gwgLimit",
}


class TaxRateSet(BaseModel):
    """Effective tax rates for one computation.

    Every field is populated and positive. Build one with
    ``tax_rates.resolve()`` rather than by hand.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    meal_rate_8h: Decimal = Field(
        gt=Decimal("0"),
        alias="mealRate8h",
        description="Meal allowance for trips of at least 8 hours",
    )
    meal_rate_24h: Decimal = Field(
        gt=Decimal("0"),
        alias="mealRate24h",
        description="Meal allowance for trips of 24 hours or more",
    )
    mileage_rate_car: Decimal = Field(gt=Decimal("0"), alias="mileageRateCar")
    mileage_rate_motorcycle: Decimal = Field(gt=Decimal("0"), alias="mileageRateMotorcycle")
    mileage_rate_bike: Decimal = Field(gt=Decimal("0"), alias="mileageRateBike")
    gwg_limit: Decimal = Field(
        gt=Decimal("0"),
        alias="gwgLimit",
        description="Low-value asset threshold (Geringwertige Wirtschaftsgüter)",
    )


class CustomTaxRates(BaseModel):
    """User overrides for individual rates.

    Values are kept as entered; the resolver decides per field whether an
    override is usable (present and positive) or falls back to the default.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    meal_rate_8h: Optional[Decimal] = Field(default=None, alias="mealRate8h")
    meal_rate_24h: Optional[Decimal] = Field(default=None, alias="mealRate24h")
    mileage_rate_car: Optional[Decimal] = Field(default=None, alias="mileageRateCar")
    mileage_rate_motorcycle: Optional[Decimal] = Field(default=None, alias="mileageRateMotorcycle")
    mileage_rate_bike: Optional[Decimal] = Field(default=None, alias="mileageRateBike")
    gwg_limit: Optional[Decimal] = Field(default=None, alias="gwgLimit")
