"""German travel and work equipment tax rates.

This module holds the statutory default rates used for deducting business
travel (Verpflegungsmehraufwand, Kilometerpauschale) and low-value work
equipment (GWG), and resolves a user's partial overrides against them.

Sources:
- Meal allowances: § 9 Abs. 4a EStG
- Mileage rates: § 9 Abs. 1 Satz 3 Nr. 4a EStG, BRKG § 5
- GWG limit: § 6 Abs. 2 EStG (952 EUR gross = 800 EUR net + 19% VAT)

Updated: 2025 (valid for tax years 2025 and 2026)
"""

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

import structlog

from .models.entries import VehicleType
from .models.rates import RATE_FIELD_ALIASES, RATE_FIELDS, CustomTaxRates, TaxRateSet

logger = structlog.get_logger()


# =============================================================================
# VERSION TRACKING
# =============================================================================

TAX_RATES_VERSION = "DE-2025"
EFFECTIVE_DATE = "2025-01-01"


def get_tax_rates_version() -> str:
    """Return current tax rates version."""
    return TAX_RATES_VERSION


# =============================================================================
# DEFAULT RATES
# =============================================================================

# Meal allowance per trip day
MEAL_RATE_8H = Decimal("14.00")
MEAL_RATE_24H = Decimal("28.00")

# Per kilometre
MILEAGE_RATE_CAR = Decimal("0.30")
MILEAGE_RATE_MOTORCYCLE = Decimal("0.20")
MILEAGE_RATE_BIKE = Decimal("0.05")

GWG_LIMIT = Decimal("952.00")

# Duration thresholds in hours; each tier includes its lower bound
PARTIAL_DAY_HOURS = Decimal("8")
FULL_DAY_HOURS = Decimal("24")

DEFAULT_TAX_RATES = TaxRateSet(
    meal_rate_8h=MEAL_RATE_8H,
    meal_rate_24h=MEAL_RATE_24H,
    mileage_rate_car=MILEAGE_RATE_CAR,
    mileage_rate_motorcycle=MILEAGE_RATE_MOTORCYCLE,
    mileage_rate_bike=MILEAGE_RATE_BIKE,
    gwg_limit=GWG_LIMIT,
)

MILEAGE_RATE_FIELD_BY_VEHICLE: dict[VehicleType, str] = {
    VehicleType.CAR: "mileage_rate_car",
    VehicleType.MOTORCYCLE: "mileage_rate_motorcycle",
    VehicleType.BIKE: "mileage_rate_bike",
}


def get_default_rate(field: str) -> Decimal:
    """Get the statutory default for a single rate field.

    Args:
        field: snake_case rate field name (see ``RATE_FIELDS``)

    Returns:
        Default rate as Decimal
    """
    return getattr(DEFAULT_TAX_RATES, field)


# =============================================================================
# RESOLUTION
# =============================================================================

CustomRatesInput = Union[CustomTaxRates, Mapping[str, Any], None]


def _as_positive_decimal(value: Any) -> Optional[Decimal]:
    """Convert an override value to a positive Decimal, or None if unusable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        candidate = value
    else:
        try:
            candidate = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
    if not candidate.is_finite() or candidate <= 0:
        return None
    return candidate


def _override_for(custom_rates: CustomRatesInput, field: str) -> Any:
    if custom_rates is None:
        return None
    if isinstance(custom_rates, CustomTaxRates):
        return getattr(custom_rates, field)
    if field in custom_rates:
        return custom_rates[field]
    return custom_rates.get(RATE_FIELD_ALIASES[field])


def resolve(custom_rates: CustomRatesInput = None) -> TaxRateSet:
    """Merge user overrides with the defaults into one effective rate set.

    Each field is resolved on its own: the override is used when it is
    present and a positive number, otherwise the default applies. A user can
    change only the bike rate and keep every other default.

    Args:
        custom_rates: ``CustomTaxRates``, a mapping keyed by snake_case or
            camelCase field names, or None

    Returns:
        Fully populated TaxRateSet
    """
    resolved: dict[str, Decimal] = {}
    overridden: list[str] = []

    for field in RATE_FIELDS:
        override = _as_positive_decimal(_override_for(custom_rates, field))
        if override is None:
            resolved[field] = get_default_rate(field)
        else:
            resolved[field] = override
            overridden.append(field)

    if overridden:
        logger.debug("tax_rates_resolved", overridden=overridden, version=TAX_RATES_VERSION)

    return TaxRateSet(**resolved)
