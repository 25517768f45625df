# backoffice/services/inventory_services/unit_conversion.py
"""
Purchase presentation -> usage unit conversion and per-usage-unit cost (WAC).

A "Saco 50 kg" bought for 100.000 becomes 50.000 g at 2 per g. Recipes and
stock always work in usage units (g, ml, unidad).
"""
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from backoffice.models.inventory_models import UsageUnit
from backoffice.utils.decimal_utils import as_number, round2

# input unit -> (usage unit, multiplier)
UNIT_TABLE = {
    "kg": (UsageUnit.g, 1000),
    "lb": (UsageUnit.g, 453.59),
    "g": (UsageUnit.g, 1),
    "l": (UsageUnit.ml, 1000),
    "ml": (UsageUnit.ml, 1),
    "gal": (UsageUnit.ml, 3785.41),
    "fl oz": (UsageUnit.ml, 29.5735),
}
DISCRETE = (UsageUnit.unidad, 1)

BUYING_UNIT_PATTERN = re.compile(r"^(.+?)\s+(\d+(\.\d+)?)\s*([a-zA-Z\s]+)$")


@dataclass(frozen=True)
class UnitConversion:
    buying_unit: str
    conversion_factor: float
    usage_unit: UsageUnit
    unit_cost: Optional[float] = None


@dataclass(frozen=True)
class Presentation:
    name: str
    content: float
    unit: str


MANUAL_PRESENTATION = Presentation(name="Manual", content=1, unit="unidad")


def normalize_unit(unit: Optional[str]) -> str:
    return " ".join((unit or "").lower().split())


def format_quantity(value: float) -> str:
    """50.0 -> '50', 2.5 -> '2.5', never in exponent notation."""
    if float(value).is_integer():
        return str(int(value))
    return f"{Decimal(str(value)).normalize():f}"


def compute_unit_conversion(
    presentation_name: str,
    content,
    unit: Optional[str],
    package_cost=None,
    current_unit_cost: Optional[float] = None,
) -> UnitConversion:
    """
    Derive usage unit, conversion factor and (when a package cost is given)
    the cost per usage unit. Without a positive package cost the stored unit
    cost is kept as is.
    """
    content = as_number(content)
    usage_unit, multiplier = UNIT_TABLE.get(normalize_unit(unit), DISCRETE)
    conversion_factor = round2(content * multiplier)

    unit_cost = current_unit_cost
    cost = as_number(package_cost)
    if cost > 0 and conversion_factor > 0:
        unit_cost = round2(cost / conversion_factor)

    label_unit = (unit or "").strip()
    return UnitConversion(
        buying_unit=f"{presentation_name} {format_quantity(content)}{label_unit}",
        conversion_factor=conversion_factor,
        usage_unit=usage_unit,
        unit_cost=unit_cost,
    )


def parse_buying_unit(buying_unit: Optional[str]) -> Presentation:
    """
    Best-effort recovery of "Bulto 10kg" into its parts for legacy rows that
    only stored the display string. Anything else falls back to Manual/1/unidad.
    """
    match = BUYING_UNIT_PATTERN.match((buying_unit or "").strip())
    if not match:
        return MANUAL_PRESENTATION
    return Presentation(
        name=match.group(1),
        content=float(match.group(2)),
        unit=match.group(4).strip(),
    )


def presentation_cost(unit_cost, conversion_factor) -> float:
    """Package cost restored from the per-usage-unit cost."""
    return round2(as_number(unit_cost) * as_number(conversion_factor))


def to_usage_quantity(presentation_qty, conversion_factor) -> float:
    return as_number(presentation_qty) * as_number(conversion_factor)


def weighted_average_cost(current_stock, current_unit_cost, received_qty, received_unit_cost) -> float:
    """
    New cost per usage unit after receiving stock. Negative or empty stock on
    hand carries no value, so the received cost replaces it.
    """
    stock = max(0.0, as_number(current_stock))
    received = as_number(received_qty)
    if received <= 0:
        return round2(current_unit_cost)
    total = stock + received
    value = stock * as_number(current_unit_cost) + received * as_number(received_unit_cost)
    return round2(value / total)
