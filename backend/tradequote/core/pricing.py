# Price estimate math and job rollup

from dataclasses import dataclass, asdict
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

CENTS = Decimal("0.01")

ANCHOR_MULTIPLIER_DEFAULT = Decimal("1.15")

PRICING_UNITS = ("EA", "LF", "SF", "SQ", "HR", "JOB")


class MaterialTier(str, Enum):
    BASIC = "basic"
    STANDARD = "standard"
    PREMIUM = "premium"


class Complexity(str, Enum):
    NORMAL = "normal"
    HARD = "hard"


MATERIAL_MULTIPLIERS_DEFAULT = {"basic": 1.0, "standard": 1.15, "premium": 1.35}
COMPLEXITY_MULTIPLIERS_DEFAULT = {"normal": 1.0, "hard": 1.2}


def to_decimal(value: Any, default: str = "0") -> Decimal:
    """Parse numbers and numeric strings; anything unparseable becomes ``default``."""
    if value is None or value == "":
        return Decimal(default)
    if isinstance(value, Decimal):
        return value
    try:
        # str() first so floats like 1.15 don't drag binary noise along
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal(default)


def round_cents(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def money(value: Any) -> Optional[str]:
    """Wire form of a price: a two-decimal string, or None when absent."""
    if value is None:
        return None
    return str(round_cents(to_decimal(value)))


def money_fields(row: Mapping[str, Any], fields: Iterable[str]) -> dict[str, Any]:
    out = dict(row)
    for field in fields:
        if field in out:
            out[field] = money(out[field])
    return out


def _multiplier(table: Optional[Mapping[str, Any]], key: str, fallback: Mapping[str, Any]) -> Decimal:
    table = table or {}
    if key in table and table[key] not in (None, ""):
        return to_decimal(table[key], "1")
    return to_decimal(fallback.get(key, 1), "1")


@dataclass
class PriceEstimate:
    base_price: Decimal
    anchor_multiplier: Decimal
    material_tier: str
    material_multiplier: Decimal
    complexity: str
    complexity_multiplier: Decimal
    quantity: Decimal
    unit_price: Decimal
    total: Decimal
    low: Decimal
    high: Decimal

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def calculate_price(
    base_price: Any,
    quantity: Any = 1,
    material: MaterialTier | str = MaterialTier.STANDARD,
    complexity: Complexity | str = Complexity.NORMAL,
    anchor: Any = ANCHOR_MULTIPLIER_DEFAULT,
    material_multipliers: Optional[Mapping[str, Any]] = None,
    complexity_multipliers: Optional[Mapping[str, Any]] = None,
) -> PriceEstimate:
    """unit = base x anchor x material x complexity; total = unit x quantity.

    The low/high range uses the cheapest (basic, normal) and the priciest
    (premium, hard) combination. Rounding to cents happens on the outputs only.
    """
    material = MaterialTier(material).value
    complexity = Complexity(complexity).value
    base = to_decimal(base_price)
    qty = to_decimal(quantity)
    anchor_m = to_decimal(anchor, str(ANCHOR_MULTIPLIER_DEFAULT))
    if anchor_m == 0:
        anchor_m = ANCHOR_MULTIPLIER_DEFAULT

    mat_m = _multiplier(material_multipliers, material, MATERIAL_MULTIPLIERS_DEFAULT)
    comp_m = _multiplier(complexity_multipliers, complexity, COMPLEXITY_MULTIPLIERS_DEFAULT)
    low_m = (_multiplier(material_multipliers, "basic", MATERIAL_MULTIPLIERS_DEFAULT)
             * _multiplier(complexity_multipliers, "normal", COMPLEXITY_MULTIPLIERS_DEFAULT))
    high_m = (_multiplier(material_multipliers, "premium", MATERIAL_MULTIPLIERS_DEFAULT)
              * _multiplier(complexity_multipliers, "hard", COMPLEXITY_MULTIPLIERS_DEFAULT))

    unit = base * anchor_m * mat_m * comp_m
    return PriceEstimate(
        base_price=round_cents(base),
        anchor_multiplier=anchor_m,
        material_tier=material,
        material_multiplier=mat_m,
        complexity=complexity,
        complexity_multiplier=comp_m,
        quantity=qty,
        unit_price=round_cents(unit),
        total=round_cents(unit * qty),
        low=round_cents(base * anchor_m * low_m * qty),
        high=round_cents(base * anchor_m * high_m * qty),
    )


def quantity_for_unit(unit: str, length: Any = 0, width: Any = 0) -> Decimal:
    """Measured quantity for a pricing unit from simple dimensions (feet / hours)."""
    l = to_decimal(length)
    w = to_decimal(width)
    unit = (unit or "").upper()
    if unit == "SF":
        return l * w
    if unit == "SQ":
        # roofing square = 100 SF
        return l * w / Decimal(100)
    if unit == "LF":
        return l
    if unit in ("EA", "JOB"):
        return Decimal(1)
    if unit == "HR":
        return l if l > 0 else Decimal(1)
    return l * w


def line_total(qty: Any, unit_price: Any) -> Decimal:
    return round_cents(to_decimal(qty) * to_decimal(unit_price))


@dataclass
class JobTotals:
    subtotal: Decimal
    tax: Decimal
    overhead: Decimal
    profit: Decimal
    total: Decimal

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def job_totals(items: Iterable[Mapping[str, Any]], tax_rate: Any = 0, overhead_rate: Any = 0, profit_rate: Any = 0) -> JobTotals:
    """Roll up line items; rates are percentages applied to the subtotal."""
    subtotal = sum((to_decimal(i.get("qty")) * to_decimal(i.get("unit_price")) for i in items), Decimal(0))
    hundred = Decimal(100)
    tax = subtotal * to_decimal(tax_rate) / hundred
    overhead = subtotal * to_decimal(overhead_rate) / hundred
    profit = subtotal * to_decimal(profit_rate) / hundred
    return JobTotals(
        subtotal=round_cents(subtotal),
        tax=round_cents(tax),
        overhead=round_cents(overhead),
        profit=round_cents(profit),
        total=round_cents(subtotal + tax + overhead + profit),
    )
