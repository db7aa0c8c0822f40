from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from tradequote.schemas.jobs import UNIT_PATTERN

class PricingRuleIn(BaseModel):
    region_id: int
    trade_id: int
    specialty_id: Optional[int] = None
    unit: str = Field(pattern=UNIT_PATTERN)
    base_price: Decimal = Field(ge=0)
    anchor_multiplier: Decimal = Field(default=Decimal("1.15"), gt=0)
    material_multiplier: Optional[dict[str, float]] = None
    complexity_multiplier: Optional[dict[str, float]] = None
    enabled: bool = True

class PricingRuleUpdate(BaseModel):
    base_price: Optional[Decimal] = Field(default=None, ge=0)
    anchor_multiplier: Optional[Decimal] = Field(default=None, gt=0)
    material_multiplier: Optional[dict[str, float]] = None
    complexity_multiplier: Optional[dict[str, float]] = None
    enabled: Optional[bool] = None

class EstimateRequest(BaseModel):
    region_id: Optional[int] = None
    specialty_id: Optional[int] = None
    unit: str = Field(pattern=UNIT_PATTERN)
    length: Decimal = Field(default=Decimal("0"), ge=0)
    width: Decimal = Field(default=Decimal("0"), ge=0)
    quantity: Optional[Decimal] = Field(default=None, ge=0)
    material: str = Field(default="standard", pattern="^(basic|standard|premium)$")
    complexity: str = Field(default="normal", pattern="^(normal|hard)$")
