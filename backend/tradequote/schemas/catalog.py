from decimal import Decimal
from typing import List
from pydantic import BaseModel, Field

from tradequote.schemas.jobs import UNIT_PATTERN

class SpecialtyIds(BaseModel):
    specialty_ids: List[int]

class ServicePricingUpdate(BaseModel):
    pricing_unit: str = Field(pattern=UNIT_PATTERN)
    unit_price: Decimal = Field(ge=0)

class PasswordReset(BaseModel):
    new_password: str = Field(min_length=6)

class ActiveUpdate(BaseModel):
    is_active: bool
