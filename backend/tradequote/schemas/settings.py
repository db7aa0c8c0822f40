from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

class CompanySettingsUpdate(BaseModel):
    region_id: Optional[int] = None
    tax_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    overhead_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    profit_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
