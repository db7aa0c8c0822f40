from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field

from tradequote.core.access import JOB_STATUSES
from tradequote.core.pricing import PRICING_UNITS
from tradequote.schemas.permissions import PermissionsIn

JOB_STATUS_PATTERN = "^(" + "|".join(JOB_STATUSES) + ")$"
UNIT_PATTERN = "^(" + "|".join(PRICING_UNITS) + ")$"

class JobItemIn(BaseModel):
    service_id: Optional[int] = None
    qty: Decimal = Field(default=Decimal("1"), ge=0)
    unit_price: Decimal = Field(default=Decimal("0"), ge=0)
    pricing_unit: str = Field(default="EA", pattern=UNIT_PATTERN)

class JobCreate(BaseModel):
    client_name: str = ""
    client_phone: Optional[str] = None
    client_email: Optional[str] = None
    address: Optional[str] = None
    door_code: Optional[str] = None
    notes: Optional[str] = None
    specialty_id: Optional[int] = None
    status: str = Field(default="DRAFT", pattern=JOB_STATUS_PATTERN)
    scheduled_at: Optional[str] = None
    items: List[JobItemIn] = []

class JobUpdate(BaseModel):
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    client_email: Optional[str] = None
    address: Optional[str] = None
    door_code: Optional[str] = None
    notes: Optional[str] = None
    specialty_id: Optional[int] = None
    status: Optional[str] = Field(default=None, pattern=JOB_STATUS_PATTERN)
    scheduled_at: Optional[str] = None
    address_locked: Optional[bool] = None
    items: Optional[List[JobItemIn]] = None

class AssignmentIn(BaseModel):
    user_id: int
    permissions: Optional[PermissionsIn] = None

class EstimatePhotoIn(BaseModel):
    job_id: Optional[int] = None
    url: str = Field(min_length=1)
    notes: Optional[str] = None
