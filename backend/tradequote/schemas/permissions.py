from typing import Optional
from pydantic import BaseModel, ConfigDict

from tradequote.core.permissions import Permissions


class PermissionsIn(BaseModel):
    """Full permission record; absent flags are false."""
    model_config = ConfigDict(extra="forbid")

    can_manage_users: bool = False
    can_view_all_specialties: bool = False
    can_view_prices: bool = False
    can_edit_prices: bool = False
    can_audit: bool = False

    def to_permissions(self) -> Permissions:
        return Permissions(**self.model_dump())


class PermissionsPatch(BaseModel):
    """Partial update; omitted flags keep their stored value. Unknown flags are rejected."""
    model_config = ConfigDict(extra="forbid")

    can_manage_users: Optional[bool] = None
    can_view_all_specialties: Optional[bool] = None
    can_view_prices: Optional[bool] = None
    can_edit_prices: Optional[bool] = None
    can_audit: Optional[bool] = None

    def apply(self, current: Permissions) -> Permissions:
        return current.merge(**self.model_dump(exclude_none=True))
