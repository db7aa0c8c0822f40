import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tradequote.api.deps import require_manage_users, require_roles
from tradequote.api.routes.catalog import service_out, set_user_specialties
from tradequote.core.permissions import Permissions, RequestContext, Role, company_ceiling
from tradequote.core.security import get_password_hash
from tradequote.db.session import get_db
from tradequote.models.company_user import CompanyUser
from tradequote.models.service import Service
from tradequote.models.user import User
from tradequote.schemas.catalog import ActiveUpdate, PasswordReset, ServicePricingUpdate, SpecialtyIds
from tradequote.schemas.permissions import PermissionsPatch
from tradequote.services.access import assigned_specialty_ids, get_company_ceiling, get_membership
from tradequote.services.audit import log_audit

logger = logging.getLogger(__name__)

router = APIRouter()


def member_out(db: Session, m: CompanyUser) -> dict:
    user = db.get(User, m.user_id)
    role = Role.parse(m.role)
    return {
        "user_id": m.user_id,
        "username": user.username if user else None,
        "role": m.role,
        "is_active": m.is_active,
        "permissions": company_ceiling(role, Permissions.from_row(m)).as_dict(),
        "specialty_ids": sorted(assigned_specialty_ids(db, m.user_id, m.company_id)),
    }


def load_member(db: Session, company_id: int, user_id: int) -> CompanyUser:
    """Membership in the caller's company or 404; other companies' users are invisible."""
    m = get_membership(db, company_id, user_id)
    if not m:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found in company")
    return m


@router.get("/users", response_model=list[dict])
def list_users(ctx: RequestContext = Depends(require_manage_users), db: Session = Depends(get_db)):
    rows = db.query(CompanyUser).filter(CompanyUser.company_id == ctx.company_id).order_by(CompanyUser.id).all()
    return [member_out(db, m) for m in rows]


@router.get("/users/{user_id}/permissions", response_model=dict)
def get_user_permissions(user_id: int, ctx: RequestContext = Depends(require_manage_users), db: Session = Depends(get_db)):
    m = load_member(db, ctx.company_id, user_id)
    return {"user_id": user_id, "role": m.role, "permissions": Permissions.from_row(m).as_dict()}


@router.patch("/users/{user_id}/permissions", response_model=dict)
def update_user_permissions(
    user_id: int,
    payload: PermissionsPatch,
    ctx: RequestContext = Depends(require_manage_users),
    db: Session = Depends(get_db),
):
    m = load_member(db, ctx.company_id, user_id)
    if m.role == Role.OWNER.value and ctx.role is not Role.OWNER:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the owner can change owner permissions")
    updated = payload.apply(Permissions.from_row(m))
    updated.apply_to(m)
    log_audit(db, ctx.company_id, ctx.user_id, "PERMISSIONS_UPDATED", meta={"user_id": user_id, **updated.as_dict()})
    db.commit()
    return {"user_id": user_id, "role": m.role, "permissions": updated.as_dict()}


@router.patch("/users/{user_id}/active", response_model=dict)
def set_user_active(user_id: int, payload: ActiveUpdate, ctx: RequestContext = Depends(require_manage_users), db: Session = Depends(get_db)):
    if user_id == ctx.user_id:
        raise HTTPException(status_code=400, detail="Cannot change your own active state")
    m = load_member(db, ctx.company_id, user_id)
    if m.role == Role.OWNER.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot deactivate the owner")
    m.is_active = payload.is_active
    log_audit(db, ctx.company_id, ctx.user_id, "USER_ACTIVE_CHANGED", meta={"user_id": user_id, "is_active": payload.is_active})
    db.commit()
    return member_out(db, m)


@router.patch("/users/{user_id}/reset-password", response_model=dict)
def reset_password(user_id: int, payload: PasswordReset, ctx: RequestContext = Depends(require_manage_users), db: Session = Depends(get_db)):
    m = load_member(db, ctx.company_id, user_id)
    if m.role == Role.OWNER.value and ctx.role is not Role.OWNER:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the owner can reset the owner password")
    user = db.get(User, user_id)
    user.hashed_password = get_password_hash(payload.new_password)
    log_audit(db, ctx.company_id, ctx.user_id, "PASSWORD_RESET", meta={"user_id": user_id})
    db.commit()
    return {"ok": True}


@router.get("/users/{user_id}/specialties", response_model=dict)
def get_user_specialties(
    user_id: int,
    ctx: RequestContext = Depends(require_roles(Role.OWNER, Role.ADMIN)),
    db: Session = Depends(get_db),
):
    load_member(db, ctx.company_id, user_id)
    return {"user_id": user_id, "specialty_ids": sorted(assigned_specialty_ids(db, user_id, ctx.company_id))}


@router.put("/users/{user_id}/specialties", response_model=dict)
def put_user_specialties(
    user_id: int,
    payload: SpecialtyIds,
    ctx: RequestContext = Depends(require_roles(Role.OWNER, Role.ADMIN)),
    db: Session = Depends(get_db),
):
    load_member(db, ctx.company_id, user_id)
    saved = set_user_specialties(db, ctx.company_id, user_id, payload.specialty_ids)
    log_audit(db, ctx.company_id, ctx.user_id, "USER_SPECIALTIES_UPDATED", meta={"user_id": user_id, "specialty_ids": saved})
    db.commit()
    return {"user_id": user_id, "specialty_ids": saved}


@router.patch("/services/{service_id}/pricing", response_model=dict)
def update_service_pricing(
    service_id: int,
    payload: ServicePricingUpdate,
    ctx: RequestContext = Depends(require_manage_users),
    db: Session = Depends(get_db),
):
    if not get_company_ceiling(db, ctx).can_edit_prices:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot edit prices")
    service = db.get(Service, service_id)
    if not service or service.company_id != ctx.company_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")
    service.pricing_unit = payload.pricing_unit
    service.unit_price = payload.unit_price
    log_audit(db, ctx.company_id, ctx.user_id, "SERVICE_PRICE_UPDATED", meta={"service_id": service_id, "unit_price": payload.unit_price})
    db.commit()
    db.refresh(service)
    return service_out(service)
