from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from tradequote.api.deps import require_roles
from tradequote.api.routes.admin import load_member, member_out
from tradequote.core.permissions import RequestContext, Role
from tradequote.db.session import get_db
from tradequote.models.company_user import CompanyUser
from tradequote.schemas.catalog import ActiveUpdate
from tradequote.services.audit import log_audit

router = APIRouter()


@router.get("/", response_model=list[dict])
def list_employees(ctx: RequestContext = Depends(require_roles(Role.OWNER, Role.ADMIN)), db: Session = Depends(get_db)):
    rows = (
        db.query(CompanyUser)
        .filter(CompanyUser.company_id == ctx.company_id, CompanyUser.is_active == True)  # noqa: E712
        .order_by(CompanyUser.id)
        .all()
    )
    return [member_out(db, m) for m in rows]


@router.put("/{user_id}/active", response_model=dict)
def set_employee_active(
    user_id: int,
    payload: ActiveUpdate,
    ctx: RequestContext = Depends(require_roles(Role.OWNER, Role.ADMIN)),
    db: Session = Depends(get_db),
):
    if user_id == ctx.user_id:
        raise HTTPException(status_code=400, detail="Cannot change your own active state")
    m = load_member(db, ctx.company_id, user_id)
    if m.role == Role.OWNER.value:
        raise HTTPException(status_code=403, detail="Cannot deactivate the owner")
    m.is_active = payload.is_active
    log_audit(db, ctx.company_id, ctx.user_id, "USER_ACTIVE_CHANGED", meta={"user_id": user_id, "is_active": payload.is_active})
    db.commit()
    return member_out(db, m)
