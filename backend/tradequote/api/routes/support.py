"""Support desk tooling.

Support admins act only inside the company of their current session, like
everyone else; every mutation leaves an audit row.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tradequote.api.deps import require_support_admin
from tradequote.api.routes.admin import member_out
from tradequote.api.routes.catalog import set_user_specialties
from tradequote.api.routes.invites import create_invite, invite_out
from tradequote.core.permissions import DEFAULT_EMPLOYEE_PERMISSIONS, RequestContext
from tradequote.core.security import get_password_hash
from tradequote.db.session import get_db
from tradequote.models.company_user import CompanyUser
from tradequote.models.user import User
from tradequote.schemas.catalog import ActiveUpdate, SpecialtyIds
from tradequote.schemas.support import RenameUser, SignupLinkCreate, SupportPasswordReset, SupportUserCreate
from tradequote.services.access import assigned_specialty_ids, get_membership
from tradequote.services.audit import log_audit

logger = logging.getLogger(__name__)

router = APIRouter()


def _company_member(db: Session, ctx: RequestContext, user_id: int) -> CompanyUser:
    if not db.get(User, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    m = get_membership(db, ctx.company_id, user_id)
    if not m:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User belongs to another company")
    return m


@router.get("/users", response_model=list[dict])
def list_users(ctx: RequestContext = Depends(require_support_admin), db: Session = Depends(get_db)):
    rows = db.query(CompanyUser).filter(CompanyUser.company_id == ctx.company_id).order_by(CompanyUser.id).all()
    return [member_out(db, m) for m in rows]


@router.get("/users/search", response_model=list[dict])
def search_users(username: str, ctx: RequestContext = Depends(require_support_admin), db: Session = Depends(get_db)):
    needle = f"%{username.strip().lower()}%"
    rows = (
        db.query(CompanyUser)
        .join(User, User.id == CompanyUser.user_id)
        .filter(CompanyUser.company_id == ctx.company_id, User.username.like(needle))
        .order_by(User.username)
        .all()
    )
    return [member_out(db, m) for m in rows]


@router.put("/users/{user_id}/rename", response_model=dict)
def rename_user(user_id: int, payload: RenameUser, ctx: RequestContext = Depends(require_support_admin), db: Session = Depends(get_db)):
    m = _company_member(db, ctx, user_id)
    new_name = payload.username.strip().lower()
    clash = db.query(User).filter(User.username == new_name, User.id != user_id).first()
    if clash:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")
    user = db.get(User, user_id)
    old_name = user.username
    user.username = new_name
    log_audit(db, ctx.company_id, ctx.user_id, "SUPPORT_RENAME", meta={"user_id": user_id, "from": old_name, "to": new_name})
    db.commit()
    return member_out(db, m)


@router.put("/users/{user_id}/active", response_model=dict)
def set_active(user_id: int, payload: ActiveUpdate, ctx: RequestContext = Depends(require_support_admin), db: Session = Depends(get_db)):
    if user_id == ctx.user_id:
        raise HTTPException(status_code=400, detail="Cannot change your own active state")
    m = _company_member(db, ctx, user_id)
    m.is_active = payload.is_active
    log_audit(db, ctx.company_id, ctx.user_id, "SUPPORT_SET_ACTIVE", meta={"user_id": user_id, "is_active": payload.is_active})
    db.commit()
    return member_out(db, m)


@router.post("/reset-password", response_model=dict)
def reset_password(payload: SupportPasswordReset, ctx: RequestContext = Depends(require_support_admin), db: Session = Depends(get_db)):
    _company_member(db, ctx, payload.user_id)
    user = db.get(User, payload.user_id)
    user.hashed_password = get_password_hash(payload.new_password)
    log_audit(db, ctx.company_id, ctx.user_id, "SUPPORT_PASSWORD_RESET", meta={"user_id": payload.user_id})
    db.commit()
    return {"ok": True}


@router.get("/users/{user_id}/specialties", response_model=dict)
def get_specialties(user_id: int, ctx: RequestContext = Depends(require_support_admin), db: Session = Depends(get_db)):
    _company_member(db, ctx, user_id)
    return {"user_id": user_id, "specialty_ids": sorted(assigned_specialty_ids(db, user_id, ctx.company_id))}


@router.put("/users/{user_id}/specialties", response_model=dict)
def put_specialties(user_id: int, payload: SpecialtyIds, ctx: RequestContext = Depends(require_support_admin), db: Session = Depends(get_db)):
    _company_member(db, ctx, user_id)
    saved = set_user_specialties(db, ctx.company_id, user_id, payload.specialty_ids)
    log_audit(db, ctx.company_id, ctx.user_id, "SUPPORT_SET_SPECIALTIES", meta={"user_id": user_id, "specialty_ids": saved})
    db.commit()
    return {"user_id": user_id, "specialty_ids": saved}


@router.post("/create-test-user", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_test_user(payload: SupportUserCreate, ctx: RequestContext = Depends(require_support_admin), db: Session = Depends(get_db)):
    username = payload.username.strip().lower()
    if db.query(User).filter(User.username == username).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")
    user = User(username=username, hashed_password=get_password_hash(payload.password), global_role="user")
    db.add(user)
    db.flush()
    m = CompanyUser(company_id=ctx.company_id, user_id=user.id, role=payload.role, is_active=True)
    DEFAULT_EMPLOYEE_PERMISSIONS.apply_to(m)
    db.add(m)
    log_audit(db, ctx.company_id, ctx.user_id, "SUPPORT_CREATE_TEST_USER", meta={"user_id": user.id, "role": payload.role})
    db.commit()
    return member_out(db, m)


@router.post("/generate-signup-link", response_model=dict, status_code=status.HTTP_201_CREATED)
def generate_signup_link(payload: SignupLinkCreate, ctx: RequestContext = Depends(require_support_admin), db: Session = Depends(get_db)):
    inv = create_invite(db, ctx, payload.role, payload.expires_in_days)
    db.commit()
    db.refresh(inv)
    return invite_out(inv)
