import logging
from datetime import datetime, timedelta
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tradequote.api.deps import require_roles
from tradequote.core.config import settings
from tradequote.core.permissions import DEFAULT_EMPLOYEE_PERMISSIONS, RequestContext, Role
from tradequote.core.security import create_access_token, generate_invite_token, get_password_hash
from tradequote.db.session import get_db
from tradequote.models.company import Company
from tradequote.models.company_user import CompanyUser
from tradequote.models.invite_token import InviteToken
from tradequote.models.user import User
from tradequote.schemas.invites import InviteCreate, InviteSignup
from tradequote.services.audit import log_audit

logger = logging.getLogger(__name__)

router = APIRouter()


def invite_out(inv: InviteToken) -> dict:
    return {
        "token": inv.token,
        "role": inv.role,
        "company_id": inv.company_id,
        "signup_path": f"/invite/{inv.token}",
        "expires_at": inv.expires_at.isoformat(),
        "used_at": inv.used_at.isoformat() if inv.used_at else None,
    }


def create_invite(db: Session, ctx: RequestContext, role: str, expires_in_days: int | None) -> InviteToken:
    days = expires_in_days or settings.invite_default_expires_days
    inv = InviteToken(
        token=generate_invite_token(),
        company_id=ctx.company_id,
        created_by=ctx.user_id,
        role=role,
        expires_at=datetime.utcnow() + timedelta(days=days),
    )
    db.add(inv)
    log_audit(db, ctx.company_id, ctx.user_id, "INVITE_CREATED", meta={"role": role, "days": days})
    return inv


def _usable_invite(db: Session, token: str) -> InviteToken:
    """404 when unknown, 410 when already used or expired."""
    inv = db.query(InviteToken).filter(InviteToken.token == token).first()
    if not inv:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invite not found")
    if inv.used_at is not None:
        raise HTTPException(status_code=status.HTTP_410_GONE, detail="Invite already used")
    if inv.expires_at <= datetime.utcnow():
        raise HTTPException(status_code=status.HTTP_410_GONE, detail="Invite expired")
    return inv


@router.post("/create", response_model=dict, status_code=status.HTTP_201_CREATED)
def create(payload: InviteCreate, ctx: RequestContext = Depends(require_roles(Role.OWNER, Role.ADMIN)), db: Session = Depends(get_db)):
    inv = create_invite(db, ctx, payload.role, payload.expires_in_days)
    db.commit()
    db.refresh(inv)
    return invite_out(inv)


@router.get("/list", response_model=list[dict])
def list_invites(ctx: RequestContext = Depends(require_roles(Role.OWNER, Role.ADMIN)), db: Session = Depends(get_db)):
    rows = (
        db.query(InviteToken)
        .filter(InviteToken.company_id == ctx.company_id)
        .order_by(InviteToken.created_at.desc(), InviteToken.id.desc())
        .all()
    )
    return [invite_out(i) for i in rows]


@router.get("/validate/{token}", response_model=dict)
def validate(token: str, db: Session = Depends(get_db)):
    inv = _usable_invite(db, token)
    company = db.get(Company, inv.company_id)
    return {
        "valid": True,
        "role": inv.role,
        "company_name": company.name if company else None,
        "expires_at": inv.expires_at.isoformat(),
    }


@router.post("/signup/{token}", response_model=dict, status_code=status.HTTP_201_CREATED)
def signup(token: str, payload: InviteSignup, db: Session = Depends(get_db)):
    inv = _usable_invite(db, token)
    username = payload.username.strip().lower()
    if db.query(User).filter(User.username == username).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")
    user = User(username=username, hashed_password=get_password_hash(payload.password), global_role="user")
    db.add(user)
    db.flush()
    membership = CompanyUser(company_id=inv.company_id, user_id=user.id, role=inv.role, is_active=True)
    DEFAULT_EMPLOYEE_PERMISSIONS.apply_to(membership)
    db.add(membership)
    inv.used_at = datetime.utcnow()
    inv.used_by = user.id
    log_audit(db, inv.company_id, user.id, "INVITE_ACCEPTED", meta={"invite_id": inv.id})
    db.commit()
    logger.info("Invite signup user=%s company=%s", user.id, inv.company_id)
    return {
        "access_token": create_access_token(user_id=user.id, company_id=inv.company_id, role=inv.role),
        "token_type": "bearer",
        "user_id": user.id,
        "company_id": inv.company_id,
        "needs_onboarding": True,
    }
