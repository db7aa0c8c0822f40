import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from tradequote.api.deps import get_request_context, require_roles
from tradequote.core.access import needs_onboarding
from tradequote.core.config import settings
from tradequote.core.permissions import DEFAULT_EMPLOYEE_PERMISSIONS, RequestContext, Role, is_support_admin
from tradequote.core.security import create_access_token, get_password_hash, verify_password
from tradequote.db.session import get_db
from tradequote.models.company import Company
from tradequote.models.company_user import CompanyUser
from tradequote.models.trade import Trade
from tradequote.models.user import User
from tradequote.schemas.auth import Token, UserLogin, UserOut, UserRegister
from tradequote.services.access import allowed_specialty_ids, get_company_ceiling

logger = logging.getLogger(__name__)

router = APIRouter()


def _authenticate(db: Session, username: str, password: str) -> dict:
    """Shared by both login flavours. 401 for bad credentials, 403 without an active membership."""
    username = username.strip().lower()
    user = db.query(User).filter(User.username == username).first()
    if not user or not verify_password(password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect credentials")
    membership = (
        db.query(CompanyUser)
        .filter(CompanyUser.user_id == user.id, CompanyUser.is_active == True)  # noqa: E712
        .order_by(CompanyUser.id.asc())
        .first()
    )
    if not membership:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User has no active company")
    access_token = create_access_token(user_id=user.id, company_id=membership.company_id, role=membership.role)
    logger.info("Login user=%s company=%s", user.id, membership.company_id)
    return {"access_token": access_token, "token_type": "bearer"}


@router.post("/login", response_model=Token)
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    return _authenticate(db, form_data.username, form_data.password)


@router.post("/login-json", response_model=Token)
def login_json(payload: UserLogin, db: Session = Depends(get_db)):
    return _authenticate(db, payload.username, payload.password)


@router.get("/me", response_model=dict)
def me(ctx: RequestContext = Depends(get_request_context), db: Session = Depends(get_db)):
    company = db.get(Company, ctx.company_id)
    trade = db.get(Trade, company.trade_id) if company and company.trade_id else None
    allowed = allowed_specialty_ids(db, ctx.user_id, ctx.company_id, ctx.role)
    return {
        "id": ctx.user_id,
        "username": ctx.username,
        "company_id": ctx.company_id,
        "company_name": company.name if company else None,
        "role": ctx.role.value,
        "trade_slug": trade.slug if trade else None,
        "permissions": get_company_ceiling(db, ctx).as_dict(),
        "needs_onboarding": ctx.role is not Role.SUPPORT and needs_onboarding(allowed),
        "is_support_admin": is_support_admin(ctx.username, ctx.global_role, settings.support_admin_usernames),
    }


@router.post("/register", response_model=UserOut)
def register(
    payload: UserRegister,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_roles(Role.OWNER, Role.ADMIN)),
):
    username = payload.username.strip().lower()
    if db.query(User).filter(User.username == username).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")
    user = User(username=username, hashed_password=get_password_hash(payload.password), global_role="user")
    db.add(user)
    db.flush()
    membership = CompanyUser(company_id=ctx.company_id, user_id=user.id, role=payload.role, is_active=True)
    DEFAULT_EMPLOYEE_PERMISSIONS.apply_to(membership)
    db.add(membership)
    db.commit()
    db.refresh(user)
    return {"id": user.id, "username": user.username, "role": payload.role, "company_id": ctx.company_id}
