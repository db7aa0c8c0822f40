import logging
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
import jwt

from tradequote.core.config import settings
from tradequote.core.permissions import RequestContext, Role, can_manage_users, is_support_admin
from tradequote.core.security import decode_access_token
from tradequote.db.session import get_db
from tradequote.models.user import User
from tradequote.services.access import get_company_ceiling, get_membership

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def get_request_context(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> RequestContext:
    """Resolve the caller from the bearer token and their current membership row.

    The token only says who and which company; the role is always re-read so
    demotions and deactivations take effect immediately.
    """
    try:
        payload = decode_access_token(token)
        user_id = int(payload.get("sub"))
        company_id = int(payload.get("company_id"))
    except (jwt.PyJWTError, TypeError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    membership = get_membership(db, company_id, user_id)
    if not membership or not membership.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No active company membership")
    role = Role.parse(membership.role)
    if role is None:
        logger.warning("Unknown role %r for user %s in company %s", membership.role, user_id, company_id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return RequestContext(
        user_id=user.id,
        company_id=company_id,
        role=role,
        username=user.username,
        global_role=user.global_role or "user",
    )


def require_roles(*allowed: Role):
    def checker(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
        if ctx.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return ctx
    return checker


def require_manage_users(ctx: RequestContext = Depends(get_request_context), db: Session = Depends(get_db)) -> RequestContext:
    if not can_manage_users(ctx.role, get_company_ceiling(db, ctx)):
        logger.info("Denied user management to user %s in company %s", ctx.user_id, ctx.company_id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return ctx


def require_support_admin(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
    if not is_support_admin(ctx.username, ctx.global_role, settings.support_admin_usernames):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Support admin only")
    return ctx
