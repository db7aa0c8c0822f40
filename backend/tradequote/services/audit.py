import json
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from tradequote.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def log_audit(
    db: Session,
    company_id: int,
    actor_user_id: Optional[int],
    action: str,
    job_id: Optional[int] = None,
    meta: Optional[dict[str, Any]] = None,
) -> AuditLog:
    """Stage an audit row on the session; the caller commits with its own changes."""
    entry = AuditLog(
        company_id=company_id,
        actor_user_id=actor_user_id,
        action=action,
        job_id=job_id,
        meta=json.dumps(meta, default=str) if meta else None,
    )
    db.add(entry)
    logger.info("audit company=%s actor=%s action=%s job=%s", company_id, actor_user_id, action, job_id)
    return entry


def job_audit(db: Session, company_id: int, job_id: int) -> list[AuditLog]:
    return (
        db.query(AuditLog)
        .filter(AuditLog.company_id == company_id, AuditLog.job_id == job_id)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .all()
    )


def audit_out(entry: AuditLog) -> dict[str, Any]:
    return {
        "id": entry.id,
        "action": entry.action,
        "actor_user_id": entry.actor_user_id,
        "job_id": entry.job_id,
        "meta": json.loads(entry.meta) if entry.meta else None,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
    }
