import logging
from typing import Optional

from sqlalchemy.orm import Session

from tradequote.core.access import filter_visible_jobs, job_stats, resolve_allowed_specialty_ids
from tradequote.core.permissions import (
    DEFAULT_EMPLOYEE_PERMISSIONS,
    NO_PERMISSIONS,
    Permissions,
    RequestContext,
    Role,
    cap_permissions,
    company_ceiling,
)
from tradequote.models.company import Company
from tradequote.models.company_user import CompanyUser
from tradequote.models.job import Job
from tradequote.models.job_assignment import JobAssignment
from tradequote.models.specialty import Specialty
from tradequote.models.user_specialty import UserSpecialty

logger = logging.getLogger(__name__)


def get_membership(db: Session, company_id: int, user_id: int) -> Optional[CompanyUser]:
    return (
        db.query(CompanyUser)
        .filter(CompanyUser.company_id == company_id, CompanyUser.user_id == user_id)
        .first()
    )


def get_company_permissions(db: Session, company_id: int, user_id: int) -> Permissions:
    """Stored company flags for a member; all false when there is no membership."""
    return Permissions.from_row(get_membership(db, company_id, user_id))


def get_company_ceiling(db: Session, ctx: RequestContext) -> Permissions:
    return company_ceiling(ctx.role, get_company_permissions(db, ctx.company_id, ctx.user_id))


def get_company_trade_id(db: Session, company_id: int) -> int:
    company = db.get(Company, company_id)
    if not company or not company.trade_id:
        return 0
    return company.trade_id


def trade_specialty_ids(db: Session, trade_id: int) -> list[int]:
    if not trade_id:
        return []
    rows = db.query(Specialty.id).filter(Specialty.trade_id == trade_id).order_by(Specialty.id).all()
    return [r[0] for r in rows]


def assigned_specialty_ids(db: Session, user_id: int, company_id: int) -> list[int]:
    rows = (
        db.query(UserSpecialty.specialty_id)
        .filter(UserSpecialty.user_id == user_id, UserSpecialty.company_id == company_id)
        .all()
    )
    return [r[0] for r in rows]


def allowed_specialty_ids(db: Session, user_id: int, company_id: int, role: Optional[Role]) -> frozenset[int]:
    if role is None or role is Role.SUPPORT:
        return frozenset()
    trade_id = get_company_trade_id(db, company_id)
    if not trade_id:
        return frozenset()
    ceiling = company_ceiling(role, get_company_permissions(db, company_id, user_id))
    trade_ids = trade_specialty_ids(db, trade_id)
    # Assignments outside the company trade never count
    assigned = set(assigned_specialty_ids(db, user_id, company_id)) & set(trade_ids)
    return resolve_allowed_specialty_ids(role, ceiling, trade_ids, assigned)


def assigned_job_ids(db: Session, user_id: int, company_id: int) -> list[int]:
    rows = (
        db.query(JobAssignment.job_id)
        .join(Job, Job.id == JobAssignment.job_id)
        .filter(JobAssignment.user_id == user_id, Job.company_id == company_id)
        .all()
    )
    return [r[0] for r in rows]


def visible_jobs(db: Session, ctx: RequestContext) -> tuple[list[Job], dict[str, int]]:
    """Jobs the caller may list, newest first, plus status counts over that set."""
    if ctx.role is Role.SUPPORT:
        return [], job_stats([])
    jobs = (
        db.query(Job)
        .filter(Job.company_id == ctx.company_id)
        .order_by(Job.created_at.desc(), Job.id.desc())
        .all()
    )
    if ctx.role is Role.USER:
        allowed = allowed_specialty_ids(db, ctx.user_id, ctx.company_id, ctx.role)
        assigned = assigned_job_ids(db, ctx.user_id, ctx.company_id)
    else:
        allowed, assigned = frozenset(), []
    visible = filter_visible_jobs(jobs, ctx.role, allowed, assigned)
    return visible, job_stats(visible)


def get_visible_job(db: Session, ctx: RequestContext, job_id: int) -> Optional[Job]:
    job = db.get(Job, job_id)
    if not job or job.company_id != ctx.company_id:
        return None
    if ctx.role is Role.USER:
        allowed = allowed_specialty_ids(db, ctx.user_id, ctx.company_id, ctx.role)
        assigned = [job_id] if get_assignment(db, job_id, ctx.user_id) else []
        if not filter_visible_jobs([job], ctx.role, allowed, assigned):
            return None
        return job
    if not filter_visible_jobs([job], ctx.role, (), ()):
        return None
    return job


def get_assignment(db: Session, job_id: int, user_id: int) -> Optional[JobAssignment]:
    return (
        db.query(JobAssignment)
        .filter(JobAssignment.job_id == job_id, JobAssignment.user_id == user_id)
        .first()
    )


def effective_job_permissions(db: Session, ctx: RequestContext, job: Job) -> Permissions:
    ceiling = get_company_ceiling(db, ctx)
    if ctx.role in (Role.OWNER, Role.ADMIN):
        return ceiling
    if ctx.role is Role.USER:
        assignment = get_assignment(db, job.id, ctx.user_id)
        granted = Permissions.from_row(assignment) if assignment else DEFAULT_EMPLOYEE_PERMISSIONS
        return cap_permissions(granted, ceiling)
    return NO_PERMISSIONS
