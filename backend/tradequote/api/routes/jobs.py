import logging
from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tradequote.api.deps import get_request_context, require_manage_users, require_roles
from tradequote.api.routes.settings import get_or_create_settings
from tradequote.core.access import redact_prices
from tradequote.core.permissions import (
    DEFAULT_EMPLOYEE_PERMISSIONS,
    Permissions,
    RequestContext,
    Role,
    cap_permissions,
    company_ceiling,
)
from tradequote.core.pricing import job_totals, line_total, money, money_fields
from tradequote.db.session import get_db
from tradequote.models.estimate_photo import EstimatePhoto
from tradequote.models.job import Job
from tradequote.models.job_assignment import JobAssignment
from tradequote.models.job_item import JobItem
from tradequote.models.service import Service
from tradequote.models.specialty import Specialty
from tradequote.models.user import User
from tradequote.schemas.jobs import AssignmentIn, EstimatePhotoIn, JobCreate, JobItemIn, JobUpdate
from tradequote.schemas.permissions import PermissionsPatch
from tradequote.services.access import (
    allowed_specialty_ids,
    effective_job_permissions,
    get_assignment,
    get_company_ceiling,
    get_company_trade_id,
    get_membership,
    get_visible_job,
    visible_jobs,
)
from tradequote.services.audit import audit_out, job_audit, log_audit

logger = logging.getLogger(__name__)

router = APIRouter()


def job_summary(job: Job) -> dict:
    return {
        "id": job.id,
        "client_name": job.client_name,
        "address": job.address,
        "status": job.status,
        "specialty_id": job.specialty_id,
        "trade_id": job.trade_id,
        "scheduled_at": job.scheduled_at,
        "created_by": job.created_by,
        "created_at": job.created_at.isoformat() if job.created_at else None,
    }


def _items_out(db: Session, job: Job) -> list[dict]:
    service_ids = {i.service_id for i in job.items if i.service_id}
    names: dict[int, str] = {}
    if service_ids:
        for s in db.query(Service).filter(Service.id.in_(service_ids)).all():
            names[s.id] = s.name
    return [
        {
            "id": i.id,
            "service_id": i.service_id,
            "service_name": names.get(i.service_id),
            "qty": i.qty,
            "pricing_unit": i.pricing_unit,
            "unit_price": money(i.unit_price),
            "line_total": money(i.line_total),
        }
        for i in job.items
    ]


def _job_detail(db: Session, ctx: RequestContext, job: Job) -> dict:
    effective = effective_job_permissions(db, ctx, job)
    items = _items_out(db, job)
    out = job_summary(job)
    out.update({
        "client_phone": job.client_phone,
        "client_email": job.client_email,
        "door_code": job.door_code,
        "notes": job.notes,
        "address_locked": job.address_locked,
        "my_role": ctx.role.value,
        "permissions": effective.as_dict(),
        "company_permissions": get_company_ceiling(db, ctx).as_dict(),
        "items": redact_prices(items, effective.can_view_prices),
        "totals": None,
    })
    if effective.can_view_prices:
        rates = get_or_create_settings(db, ctx.company_id)
        totals = job_totals(items, rates.tax_rate, rates.overhead_rate, rates.profit_rate).as_dict()
        out["totals"] = money_fields(totals, totals)
    return out


def _load_visible_job(db: Session, ctx: RequestContext, job_id: int) -> Job:
    job = get_visible_job(db, ctx, job_id)
    if not job:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    return job


def check_specialty(db: Session, ctx: RequestContext, trade_id: int, specialty_id: Optional[int]) -> None:
    if specialty_id is None:
        return
    spec = db.get(Specialty, specialty_id)
    if not spec or spec.trade_id != trade_id:
        raise HTTPException(status_code=400, detail="Specialty does not belong to the company trade")
    if ctx.role is Role.USER and specialty_id not in allowed_specialty_ids(db, ctx.user_id, ctx.company_id, ctx.role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Specialty not allowed")


def _build_items(db: Session, ctx: RequestContext, payload_items: list[JobItemIn], catalog_prices: bool) -> list[JobItem]:
    """Validate services and compute line totals server-side.

    With ``catalog_prices`` the submitted unit price is ignored and the
    service's list price is used instead.
    """
    items = []
    for it in payload_items:
        service = None
        if it.service_id is not None:
            service = db.get(Service, it.service_id)
            if not service or service.company_id != ctx.company_id:
                raise HTTPException(status_code=400, detail=f"Unknown service {it.service_id}")
        unit_price = it.unit_price
        if catalog_prices:
            unit_price = service.unit_price if service else Decimal("0")
        items.append(JobItem(
            service_id=it.service_id,
            qty=it.qty,
            unit_price=unit_price,
            line_total=line_total(it.qty, unit_price),
            pricing_unit=it.pricing_unit,
        ))
    return items


@router.get("/", response_model=dict)
def list_jobs(ctx: RequestContext = Depends(get_request_context), db: Session = Depends(get_db)):
    jobs, stats = visible_jobs(db, ctx)
    return {"items": [job_summary(j) for j in jobs], "stats": stats}


@router.post("/", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_job(payload: JobCreate, ctx: RequestContext = Depends(get_request_context), db: Session = Depends(get_db)):
    if ctx.role is Role.SUPPORT:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    trade_id = get_company_trade_id(db, ctx.company_id)
    if not trade_id:
        raise HTTPException(status_code=400, detail="Company has no trade configured")
    check_specialty(db, ctx, trade_id, payload.specialty_id)
    catalog_prices = not get_company_ceiling(db, ctx).can_edit_prices
    job = Job(
        company_id=ctx.company_id,
        trade_id=trade_id,
        specialty_id=payload.specialty_id,
        created_by=ctx.user_id,
        client_name=payload.client_name,
        client_phone=payload.client_phone,
        client_email=payload.client_email,
        address=payload.address,
        door_code=payload.door_code,
        notes=payload.notes,
        status=payload.status,
        scheduled_at=payload.scheduled_at,
    )
    job.items = _build_items(db, ctx, payload.items, catalog_prices)
    db.add(job)
    db.flush()
    log_audit(db, ctx.company_id, ctx.user_id, "JOB_CREATED", job_id=job.id)
    db.commit()
    db.refresh(job)
    return _job_detail(db, ctx, job)


@router.get("/{job_id}", response_model=dict)
def get_job(job_id: int, ctx: RequestContext = Depends(get_request_context), db: Session = Depends(get_db)):
    return _job_detail(db, ctx, _load_visible_job(db, ctx, job_id))


@router.put("/{job_id}", response_model=dict)
def update_job(job_id: int, payload: JobUpdate, ctx: RequestContext = Depends(get_request_context), db: Session = Depends(get_db)):
    job = _load_visible_job(db, ctx, job_id)
    effective = effective_job_permissions(db, ctx, job)
    data = payload.model_dump(exclude_unset=True)
    items = data.pop("items", None)

    if items is not None and ctx.role is Role.USER and not effective.can_edit_prices:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot edit prices on this job")
    if "specialty_id" in data:
        check_specialty(db, ctx, job.trade_id, data["specialty_id"])

    old_status = job.status
    for field, value in data.items():
        if value is None and field in ("status", "address_locked", "client_name"):
            continue
        setattr(job, field, value)
    if job.status != old_status:
        log_audit(db, ctx.company_id, ctx.user_id, f"STATUS_CHANGED:{job.status}", job_id=job.id, meta={"from": old_status})
    if items is not None:
        catalog_prices = not effective.can_edit_prices
        job.items = _build_items(db, ctx, payload.items, catalog_prices)
        log_audit(db, ctx.company_id, ctx.user_id, "LINE_ITEMS_UPDATED", job_id=job.id, meta={"count": len(job.items)})
    db.commit()
    db.refresh(job)
    return _job_detail(db, ctx, job)


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_job(job_id: int, ctx: RequestContext = Depends(require_roles(Role.OWNER, Role.ADMIN)), db: Session = Depends(get_db)):
    job = _load_visible_job(db, ctx, job_id)
    db.query(JobAssignment).filter(JobAssignment.job_id == job.id).delete(synchronize_session=False)
    db.query(EstimatePhoto).filter(EstimatePhoto.job_id == job.id).delete(synchronize_session=False)
    log_audit(db, ctx.company_id, ctx.user_id, "JOB_DELETED", job_id=job.id)
    db.delete(job)
    db.commit()
    return None


def _member_ceiling(db: Session, company_id: int, user_id: int) -> Permissions:
    membership = get_membership(db, company_id, user_id)
    if not membership:
        return company_ceiling(None, None)
    return company_ceiling(Role.parse(membership.role), Permissions.from_row(membership))


def _assignment_out(db: Session, company_id: int, a: JobAssignment) -> dict:
    user = db.get(User, a.user_id)
    stored = Permissions.from_row(a)
    return {
        "job_id": a.job_id,
        "user_id": a.user_id,
        "username": user.username if user else None,
        "permissions": stored.as_dict(),
        "effective_permissions": cap_permissions(stored, _member_ceiling(db, company_id, a.user_id)).as_dict(),
    }


@router.get("/{job_id}/assignments", response_model=list[dict])
def list_assignments(job_id: int, ctx: RequestContext = Depends(get_request_context), db: Session = Depends(get_db)):
    job = _load_visible_job(db, ctx, job_id)
    rows = db.query(JobAssignment).filter(JobAssignment.job_id == job.id).order_by(JobAssignment.id).all()
    return [_assignment_out(db, ctx.company_id, a) for a in rows]


@router.post("/{job_id}/assignments", response_model=dict, status_code=status.HTTP_201_CREATED)
def assign_job(job_id: int, payload: AssignmentIn, ctx: RequestContext = Depends(require_manage_users), db: Session = Depends(get_db)):
    job = _load_visible_job(db, ctx, job_id)
    member = get_membership(db, ctx.company_id, payload.user_id)
    if not member or not member.is_active:
        raise HTTPException(status_code=400, detail="User is not a member of this company")
    perms = payload.permissions.to_permissions() if payload.permissions else DEFAULT_EMPLOYEE_PERMISSIONS
    assignment = get_assignment(db, job.id, payload.user_id)
    if not assignment:
        assignment = JobAssignment(job_id=job.id, user_id=payload.user_id)
        db.add(assignment)
    perms.apply_to(assignment)
    log_audit(db, ctx.company_id, ctx.user_id, "JOB_ASSIGNED", job_id=job.id, meta={"user_id": payload.user_id})
    db.commit()
    db.refresh(assignment)
    return _assignment_out(db, ctx.company_id, assignment)


@router.patch("/{job_id}/assignments/{user_id}/permissions", response_model=dict)
def update_assignment_permissions(
    job_id: int,
    user_id: int,
    payload: PermissionsPatch,
    ctx: RequestContext = Depends(require_manage_users),
    db: Session = Depends(get_db),
):
    job = _load_visible_job(db, ctx, job_id)
    assignment = get_assignment(db, job.id, user_id)
    if not assignment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assignment not found")
    payload.apply(Permissions.from_row(assignment)).apply_to(assignment)
    log_audit(db, ctx.company_id, ctx.user_id, "ASSIGNMENT_PERMISSIONS_UPDATED", job_id=job.id, meta={"user_id": user_id})
    db.commit()
    db.refresh(assignment)
    return _assignment_out(db, ctx.company_id, assignment)


@router.get("/{job_id}/audit", response_model=list[dict])
def get_job_audit(job_id: int, ctx: RequestContext = Depends(get_request_context), db: Session = Depends(get_db)):
    job = _load_visible_job(db, ctx, job_id)
    if not effective_job_permissions(db, ctx, job).can_audit:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Audit not permitted")
    return [audit_out(e) for e in job_audit(db, ctx.company_id, job.id)]


def _photo_out(p: EstimatePhoto) -> dict:
    return {
        "id": p.id,
        "job_id": p.job_id,
        "url": p.url,
        "notes": p.notes,
        "created_at": p.created_at.isoformat() if p.created_at else None,
    }


@router.get("/{job_id}/photos", response_model=list[dict])
def list_photos(job_id: int, ctx: RequestContext = Depends(get_request_context), db: Session = Depends(get_db)):
    job = _load_visible_job(db, ctx, job_id)
    rows = db.query(EstimatePhoto).filter(EstimatePhoto.job_id == job.id).order_by(EstimatePhoto.id).all()
    return [_photo_out(p) for p in rows]


@router.post("/estimate-photos", response_model=dict, status_code=status.HTTP_201_CREATED)
def add_estimate_photo(payload: EstimatePhotoIn, ctx: RequestContext = Depends(get_request_context), db: Session = Depends(get_db)):
    if ctx.role is Role.SUPPORT:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    if payload.job_id is not None:
        _load_visible_job(db, ctx, payload.job_id)
    photo = EstimatePhoto(job_id=payload.job_id, company_id=ctx.company_id, url=payload.url, notes=payload.notes)
    db.add(photo)
    db.commit()
    db.refresh(photo)
    return _photo_out(photo)
