from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from tradequote.api.deps import get_request_context
from tradequote.core.access import redact_prices
from tradequote.core.permissions import RequestContext, Role
from tradequote.core.pricing import money
from tradequote.db.session import get_db
from tradequote.models.service import Service
from tradequote.models.specialty import Specialty
from tradequote.models.trade import Trade
from tradequote.models.user_specialty import UserSpecialty
from tradequote.schemas.catalog import SpecialtyIds
from tradequote.services.access import (
    allowed_specialty_ids,
    get_company_ceiling,
    get_company_trade_id,
    trade_specialty_ids,
)
from tradequote.services.audit import log_audit

router = APIRouter()


def specialty_out(s: Specialty) -> dict:
    return {"id": s.id, "trade_id": s.trade_id, "slug": s.slug, "name": s.name}


def service_out(s: Service) -> dict:
    return {
        "id": s.id,
        "specialty_id": s.specialty_id,
        "category": s.category,
        "name": s.name,
        "description": s.description,
        "pricing_unit": s.pricing_unit,
        "unit_price": money(s.unit_price),
        "active": s.active,
    }


def set_user_specialties(db: Session, company_id: int, user_id: int, specialty_ids: list[int]) -> list[int]:
    """Replace a member's specialty set. Ids outside the company trade are rejected with 400."""
    valid = set(trade_specialty_ids(db, get_company_trade_id(db, company_id)))
    wanted = sorted(set(specialty_ids))
    invalid = [i for i in wanted if i not in valid]
    if invalid:
        raise HTTPException(status_code=400, detail=f"Specialties not in company trade: {invalid}")
    db.query(UserSpecialty).filter(
        UserSpecialty.company_id == company_id, UserSpecialty.user_id == user_id
    ).delete(synchronize_session=False)
    for sid in wanted:
        db.add(UserSpecialty(company_id=company_id, user_id=user_id, specialty_id=sid))
    return wanted


def _visible_services(db: Session, ctx: RequestContext, specialty_id: Optional[int] = None) -> list[dict]:
    allowed = allowed_specialty_ids(db, ctx.user_id, ctx.company_id, ctx.role)
    if specialty_id is not None:
        allowed = allowed & {specialty_id}
    if not allowed:
        return []
    rows = (
        db.query(Service)
        .filter(Service.company_id == ctx.company_id, Service.active == True, Service.specialty_id.in_(allowed))  # noqa: E712
        .order_by(Service.category, Service.name)
        .all()
    )
    return redact_prices([service_out(s) for s in rows], get_company_ceiling(db, ctx).can_view_prices)


@router.get("/trades", response_model=list[dict])
def list_trades(db: Session = Depends(get_db), ctx: RequestContext = Depends(get_request_context)):
    return [{"id": t.id, "slug": t.slug, "name": t.name} for t in db.query(Trade).order_by(Trade.id).all()]


@router.get("/specialties", response_model=list[dict])
def list_specialties(trade_id: Optional[int] = None, db: Session = Depends(get_db), ctx: RequestContext = Depends(get_request_context)):
    q = db.query(Specialty)
    if trade_id is not None:
        q = q.filter(Specialty.trade_id == trade_id)
    return [specialty_out(s) for s in q.order_by(Specialty.id).all()]


@router.get("/specialties/by-trade/{trade_id}", response_model=list[dict])
def specialties_by_trade(trade_id: int, db: Session = Depends(get_db), ctx: RequestContext = Depends(get_request_context)):
    rows = db.query(Specialty).filter(Specialty.trade_id == trade_id).order_by(Specialty.id).all()
    return [specialty_out(s) for s in rows]


@router.get("/services", response_model=list[dict])
def list_services(ctx: RequestContext = Depends(get_request_context), db: Session = Depends(get_db)):
    return _visible_services(db, ctx)


@router.get("/services/available", response_model=list[dict])
def available_services(ctx: RequestContext = Depends(get_request_context), db: Session = Depends(get_db)):
    return _visible_services(db, ctx)


@router.get("/services/by-specialty/{specialty_id}", response_model=list[dict])
def services_by_specialty(specialty_id: int, ctx: RequestContext = Depends(get_request_context), db: Session = Depends(get_db)):
    return _visible_services(db, ctx, specialty_id)


@router.get("/user/specialties", response_model=dict)
def my_specialties(ctx: RequestContext = Depends(get_request_context), db: Session = Depends(get_db)):
    allowed = allowed_specialty_ids(db, ctx.user_id, ctx.company_id, ctx.role)
    rows = db.query(Specialty).filter(Specialty.id.in_(allowed)).order_by(Specialty.id).all() if allowed else []
    return {"specialty_ids": sorted(allowed), "specialties": [specialty_out(s) for s in rows]}


@router.post("/onboarding/specialties", response_model=dict)
def onboarding_specialties(payload: SpecialtyIds, ctx: RequestContext = Depends(get_request_context), db: Session = Depends(get_db)):
    if ctx.role is Role.SUPPORT:
        raise HTTPException(status_code=403, detail="Forbidden")
    if not payload.specialty_ids:
        raise HTTPException(status_code=400, detail="Select at least one specialty")
    saved = set_user_specialties(db, ctx.company_id, ctx.user_id, payload.specialty_ids)
    log_audit(db, ctx.company_id, ctx.user_id, "ONBOARDING_SPECIALTIES", meta={"specialty_ids": saved})
    db.commit()
    return {"specialty_ids": saved}
