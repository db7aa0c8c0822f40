from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tradequote.api.deps import get_request_context, require_roles
from tradequote.api.routes.jobs import check_specialty
from tradequote.api.routes.settings import get_or_create_settings
from tradequote.core.access import ESTIMATE_PRICE_FIELDS, redact_estimate, redact_prices
from tradequote.core.permissions import RequestContext, Role
from tradequote.core.pricing import calculate_price, money, money_fields, quantity_for_unit
from tradequote.db.session import get_db
from tradequote.models.pricing_rule import PricingRule
from tradequote.models.region import Region
from tradequote.schemas.pricing import EstimateRequest, PricingRuleIn, PricingRuleUpdate
from tradequote.services.access import get_company_ceiling, get_company_trade_id
from tradequote.services.audit import log_audit

router = APIRouter()

RULE_PRICE_FIELDS = ("base_price",)


def rule_out(r: PricingRule) -> dict:
    return {
        "id": r.id,
        "region_id": r.region_id,
        "trade_id": r.trade_id,
        "specialty_id": r.specialty_id,
        "unit": r.unit,
        "base_price": money(r.base_price),
        "anchor_multiplier": r.anchor_multiplier,
        "material_multiplier": r.material_multiplier,
        "complexity_multiplier": r.complexity_multiplier,
        "enabled": r.enabled,
    }


def _rules_for(db: Session, ctx: RequestContext, rules: list[PricingRule]) -> list[dict]:
    """Rule rows with base prices hidden unless the caller's company ceiling allows viewing them."""
    return redact_prices([rule_out(r) for r in rules], get_company_ceiling(db, ctx).can_view_prices, RULE_PRICE_FIELDS)


def _require_edit_prices(db: Session, ctx: RequestContext) -> None:
    if not get_company_ceiling(db, ctx).can_edit_prices:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot edit prices")


def find_rule(db: Session, region_id: int, trade_id: int, unit: str, specialty_id: Optional[int]) -> Optional[PricingRule]:
    """First enabled rule for (region, trade, unit); an exact specialty match beats a trade-wide rule."""
    base = db.query(PricingRule).filter(
        PricingRule.region_id == region_id,
        PricingRule.trade_id == trade_id,
        PricingRule.unit == unit,
        PricingRule.enabled == True,  # noqa: E712
    )
    if specialty_id is not None:
        exact = base.filter(PricingRule.specialty_id == specialty_id).order_by(PricingRule.id).first()
        if exact:
            return exact
    return base.filter(PricingRule.specialty_id.is_(None)).order_by(PricingRule.id).first()


@router.get("/regions", response_model=list[dict])
def list_regions(db: Session = Depends(get_db), ctx: RequestContext = Depends(get_request_context)):
    return [{"id": r.id, "code": r.code, "name": r.name} for r in db.query(Region).order_by(Region.id).all()]


@router.get("/pricing-rules", response_model=list[dict])
def list_rules(
    region_id: Optional[int] = None,
    trade_id: Optional[int] = None,
    specialty_id: Optional[int] = None,
    unit: Optional[str] = None,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_roles(Role.OWNER, Role.ADMIN)),
):
    q = db.query(PricingRule)
    if region_id is not None:
        q = q.filter(PricingRule.region_id == region_id)
    if trade_id is not None:
        q = q.filter(PricingRule.trade_id == trade_id)
    if specialty_id is not None:
        q = q.filter(PricingRule.specialty_id == specialty_id)
    if unit:
        q = q.filter(PricingRule.unit == unit.upper())
    return _rules_for(db, ctx, q.order_by(PricingRule.id).all())


@router.post("/pricing-rules", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_rule(payload: PricingRuleIn, db: Session = Depends(get_db), ctx: RequestContext = Depends(require_roles(Role.OWNER, Role.ADMIN))):
    _require_edit_prices(db, ctx)
    if not db.get(Region, payload.region_id):
        raise HTTPException(status_code=400, detail="Unknown region")
    data = payload.model_dump(exclude_none=True)
    rule = PricingRule(**data)
    db.add(rule)
    db.flush()
    log_audit(db, ctx.company_id, ctx.user_id, "PRICING_RULE_CREATED", meta={"rule_id": rule.id, "base_price": money(rule.base_price)})
    db.commit()
    db.refresh(rule)
    return _rules_for(db, ctx, [rule])[0]


@router.put("/pricing-rules/{rule_id}", response_model=dict)
def update_rule(
    rule_id: int,
    payload: PricingRuleUpdate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(require_roles(Role.OWNER, Role.ADMIN)),
):
    _require_edit_prices(db, ctx)
    rule = db.get(PricingRule, rule_id)
    if not rule:
        raise HTTPException(status_code=404, detail="Pricing rule not found")
    for field, value in payload.model_dump(exclude_none=True).items():
        setattr(rule, field, value)
    log_audit(db, ctx.company_id, ctx.user_id, "PRICING_RULE_UPDATED", meta={"rule_id": rule_id, "base_price": money(rule.base_price)})
    db.commit()
    db.refresh(rule)
    return _rules_for(db, ctx, [rule])[0]


@router.post("/pricing/estimate", response_model=dict)
def estimate(payload: EstimateRequest, ctx: RequestContext = Depends(get_request_context), db: Session = Depends(get_db)):
    if ctx.role is Role.SUPPORT:
        raise HTTPException(status_code=403, detail="Forbidden")
    trade_id = get_company_trade_id(db, ctx.company_id)
    if not trade_id:
        raise HTTPException(status_code=400, detail="Company has no trade configured")
    check_specialty(db, ctx, trade_id, payload.specialty_id)
    region_id = payload.region_id or get_or_create_settings(db, ctx.company_id).region_id
    if not region_id:
        default_region = db.query(Region).filter(Region.code == "MA").first()
        region_id = default_region.id if default_region else None
    rule = find_rule(db, region_id, trade_id, payload.unit, payload.specialty_id) if region_id else None
    if not rule:
        raise HTTPException(status_code=404, detail="No pricing rule for this unit")

    quantity = payload.quantity if payload.quantity is not None else quantity_for_unit(payload.unit, payload.length, payload.width)
    result = calculate_price(
        rule.base_price,
        quantity,
        payload.material,
        payload.complexity,
        rule.anchor_multiplier,
        rule.material_multiplier,
        rule.complexity_multiplier,
    ).as_dict()
    result.update({"rule_id": rule.id, "region_id": region_id, "unit": payload.unit})
    return redact_estimate(money_fields(result, ESTIMATE_PRICE_FIELDS), get_company_ceiling(db, ctx).can_view_prices)
