from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from tradequote.api.deps import get_request_context, require_roles
from tradequote.core.permissions import RequestContext, Role
from tradequote.db.session import get_db
from tradequote.models.company_settings import CompanySettings
from tradequote.models.region import Region
from tradequote.schemas.settings import CompanySettingsUpdate

router = APIRouter()


def get_or_create_settings(db: Session, company_id: int) -> CompanySettings:
    row = db.query(CompanySettings).filter(CompanySettings.company_id == company_id).first()
    if not row:
        row = CompanySettings(company_id=company_id, tax_rate=0, overhead_rate=0, profit_rate=0)
        db.add(row)
        db.commit()
        db.refresh(row)
    return row


def settings_out(row: CompanySettings) -> dict:
    return {
        "company_id": row.company_id,
        "region_id": row.region_id,
        "tax_rate": row.tax_rate,
        "overhead_rate": row.overhead_rate,
        "profit_rate": row.profit_rate,
    }


@router.get("/", response_model=dict)
def get_settings(ctx: RequestContext = Depends(get_request_context), db: Session = Depends(get_db)):
    return settings_out(get_or_create_settings(db, ctx.company_id))


@router.post("/", response_model=dict)
def update_settings(
    payload: CompanySettingsUpdate,
    ctx: RequestContext = Depends(require_roles(Role.OWNER, Role.ADMIN)),
    db: Session = Depends(get_db),
):
    row = get_or_create_settings(db, ctx.company_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("region_id") is not None and not db.get(Region, data["region_id"]):
        raise HTTPException(status_code=400, detail="Unknown region")
    for field, value in data.items():
        if field != "region_id" and value is None:
            continue
        setattr(row, field, value)
    db.commit()
    db.refresh(row)
    return settings_out(row)
