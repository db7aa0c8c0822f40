import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from tradequote.db.session import engine, SessionLocal
from tradequote.db import seed_data
from tradequote.models import (  # noqa: F401
    audit_log, company_settings, estimate_photo, invite_token, job_item, job_assignment, user_specialty,
)
from tradequote.models.base import Base
from tradequote.models.trade import Trade
from tradequote.models.specialty import Specialty
from tradequote.models.region import Region
from tradequote.models.pricing_rule import PricingRule
from tradequote.models.company import Company
from tradequote.models.company_user import CompanyUser
from tradequote.models.service import Service
from tradequote.models.user import User
from tradequote.models.job import Job  # noqa: F401
from tradequote.core.config import settings
from tradequote.core.permissions import OWNER_PERMISSIONS, DEFAULT_EMPLOYEE_PERMISSIONS, Role
from tradequote.core.pricing import ANCHOR_MULTIPLIER_DEFAULT

logger = logging.getLogger(__name__)


def create_tables():
    Base.metadata.create_all(bind=engine)


def seed_reference_data(db: Session) -> None:
    """Trades, specialties, regions and MA pricing rules. Safe to run repeatedly."""
    trades: dict[str, Trade] = {}
    for slug, name in seed_data.TRADES:
        trade = db.query(Trade).filter(Trade.slug == slug).first()
        if not trade:
            trade = Trade(slug=slug, name=name)
            db.add(trade)
            db.flush()
        trades[slug] = trade

    for trade_slug, slug, name in seed_data.SPECIALTIES:
        trade = trades[trade_slug]
        exists = db.query(Specialty).filter(Specialty.trade_id == trade.id, Specialty.slug == slug).first()
        if not exists:
            db.add(Specialty(trade_id=trade.id, slug=slug, name=name))

    for code, name in seed_data.REGIONS:
        if not db.query(Region).filter(Region.code == code).first():
            db.add(Region(code=code, name=name))
    db.flush()

    ma = db.query(Region).filter(Region.code == "MA").first()
    for trade_slug, unit_prices in seed_data.PRICING_RULES.items():
        trade = trades[trade_slug]
        for unit, base_price in unit_prices.items():
            exists = (
                db.query(PricingRule)
                .filter(PricingRule.region_id == ma.id, PricingRule.trade_id == trade.id, PricingRule.unit == unit)
                .first()
            )
            if not exists:
                db.add(PricingRule(
                    region_id=ma.id,
                    trade_id=trade.id,
                    specialty_id=None,
                    unit=unit,
                    base_price=Decimal(base_price),
                    anchor_multiplier=ANCHOR_MULTIPLIER_DEFAULT,
                    enabled=True,
                ))
    db.commit()


def seed_company_services(db: Session, company: Company) -> int:
    """Copy the default catalog of the company's trade into its services. Returns rows added."""
    trade = db.get(Trade, company.trade_id) if company.trade_id else None
    if not trade:
        return 0
    if db.query(Service).filter(Service.company_id == company.id).first():
        return 0
    specs = {s.slug: s.id for s in db.query(Specialty).filter(Specialty.trade_id == trade.id).all()}
    added = 0
    for trade_slug, spec_slug, category, name, unit, price in seed_data.SERVICES:
        if trade_slug != trade.slug or spec_slug not in specs:
            continue
        db.add(Service(
            company_id=company.id,
            specialty_id=specs[spec_slug],
            category=category,
            name=name,
            pricing_unit=unit,
            unit_price=Decimal(price),
            active=True,
        ))
        added += 1
    return added


def seed_demo_data():
    from tradequote.core.security import get_password_hash

    db = SessionLocal()
    try:
        seed_reference_data(db)
        trades = {t.slug: t for t in db.query(Trade).all()}

        companies: dict[str, Company] = {}
        for name, trade_slug in seed_data.DEMO_COMPANIES:
            company = db.query(Company).filter(Company.name == name).first()
            if not company:
                company = Company(name=name, trade_id=trades[trade_slug].id, is_active=True)
                db.add(company)
                db.flush()
            companies[name] = company

        created = []
        for username, password, role, global_role, company_name in seed_data.DEMO_USERS:
            user = db.query(User).filter(User.username == username).first()
            if not user:
                user = User(
                    username=username,
                    hashed_password=get_password_hash(settings.seed_default_password or password),
                    global_role=global_role,
                )
                db.add(user)
                db.flush()
                created.append(username)
            company = companies[company_name]
            membership = (
                db.query(CompanyUser)
                .filter(CompanyUser.company_id == company.id, CompanyUser.user_id == user.id)
                .first()
            )
            if not membership:
                membership = CompanyUser(company_id=company.id, user_id=user.id, role=role, is_active=True)
                perms = OWNER_PERMISSIONS if role == Role.OWNER.value else DEFAULT_EMPLOYEE_PERMISSIONS
                perms.apply_to(membership)
                db.add(membership)
            if role == Role.OWNER.value and not company.owner_user_id:
                company.owner_user_id = user.id

        for company in companies.values():
            seed_company_services(db, company)
        db.commit()
        if created:
            logger.info("Seeded demo users: %s", ", ".join(created))
    finally:
        db.close()
