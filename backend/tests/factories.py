import uuid
from decimal import Decimal

from fastapi.testclient import TestClient

from tradequote.main import app
from tradequote.core.permissions import NO_PERMISSIONS, OWNER_PERMISSIONS, Permissions
from tradequote.core.pricing import line_total
from tradequote.core.security import get_password_hash
from tradequote.db.session import SessionLocal
from tradequote.models.company import Company
from tradequote.models.company_user import CompanyUser
from tradequote.models.job import Job
from tradequote.models.job_assignment import JobAssignment
from tradequote.models.job_item import JobItem
from tradequote.models.service import Service
from tradequote.models.specialty import Specialty
from tradequote.models.trade import Trade
from tradequote.models.user import User
from tradequote.models.user_specialty import UserSpecialty

client = TestClient(app)

PASSWORD = "testpass"


def unique(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


def trade_id(slug: str = "carpentry") -> int:
    db = SessionLocal()
    try:
        return db.query(Trade).filter(Trade.slug == slug).one().id
    finally:
        db.close()


def specialty_id(slug: str, trade: str = "carpentry") -> int:
    db = SessionLocal()
    try:
        return (
            db.query(Specialty)
            .join(Trade, Trade.id == Specialty.trade_id)
            .filter(Trade.slug == trade, Specialty.slug == slug)
            .one()
            .id
        )
    finally:
        db.close()


def make_company(trade: str | None = "carpentry") -> int:
    db = SessionLocal()
    c = Company(name=unique("co"), trade_id=trade_id(trade) if trade else None, is_active=True)
    db.add(c)
    db.commit()
    company_id = c.id
    db.close()
    return company_id


def make_member(
    company_id: int,
    role: str = "USER",
    permissions: Permissions | None = None,
    specialties: tuple[str, ...] = (),
    global_role: str = "user",
    is_active: bool = True,
    trade: str = "carpentry",
) -> tuple[int, str]:
    db = SessionLocal()
    username = unique(role.lower())
    u = User(username=username, hashed_password=get_password_hash(PASSWORD), global_role=global_role)
    db.add(u)
    db.flush()
    m = CompanyUser(company_id=company_id, user_id=u.id, role=role, is_active=is_active)
    if permissions is None:
        permissions = OWNER_PERMISSIONS if role == "OWNER" else NO_PERMISSIONS
    permissions.apply_to(m)
    db.add(m)
    for slug in specialties:
        db.add(UserSpecialty(company_id=company_id, user_id=u.id, specialty_id=specialty_id(slug, trade)))
    db.commit()
    user_id = u.id
    db.close()
    return user_id, username


def login(username: str, password: str = PASSWORD) -> dict:
    r = client.post("/auth/login-json", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


def make_service(company_id: int, specialty: str, price: str = "120.00", unit: str = "EA", trade: str = "carpentry") -> int:
    db = SessionLocal()
    s = Service(
        company_id=company_id,
        specialty_id=specialty_id(specialty, trade),
        category="Test",
        name=unique("svc"),
        pricing_unit=unit,
        unit_price=Decimal(price),
        active=True,
    )
    db.add(s)
    db.commit()
    service_id = s.id
    db.close()
    return service_id


def make_job(
    company_id: int,
    specialty: str | None,
    status: str = "DRAFT",
    items: tuple[tuple[str, str], ...] = (),
    scheduled_at: str | None = None,
    trade: str = "carpentry",
) -> int:
    """Insert a job directly; ``items`` are (qty, unit_price) pairs."""
    db = SessionLocal()
    job = Job(
        company_id=company_id,
        trade_id=trade_id(trade),
        specialty_id=specialty_id(specialty, trade) if specialty else None,
        client_name=unique("client"),
        status=status,
        scheduled_at=scheduled_at,
    )
    job.items = [
        JobItem(qty=Decimal(q), unit_price=Decimal(p), line_total=line_total(q, p), pricing_unit="EA")
        for q, p in items
    ]
    db.add(job)
    db.commit()
    job_id = job.id
    db.close()
    return job_id


def assign(job_id: int, user_id: int, permissions: Permissions = NO_PERMISSIONS) -> None:
    db = SessionLocal()
    a = JobAssignment(job_id=job_id, user_id=user_id)
    permissions.apply_to(a)
    db.add(a)
    db.commit()
    db.close()
