from sqlalchemy import Integer, ForeignKey, DateTime, Numeric
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from decimal import Decimal

from tradequote.models.base import Base

class CompanySettings(Base):
    __tablename__ = "company_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), unique=True)
    region_id: Mapped[int | None] = mapped_column(ForeignKey("regions.id"), nullable=True)
    # Percentages applied to the job subtotal
    tax_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=0)
    overhead_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=0)
    profit_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=0)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
