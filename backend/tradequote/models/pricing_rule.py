from sqlalchemy import String, Integer, Boolean, ForeignKey, Numeric, JSON
from sqlalchemy.orm import Mapped, mapped_column
from decimal import Decimal

from tradequote.models.base import Base
from tradequote.core.pricing import MATERIAL_MULTIPLIERS_DEFAULT, COMPLEXITY_MULTIPLIERS_DEFAULT

class PricingRule(Base):
    __tablename__ = "pricing_rules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    region_id: Mapped[int] = mapped_column(ForeignKey("regions.id"), index=True)
    trade_id: Mapped[int] = mapped_column(ForeignKey("trades.id"), index=True)
    # NULL = applies to every specialty of the trade
    specialty_id: Mapped[int | None] = mapped_column(ForeignKey("specialties.id"), nullable=True)
    unit: Mapped[str] = mapped_column(String(8))
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    anchor_multiplier: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("1.15"))
    material_multiplier: Mapped[dict] = mapped_column(JSON, default=lambda: dict(MATERIAL_MULTIPLIERS_DEFAULT))
    complexity_multiplier: Mapped[dict] = mapped_column(JSON, default=lambda: dict(COMPLEXITY_MULTIPLIERS_DEFAULT))
    enabled: Mapped[bool] = mapped_column(Boolean, default=True)
