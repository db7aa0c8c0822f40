from sqlalchemy import String, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tradequote.models.base import Base

class Specialty(Base):
    __tablename__ = "specialties"
    __table_args__ = (UniqueConstraint("trade_id", "slug", name="uq_specialty_trade_slug"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    trade_id: Mapped[int] = mapped_column(ForeignKey("trades.id"), index=True)
    slug: Mapped[str] = mapped_column(String(64))
    name: Mapped[str] = mapped_column(String(120))
