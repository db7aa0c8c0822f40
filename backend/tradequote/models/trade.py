from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column

from tradequote.models.base import Base

class Trade(Base):
    __tablename__ = "trades"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(120))
