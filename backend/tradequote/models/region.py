from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column

from tradequote.models.base import Base

class Region(Base):
    __tablename__ = "regions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    code: Mapped[str] = mapped_column(String(16), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(120))
