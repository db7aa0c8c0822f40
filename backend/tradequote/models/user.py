from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime

from tradequote.models.base import Base

class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    # Informational only, never grants cross-company access
    global_role: Mapped[str] = mapped_column(String(32), default="user")  # user | support_admin | super_admin
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
