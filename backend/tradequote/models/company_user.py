from sqlalchemy import String, Integer, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tradequote.models.base import Base

class CompanyUser(Base):
    """Company membership. The five flag columns are the company ceiling."""
    __tablename__ = "company_users"
    __table_args__ = (UniqueConstraint("company_id", "user_id", name="uq_company_user"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    role: Mapped[str] = mapped_column(String(16), default="USER")  # OWNER | ADMIN | USER | SUPPORT
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    can_manage_users: Mapped[bool] = mapped_column(Boolean, default=False)
    can_view_all_specialties: Mapped[bool] = mapped_column(Boolean, default=False)
    can_view_prices: Mapped[bool] = mapped_column(Boolean, default=False)
    can_edit_prices: Mapped[bool] = mapped_column(Boolean, default=False)
    can_audit: Mapped[bool] = mapped_column(Boolean, default=False)
