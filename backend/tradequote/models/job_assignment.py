from sqlalchemy import Integer, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tradequote.models.base import Base

class JobAssignment(Base):
    """A job shared with an employee. Flags are job-local and capped by the company ceiling."""
    __tablename__ = "job_assignments"
    __table_args__ = (UniqueConstraint("job_id", "user_id", name="uq_job_assignment"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    job_id: Mapped[int] = mapped_column(ForeignKey("jobs.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    can_manage_users: Mapped[bool] = mapped_column(Boolean, default=False)
    can_view_all_specialties: Mapped[bool] = mapped_column(Boolean, default=False)
    can_view_prices: Mapped[bool] = mapped_column(Boolean, default=False)
    can_edit_prices: Mapped[bool] = mapped_column(Boolean, default=False)
    can_audit: Mapped[bool] = mapped_column(Boolean, default=False)
