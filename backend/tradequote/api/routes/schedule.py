from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from tradequote.api.deps import get_request_context
from tradequote.api.routes.jobs import job_summary
from tradequote.core.permissions import RequestContext
from tradequote.db.session import get_db
from tradequote.models.job_assignment import JobAssignment
from tradequote.models.user import User
from tradequote.services.access import visible_jobs

router = APIRouter()


def _parse_day(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


@router.get("/jobs", response_model=list[dict])
def scheduled_jobs(
    start: str = Query(...),
    end: str = Query(...),
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Visible jobs whose scheduled day falls within [start, end]."""
    start_day, end_day = _parse_day(start), _parse_day(end)
    if not start_day or not end_day:
        raise HTTPException(status_code=400, detail="start and end must be YYYY-MM-DD")
    jobs, _ = visible_jobs(db, ctx)
    out = []
    for job in jobs:
        day = _parse_day(job.scheduled_at)
        if day is None or not (start_day <= day <= end_day):
            continue
        rows = (
            db.query(JobAssignment.user_id, User.username)
            .join(User, User.id == JobAssignment.user_id)
            .filter(JobAssignment.job_id == job.id)
            .all()
        )
        item = job_summary(job)
        item["assignments"] = [{"user_id": uid, "username": uname} for uid, uname in rows]
        out.append(item)
    out.sort(key=lambda j: (j["scheduled_at"], j["id"]))
    return out
