"""Visibility rules over already-fetched data.

Nothing here touches the database. ``tradequote.services.access`` does the
lookups and hands the results to these functions.
"""
from typing import Any, Iterable, Mapping, Optional, Sequence, TypeVar

from tradequote.core.permissions import Permissions, Role

JOB_STATUSES = ("DRAFT", "SENT", "APPROVED", "SCHEDULED", "IN_PROGRESS", "DONE")

PRICE_FIELDS = ("unit_price", "line_total")
ESTIMATE_PRICE_FIELDS = ("base_price", "unit_price", "total", "low", "high")

T = TypeVar("T")


def resolve_allowed_specialty_ids(
    role: Optional[Role],
    ceiling: Permissions,
    trade_specialty_ids: Iterable[int],
    assigned_specialty_ids: Iterable[int],
) -> frozenset[int]:
    """Specialties a member may see within their company's trade.

    ``trade_specialty_ids`` is every specialty of the company trade (empty when
    the trade could not be resolved). ``assigned_specialty_ids`` is the
    explicit per-user assignment set.
    """
    if role is None or role is Role.SUPPORT:
        return frozenset()
    if role is Role.OWNER:
        return frozenset(trade_specialty_ids)
    if role is Role.ADMIN:
        if ceiling.can_view_all_specialties:
            return frozenset(trade_specialty_ids)
        return frozenset(assigned_specialty_ids)
    if role is Role.USER:
        return frozenset(assigned_specialty_ids)
    raise ValueError(f"Unhandled role {role!r}")


def needs_onboarding(allowed_specialty_ids: Iterable[int]) -> bool:
    return not any(True for _ in allowed_specialty_ids)


def filter_visible_jobs(
    jobs: Sequence[T],
    role: Optional[Role],
    allowed_specialty_ids: Iterable[int],
    assigned_job_ids: Iterable[int],
) -> list[T]:
    """Jobs of one company that ``role`` may list; input order is kept.

    OWNER and ADMIN see everything regardless of specialty flags. USER sees a
    job when it is directly assigned or its specialty is allowed.
    """
    if role is None or role is Role.SUPPORT:
        return []
    if role is Role.OWNER or role is Role.ADMIN:
        return list(jobs)
    if role is Role.USER:
        allowed = set(allowed_specialty_ids)
        assigned = set(assigned_job_ids)
        if not allowed and not assigned:
            return []
        return [
            j for j in jobs
            if j.id in assigned or (j.specialty_id is not None and j.specialty_id in allowed)
        ]
    raise ValueError(f"Unhandled role {role!r}")


def empty_stats() -> dict[str, int]:
    stats = {"total": 0}
    stats.update({s.lower(): 0 for s in JOB_STATUSES})
    return stats


def job_stats(jobs: Iterable[Any]) -> dict[str, int]:
    stats = empty_stats()
    for j in jobs:
        stats["total"] += 1
        key = (j.status or "").lower()
        if key in stats:
            stats[key] += 1
    return stats


def redact_prices(
    rows: Iterable[Mapping[str, Any]],
    can_view_prices: bool,
    fields: Sequence[str] = PRICE_FIELDS,
) -> list[dict[str, Any]]:
    """Return copies of ``rows`` with price fields nulled unless prices are visible.

    The input rows are never modified, even when prices are visible.
    """
    if can_view_prices:
        return [dict(r) for r in rows]
    out = []
    for r in rows:
        copy = dict(r)
        for f in fields:
            if f in copy:
                copy[f] = None
        out.append(copy)
    return out


def redact_estimate(estimate: Mapping[str, Any], can_view_prices: bool) -> dict[str, Any]:
    return redact_prices([estimate], can_view_prices, ESTIMATE_PRICE_FIELDS)[0]
