from __future__ import annotations

import math
from datetime import datetime
from typing import TYPE_CHECKING, Iterable

from app.portal.audit import record_event
from app.portal.modules.statistics.models import RecoveryStatistic
from app.portal.utils import calculate_percentage

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.portal.models import User
    from app.portal.modules.statistics.schemas import RecoveryStatisticCreate, RecoveryStatisticUpdate

DASHBOARD_WINDOW = 10
CASES_PER_REGION_UNIT = 1e8


class StatisticsError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def list_statistics(s: "Session", *, period_type: str | None = None) -> list[RecoveryStatistic]:
    q = s.query(RecoveryStatistic)
    if period_type:
        q = q.filter(RecoveryStatistic.period_type == period_type)
    return q.order_by(RecoveryStatistic.period.desc(), RecoveryStatistic.id.desc()).all()


def _find_period(s: "Session", period: str, period_type: str) -> RecoveryStatistic | None:
    return (
        s.query(RecoveryStatistic)
        .filter(RecoveryStatistic.period == period, RecoveryStatistic.period_type == period_type)
        .one_or_none()
    )


def create_statistic(s: "Session", payload: "RecoveryStatisticCreate", user: "User") -> RecoveryStatistic:
    if _find_period(s, payload.period, payload.period_type) is not None:
        raise StatisticsError("Statistics for this period already exist")

    now = datetime.utcnow()
    stat = RecoveryStatistic(created_at=now, updated_at=now, **payload.model_dump())
    s.add(stat)
    s.flush()
    record_event(
        s,
        actor=user,
        action="statistics.create",
        entity_type="RecoveryStatistic",
        entity_id=str(stat.id),
        metadata={"period": stat.period, "period_type": stat.period_type},
    )
    return stat


def update_statistic(
    s: "Session", stat: RecoveryStatistic, payload: "RecoveryStatisticUpdate", user: "User"
) -> RecoveryStatistic:
    provided = payload.model_dump(exclude_unset=True)
    # period / period_type / total_recovered are NOT NULL
    for field in ("period", "period_type", "total_recovered"):
        if provided.get(field, ...) is None:
            provided.pop(field)

    period = provided.get("period", stat.period)
    period_type = provided.get("period_type", stat.period_type)
    if (period, period_type) != (stat.period, stat.period_type):
        clash = _find_period(s, period, period_type)
        if clash is not None and clash.id != stat.id:
            raise StatisticsError("Statistics for this period already exist")

    changes: dict[str, dict] = {}
    for field, new in provided.items():
        old = getattr(stat, field)
        if new != old:
            changes[field] = {"old": old, "new": new}
            setattr(stat, field, new)
    stat.updated_at = datetime.utcnow()

    record_event(
        s,
        actor=user,
        action="statistics.edit",
        entity_type="RecoveryStatistic",
        entity_id=str(stat.id),
        metadata={"period": stat.period, "changes": changes},
    )
    return stat


def delete_statistic(s: "Session", stat: RecoveryStatistic, user: "User") -> None:
    record_event(
        s,
        actor=user,
        action="statistics.delete",
        entity_type="RecoveryStatistic",
        entity_id=str(stat.id),
        metadata={"period": stat.period, "period_type": stat.period_type},
    )
    s.delete(stat)


def _num(value) -> float:
    return float(value or 0)


def build_dashboard_stats(statistics: Iterable[RecoveryStatistic], period_type: str | None = None) -> dict:
    """
    Aggregate statistic rows into the public dashboard payload.

    Only the DASHBOARD_WINDOW most recent periods are considered. Summary totals
    come from the yearly rows in that window; sector and region breakdowns come
    from the most recent yearly row.
    """
    rows = [r for r in statistics if not period_type or r.period_type == period_type]
    rows.sort(key=lambda r: r.period, reverse=True)
    rows = rows[:DASHBOARD_WINDOW]

    yearly = [r for r in rows if r.period_type == "yearly"]
    total_prosecutions = sum(r.prosecutions or 0 for r in yearly)
    total_convictions = sum(r.convictions or 0 for r in yearly)

    summary = {
        "total_recovered": sum(_num(r.total_recovered) for r in yearly),
        "funds_to_treasury": sum(_num(r.funds_to_treasury) for r in yearly),
        "properties_seized": sum(r.properties_seized or 0 for r in yearly),
        "properties_sold": sum(r.properties_auctioned or 0 for r in yearly),
        "conviction_rate": calculate_percentage(total_convictions, total_prosecutions),
        "cases_resolved": sum(r.cases_closed or 0 for r in yearly),
    }

    ascending = sorted(rows, key=lambda r: r.period)
    trend = [
        {"period": r.period, "recovered": _num(r.total_recovered), "treasury": _num(r.funds_to_treasury)}
        for r in ascending
    ]

    latest_yearly = yearly[0] if yearly else None
    sectors = dict(latest_yearly.sector_breakdown or {}) if latest_yearly else {}
    sector_total = sum(_num(v) for v in sectors.values())
    sector_breakdown = [
        {"name": name, "value": _num(value), "percentage": calculate_percentage(_num(value), sector_total)}
        for name, value in sectors.items()
    ]

    regions = dict(latest_yearly.region_breakdown or {}) if latest_yearly else {}
    region_breakdown = [
        {"region": region, "recovered": _num(value), "cases": math.floor(_num(value) / CASES_PER_REGION_UNIT)}
        for region, value in regions.items()
    ]

    prosecution_outcomes = [
        {
            "period": r.period,
            "prosecutions": r.prosecutions or 0,
            "convictions": r.convictions or 0,
            "acquittals": r.acquittals or 0,
        }
        for r in ascending
    ]

    return {
        "summary": summary,
        "trend_data": trend,
        "sector_breakdown": sector_breakdown,
        "region_breakdown": region_breakdown,
        "prosecution_outcomes": prosecution_outcomes,
    }


def dashboard_stats(s: "Session", period_type: str | None = None) -> dict:
    return build_dashboard_stats(list_statistics(s, period_type=period_type), period_type)
