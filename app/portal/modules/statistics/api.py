from __future__ import annotations

from flask import Blueprint, g

from app.portal.db import db_session
from app.portal.models import User
from app.portal.modules.statistics.models import RecoveryStatistic
from app.portal.modules.statistics.schemas import DashboardFilters, RecoveryStatisticCreate, RecoveryStatisticUpdate
from app.portal.modules.statistics.service import (
    StatisticsError,
    create_statistic,
    dashboard_stats,
    list_statistics,
    update_statistic,
)
from app.portal.rbac import require_permission
from app.portal.responses import fail, json_body, ok, query_args, validation_failed
from app.portal.validation import validate_payload

bp = Blueprint("statistics_api", __name__)


def _current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


@bp.get("/dashboard/stats")
def api_dashboard_stats():
    filters, errors = validate_payload(DashboardFilters, query_args())
    if errors:
        return validation_failed(errors)
    return ok(dashboard_stats(db_session(), filters.period_type))


@bp.get("/admin/statistics")
@require_permission("statistics.view")
def api_admin_statistics_list():
    filters, errors = validate_payload(DashboardFilters, query_args())
    if errors:
        return validation_failed(errors)
    stats = list_statistics(db_session(), period_type=filters.period_type)
    return ok([st.to_dict() for st in stats])


@bp.post("/admin/statistics")
@require_permission("statistics.edit")
def api_admin_statistics_create():
    payload, errors = validate_payload(RecoveryStatisticCreate, json_body())
    if errors:
        return validation_failed(errors)
    s = db_session()
    try:
        stat = create_statistic(s, payload, _current_user())
    except StatisticsError as e:
        return fail(e.message, e.status_code)
    s.commit()
    return ok(stat.to_dict(), 201)


@bp.patch("/admin/statistics/<int:stat_id>")
@require_permission("statistics.edit")
def api_admin_statistics_update(stat_id: int):
    s = db_session()
    stat = s.get(RecoveryStatistic, stat_id)
    if stat is None:
        return fail("Statistic not found", 404)
    payload, errors = validate_payload(RecoveryStatisticUpdate, json_body())
    if errors:
        return validation_failed(errors)
    try:
        update_statistic(s, stat, payload, _current_user())
    except StatisticsError as e:
        return fail(e.message, e.status_code)
    s.commit()
    return ok(stat.to_dict())
