from __future__ import annotations

from flask import Blueprint, render_template, request

from app.portal.constants import PERIOD_TYPES
from app.portal.db import db_session
from app.portal.modules.statistics.schemas import DashboardFilters
from app.portal.modules.statistics.service import dashboard_stats
from app.portal.validation import validate_payload

bp = Blueprint("statistics_public", __name__)


@bp.get("/dashboard")
def dashboard():
    # Unknown period types fall back to all periods
    filters, _errors = validate_payload(DashboardFilters, dict(request.args.items()))
    period_type = filters.period_type if filters else None
    return render_template(
        "public/dashboard.html",
        stats=dashboard_stats(db_session(), period_type),
        period_type=period_type,
        period_types=PERIOD_TYPES,
    )
