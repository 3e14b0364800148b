from datetime import datetime, time, timedelta

from flask import Blueprint, current_app, flash, g, render_template, request
from sqlalchemy import text

from app.portal.db import db_session
from app.portal.models import AuditEvent, User
from app.portal.modules.content.models import CaseHighlight, NewsUpdate
from app.portal.modules.properties.models import ExpressionOfInterest, Property
from app.portal.modules.reports.models import CorruptionReport
from app.portal.modules.reports.service import open_reports
from app.portal.modules.statistics.models import RecoveryStatistic
from app.portal.rbac import require_permission
from app.portal.utils import parse_date

bp = Blueprint("admin", __name__)


def _parse_date_arg(name: str):
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return None
    try:
        return parse_date(raw)
    except ValueError:
        flash(f"{name} must be YYYY-MM-DD", "danger")
        return None


def _system_status(s) -> dict:
    status = {
        "env": current_app.config.get("ENV", "development"),
        "db_connected": False,
        "db_error": None,
        "storage_backend": current_app.config.get("STORAGE_BACKEND", "local"),
        "rate_limit_enabled": bool(current_app.config.get("RATE_LIMIT_ENABLED", True)),
    }
    try:
        s.execute(text("SELECT 1"))
        status["db_connected"] = True
    except Exception as e:
        status["db_error"] = str(e)
    return status


@bp.get("/")
@require_permission("admin.view")
def index():
    s = db_session()
    latest_yearly = (
        s.query(RecoveryStatistic)
        .filter(RecoveryStatistic.period_type == "yearly")
        .order_by(RecoveryStatistic.period.desc())
        .first()
    )
    counts = {
        "published_properties": s.query(Property).filter(Property.published_at.isnot(None)).count(),
        "pending_interests": s.query(ExpressionOfInterest).filter(ExpressionOfInterest.status == "PENDING").count(),
        "new_reports": s.query(CorruptionReport).filter(CorruptionReport.status == "RECEIVED").count(),
        "published_cases": s.query(CaseHighlight).filter(CaseHighlight.status == "PUBLISHED").count(),
        "published_news": s.query(NewsUpdate).filter(NewsUpdate.status == "PUBLISHED").count(),
        "active_users": s.query(User).filter(User.is_active.is_(True)).count(),
        "total_recovered": float(latest_yearly.total_recovered or 0) if latest_yearly else 0.0,
    }
    recent_properties = s.query(Property).order_by(Property.created_at.desc(), Property.id.desc()).limit(5).all()
    return render_template(
        "admin/index.html",
        counts=counts,
        latest_period=latest_yearly.period if latest_yearly else None,
        recent_properties=recent_properties,
        recent_reports=open_reports(s, limit=5),
        system_status=_system_status(s),
    )


@bp.get("/me")
@require_permission("admin.view")
def me():
    user = getattr(g, "current_user", None)
    role_keys: list[str] = []
    perm_keys: list[str] = []
    if user:
        role_keys = sorted({r.key for r in (user.roles or [])})
        perm_keys = sorted({p.key for r in (user.roles or []) for p in (r.permissions or [])})
    return render_template("admin/me.html", user=user, role_keys=role_keys, perm_keys=perm_keys)


@bp.get("/audit")
@require_permission("audit.view")
def audit_list():
    """
    Audit trail (last 200 events) with simple filters:
    - action (contains)
    - actor_email (contains)
    - date range (YYYY-MM-DD, inclusive)
    """
    s = db_session()
    action = (request.args.get("action") or "").strip()
    actor_email = (request.args.get("actor_email") or "").strip()
    date_from = _parse_date_arg("date_from")
    date_to = _parse_date_arg("date_to")

    q = s.query(AuditEvent)
    if action:
        q = q.filter(AuditEvent.action.like(f"%{action}%"))
    if actor_email:
        q = q.filter(AuditEvent.actor_user_email.like(f"%{actor_email.lower()}%"))
    if date_from:
        q = q.filter(AuditEvent.created_at >= datetime.combine(date_from, time.min))
    if date_to:
        q = q.filter(AuditEvent.created_at < datetime.combine(date_to + timedelta(days=1), time.min))

    events = q.order_by(AuditEvent.created_at.desc(), AuditEvent.id.desc()).limit(200).all()
    return render_template(
        "admin/audit.html",
        events=events,
        action=action,
        actor_email=actor_email,
        date_from=(request.args.get("date_from") or "").strip(),
        date_to=(request.args.get("date_to") or "").strip(),
    )
