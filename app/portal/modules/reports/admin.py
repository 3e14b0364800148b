from __future__ import annotations

from flask import Blueprint, abort, flash, g, redirect, render_template, request, url_for

from app.portal.constants import REPORT_CATEGORIES, REPORT_PRIORITIES, REPORT_STATUSES
from app.portal.db import db_session
from app.portal.modules.reports.models import CorruptionReport
from app.portal.modules.reports.schemas import CorruptionReportUpdate, ReportFilters
from app.portal.modules.reports.service import ReportError, list_reports, update_report
from app.portal.modules.users.service import list_users
from app.portal.rbac import require_permission
from app.portal.validation import form_payload, validate_payload

bp = Blueprint("reports_admin", __name__)

_UPDATE_FIELDS = ("status", "priority", "assigned_to_id", "internal_notes")


def _get_report_or_404(report_id: int) -> CorruptionReport:
    report = db_session().get(CorruptionReport, report_id)
    if not report:
        abort(404)
    return report


def _render_detail(report: CorruptionReport, status: int = 200):
    users = [u for u in list_users(db_session()) if u.is_active]
    return (
        render_template(
            "admin/reports/detail.html",
            report=report,
            statuses=REPORT_STATUSES,
            priorities=REPORT_PRIORITIES,
            users=users,
        ),
        status,
    )


@bp.get("/reports")
@require_permission("reports.view")
def reports_list():
    s = db_session()
    filters, errors = validate_payload(ReportFilters, dict(request.args.items()))
    if errors:
        for e in errors:
            flash(e, "danger")
        filters = ReportFilters()
    reports, pagination = list_reports(s, filters)
    return render_template(
        "admin/reports/list.html",
        reports=reports,
        pagination=pagination,
        filters=filters,
        statuses=REPORT_STATUSES,
        priorities=REPORT_PRIORITIES,
        categories=REPORT_CATEGORIES,
    )


@bp.get("/reports/<int:report_id>")
@require_permission("reports.view")
def reports_detail(report_id: int):
    return _render_detail(_get_report_or_404(report_id))


@bp.post("/reports/<int:report_id>")
@require_permission("reports.edit")
def reports_update(report_id: int):
    s = db_session()
    report = _get_report_or_404(report_id)
    raw = form_payload(request.form, _UPDATE_FIELDS)
    payload, errors = validate_payload(CorruptionReportUpdate, raw)
    if errors:
        for e in errors:
            flash(e, "danger")
        return _render_detail(report, 400)
    try:
        update_report(s, report, payload, g.current_user)
    except ReportError as e:
        flash(e.message, "danger")
        return _render_detail(report, e.status_code)
    s.commit()
    flash(f"Report {report.reference_number} updated.", "success")
    return redirect(url_for("reports_admin.reports_detail", report_id=report.id))
