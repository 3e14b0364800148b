from __future__ import annotations

from flask import Blueprint, current_app, g, request

from app.portal.db import db_session
from app.portal.modules.reports.models import CorruptionReport
from app.portal.modules.reports.schemas import CorruptionReportCreate, CorruptionReportUpdate, ReportFilters
from app.portal.modules.reports.service import ReportError, list_reports, submit_report, update_report
from app.portal.ratelimit import client_ip, rate_limit
from app.portal.rbac import require_permission
from app.portal.responses import fail, json_body, ok, query_args, validation_failed
from app.portal.validation import validate_payload

bp = Blueprint("reports_api", __name__)


@bp.post("/reports")
@rate_limit(max_requests=5, interval=60)
def api_reports_submit():
    payload, errors = validate_payload(CorruptionReportCreate, json_body())
    if errors:
        return validation_failed(errors)
    s = db_session()
    try:
        report = submit_report(s, payload, client_ip(request))
    except ReportError as e:
        return fail(e.message, e.status_code)
    s.commit()
    current_app.logger.info("Corruption report %s received", report.reference_number)
    return ok(
        {
            "reference_number": report.reference_number,
            "message": "Your report has been submitted successfully",
        }
    )


@bp.get("/admin/reports")
@require_permission("reports.view")
def api_admin_reports_list():
    filters, errors = validate_payload(ReportFilters, query_args())
    if errors:
        return validation_failed(errors)
    reports, pagination = list_reports(db_session(), filters)
    return ok([r.to_dict() for r in reports], pagination=pagination)


@bp.get("/admin/reports/<int:report_id>")
@require_permission("reports.view")
def api_admin_report_detail(report_id: int):
    report = db_session().get(CorruptionReport, report_id)
    if report is None:
        return fail("Report not found", 404)
    return ok(report.to_dict(detail=True))


@bp.patch("/admin/reports/<int:report_id>")
@require_permission("reports.edit")
def api_admin_report_update(report_id: int):
    s = db_session()
    report = s.get(CorruptionReport, report_id)
    if report is None:
        return fail("Report not found", 404)
    payload, errors = validate_payload(CorruptionReportUpdate, json_body())
    if errors:
        return validation_failed(errors)
    try:
        update_report(s, report, payload, g.current_user)
    except ReportError as e:
        return fail(e.message, e.status_code)
    s.commit()
    return ok(report.to_dict(detail=True))
