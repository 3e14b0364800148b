from __future__ import annotations

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for

from app.portal.constants import REPORT_CATEGORIES, SIERRA_LEONE_REGIONS
from app.portal.db import db_session
from app.portal.modules.reports.schemas import CorruptionReportCreate
from app.portal.modules.reports.service import ReportError, submit_report
from app.portal.modules.settings.service import current_settings
from app.portal.ratelimit import check_rate_limit, client_ip
from app.portal.uploads import discard_uploads, save_uploads
from app.portal.validation import form_payload, validate_payload

bp = Blueprint("reports_public", __name__)

_FORM_FIELDS = (
    "reporter_name",
    "reporter_email",
    "reporter_phone",
    "incident_date",
    "incident_location",
    "region",
    "accused_name",
    "accused_position",
    "accused_organization",
    "category",
    "description",
    "estimated_amount",
    "evidence_description",
)
_FORM_CHECKBOXES = ("is_anonymous", "has_evidence")
MAX_EVIDENCE_FILES = 5


def _render_form(form: dict, status: int = 200):
    return (
        render_template(
            "public/report.html",
            form=form,
            categories=REPORT_CATEGORIES,
            regions=SIERRA_LEONE_REGIONS,
            anonymous_allowed=current_settings(db_session()).get("enable_anonymous_reports", True),
        ),
        status,
    )


@bp.get("/report-corruption")
def report_get():
    return _render_form({"is_anonymous": True})


@bp.get("/report-corruption/submitted/<reference>")
def report_submitted(reference: str):
    return render_template("public/report_submitted.html", reference=reference)


@bp.post("/report-corruption")
def report_post():
    raw = form_payload(request.form, _FORM_FIELDS, checkboxes=_FORM_CHECKBOXES)
    if not check_rate_limit(max_requests=5, interval=60).allowed:
        flash("Too many requests. Please try again later.", "danger")
        return _render_form(raw, 429)

    payload, errors = validate_payload(CorruptionReportCreate, raw)
    if errors:
        for e in errors:
            flash(e, "danger")
        return _render_form(raw, 400)

    files = [f for f in request.files.getlist("evidence") if f and f.filename]
    if len(files) > MAX_EVIDENCE_FILES:
        flash(f"You can attach at most {MAX_EVIDENCE_FILES} files.", "danger")
        return _render_form(raw, 400)

    uploads = save_uploads(files, "reports")
    failed = [u for u in uploads if not u.success]
    if failed:
        discard_uploads(uploads)
        for u in failed:
            flash(f"{u.original_name}: {u.error}", "danger")
        return _render_form(raw, 400)

    s = db_session()
    try:
        report = submit_report(s, payload, client_ip(request), uploads)
    except ReportError as e:
        discard_uploads(uploads)
        flash(e.message, "danger")
        return _render_form(raw, e.status_code)
    s.commit()
    current_app.logger.info("Corruption report %s received", report.reference_number)
    return redirect(url_for("reports_public.report_submitted", reference=report.reference_number))
