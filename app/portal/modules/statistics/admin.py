from __future__ import annotations

from flask import Blueprint, abort, flash, g, redirect, render_template, request, url_for

from app.portal.constants import PERIOD_TYPES
from app.portal.db import db_session
from app.portal.models import User
from app.portal.modules.statistics.models import RecoveryStatistic
from app.portal.modules.statistics.schemas import RecoveryStatisticCreate, RecoveryStatisticUpdate
from app.portal.modules.statistics.service import (
    StatisticsError,
    create_statistic,
    delete_statistic,
    list_statistics,
    update_statistic,
)
from app.portal.rbac import require_permission
from app.portal.validation import form_payload, validate_payload

bp = Blueprint("statistics_admin", __name__)

_FORM_FIELDS = (
    "period",
    "period_type",
    "total_recovered",
    "cash_recovered",
    "assets_recovered",
    "funds_to_treasury",
    "cases_opened",
    "cases_closed",
    "prosecutions",
    "convictions",
    "acquittals",
    "properties_seized",
    "properties_auctioned",
    "sector_breakdown",
    "region_breakdown",
)


def _current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


def _get_stat_or_404(stat_id: int) -> RecoveryStatistic:
    stat = db_session().get(RecoveryStatistic, stat_id)
    if not stat:
        abort(404)
    return stat


def _render_form(stat: RecoveryStatistic | None, form: dict, status: int = 200):
    return render_template("admin/statistics/form.html", stat=stat, form=form, period_types=PERIOD_TYPES), status


@bp.get("/statistics")
@require_permission("statistics.view")
def statistics_list():
    period_type = (request.args.get("period_type") or "").strip()
    stats = list_statistics(db_session(), period_type=period_type or None)
    return render_template("admin/statistics/list.html", stats=stats, period_type=period_type, period_types=PERIOD_TYPES)


@bp.get("/statistics/new")
@require_permission("statistics.edit")
def statistics_new_get():
    return _render_form(None, {})


@bp.post("/statistics/new")
@require_permission("statistics.edit")
def statistics_new_post():
    s = db_session()
    raw = form_payload(request.form, _FORM_FIELDS)
    payload, errors = validate_payload(RecoveryStatisticCreate, raw)
    if errors:
        for e in errors:
            flash(e, "danger")
        return _render_form(None, raw, 400)
    try:
        create_statistic(s, payload, _current_user())
    except StatisticsError as e:
        flash(e.message, "danger")
        return _render_form(None, raw, e.status_code)
    s.commit()
    flash("Statistics saved.", "success")
    return redirect(url_for("statistics_admin.statistics_list"))


@bp.get("/statistics/<int:stat_id>/edit")
@require_permission("statistics.edit")
def statistics_edit_get(stat_id: int):
    return _render_form(_get_stat_or_404(stat_id), {})


@bp.post("/statistics/<int:stat_id>/edit")
@require_permission("statistics.edit")
def statistics_edit_post(stat_id: int):
    s = db_session()
    stat = _get_stat_or_404(stat_id)
    raw = form_payload(request.form, _FORM_FIELDS)
    payload, errors = validate_payload(RecoveryStatisticUpdate, raw)
    if errors:
        for e in errors:
            flash(e, "danger")
        return _render_form(stat, raw, 400)
    try:
        update_statistic(s, stat, payload, _current_user())
    except StatisticsError as e:
        flash(e.message, "danger")
        return _render_form(stat, raw, e.status_code)
    s.commit()
    flash("Statistics updated.", "success")
    return redirect(url_for("statistics_admin.statistics_list"))


@bp.post("/statistics/<int:stat_id>/delete")
@require_permission("statistics.delete")
def statistics_delete(stat_id: int):
    s = db_session()
    stat = _get_stat_or_404(stat_id)
    delete_statistic(s, stat, _current_user())
    s.commit()
    flash("Statistics deleted.", "success")
    return redirect(url_for("statistics_admin.statistics_list"))
