from __future__ import annotations

from flask import Blueprint, flash, g, redirect, render_template, request, url_for

from app.portal.db import db_session
from app.portal.modules.settings.schemas import SiteSettingsUpdate
from app.portal.modules.settings.service import get_settings, update_settings
from app.portal.rbac import require_permission
from app.portal.validation import form_payload, validate_payload

bp = Blueprint("settings_admin", __name__)

_FORM_FIELDS = (
    "site_name",
    "site_description",
    "contact_email",
    "contact_phone",
    "contact_address",
    "social_facebook",
    "social_twitter",
    "social_linkedin",
    "social_youtube",
    "featured_properties_count",
    "footer_text",
)
_FORM_CHECKBOXES = ("enable_anonymous_reports", "maintenance_mode")


@bp.get("/settings")
@require_permission("settings.manage")
def settings_get():
    return render_template("admin/settings.html", settings=get_settings(db_session()))


@bp.post("/settings")
@require_permission("settings.manage")
def settings_post():
    s = db_session()
    raw = form_payload(request.form, _FORM_FIELDS, checkboxes=_FORM_CHECKBOXES)
    payload, errors = validate_payload(SiteSettingsUpdate, raw)
    if errors:
        for e in errors:
            flash(e, "danger")
        settings = get_settings(s)
        settings.update(raw)
        return render_template("admin/settings.html", settings=settings), 400

    update_settings(s, payload, g.current_user)
    s.commit()
    flash("Settings saved.", "success")
    return redirect(url_for("settings_admin.settings_get"))
