from __future__ import annotations

from flask import Blueprint, flash, redirect, request, url_for

from app.portal.db import db_session
from app.portal.modules.settings.schemas import SubscribeRequest
from app.portal.modules.settings.service import SubscriptionError, subscribe
from app.portal.ratelimit import check_rate_limit
from app.portal.validation import form_payload, validate_payload

bp = Blueprint("settings_public", __name__)


def _back():
    target = request.referrer or ""
    if not target.startswith(request.host_url):
        target = url_for("routes.index")
    return redirect(target)


@bp.post("/subscribe")
def subscribe_post():
    """Newsletter form in the site footer."""
    if not check_rate_limit(max_requests=5, interval=60).allowed:
        flash("Too many requests. Please try again later.", "danger")
        return _back()

    payload, errors = validate_payload(SubscribeRequest, form_payload(request.form, ("email", "name")))
    if errors:
        flash("Please enter a valid email address.", "danger")
        return _back()

    s = db_session()
    try:
        _sub, message = subscribe(s, payload)
    except SubscriptionError as e:
        flash(e.message, "warning")
        return _back()
    s.commit()
    flash(message, "success")
    return _back()
