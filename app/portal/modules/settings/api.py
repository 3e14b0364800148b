from __future__ import annotations

from flask import Blueprint, g

from app.portal.db import db_session
from app.portal.modules.settings.schemas import SiteSettingsUpdate, SubscribeRequest
from app.portal.modules.settings.service import SubscriptionError, get_settings, subscribe, update_settings
from app.portal.ratelimit import rate_limit
from app.portal.rbac import require_permission
from app.portal.responses import fail, json_body, ok, validation_failed
from app.portal.validation import validate_payload

bp = Blueprint("settings_api", __name__)


@bp.get("/admin/settings")
@require_permission("settings.manage")
def api_settings_get():
    return ok(get_settings(db_session()))


@bp.put("/admin/settings")
@require_permission("settings.manage")
def api_settings_put():
    payload, errors = validate_payload(SiteSettingsUpdate, json_body())
    if errors:
        return validation_failed(errors)
    s = db_session()
    settings = update_settings(s, payload, g.current_user)
    s.commit()
    return ok(settings)


@bp.post("/subscribe")
@rate_limit(max_requests=5, interval=60)
def api_subscribe():
    payload, errors = validate_payload(SubscribeRequest, json_body())
    if errors:
        return fail("Invalid email address", 400, errors=errors)
    s = db_session()
    try:
        _sub, message = subscribe(s, payload)
    except SubscriptionError as e:
        return fail(e.message, e.status_code)
    s.commit()
    return ok(message=message)
