from __future__ import annotations

from flask import Blueprint, current_app, g, request

from app.portal.db import db_session
from app.portal.models import User
from app.portal.modules.properties.models import Property
from app.portal.modules.properties.schemas import (
    ExpressionOfInterestCreate,
    PropertyCreate,
    PropertyFilters,
    PropertyUpdate,
)
from app.portal.modules.properties.service import (
    PropertyError,
    create_property,
    get_public_property,
    interest_count,
    list_admin_properties,
    list_public_properties,
    submit_expression_of_interest,
    update_property,
)
from app.portal.ratelimit import client_ip, rate_limit
from app.portal.rbac import require_permission
from app.portal.responses import fail, json_body, ok, query_args, validation_failed
from app.portal.validation import validate_payload

bp = Blueprint("properties_api", __name__)


def _current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


# ---------- Public ----------
@bp.get("/properties")
def api_properties_list():
    filters, errors = validate_payload(PropertyFilters, query_args())
    if errors:
        return validation_failed(errors)
    s = db_session()
    properties, pagination = list_public_properties(s, filters)
    return ok([p.to_dict() for p in properties], pagination=pagination)


@bp.get("/properties/<id_or_slug>")
def api_property_detail(id_or_slug: str):
    s = db_session()
    prop = get_public_property(s, id_or_slug)
    if prop is None:
        return fail("Property not found", 404)
    s.commit()
    data = prop.to_dict(detail=True)
    data["interest_count"] = interest_count(s, prop)
    return ok(data)


@bp.post("/properties/<int:property_id>/interest")
@rate_limit(max_requests=10, interval=60)
def api_property_interest(property_id: int):
    payload, errors = validate_payload(ExpressionOfInterestCreate, json_body())
    if errors:
        return validation_failed(errors)
    s = db_session()
    try:
        eoi = submit_expression_of_interest(s, property_id, payload, client_ip(request))
    except PropertyError as e:
        return fail(e.message, e.status_code)
    s.commit()
    current_app.logger.info("Expression of interest %s submitted for property %s", eoi.reference_number, property_id)
    return ok(
        {
            "reference_number": eoi.reference_number,
            "message": "Your expression of interest has been submitted successfully",
        }
    )


# ---------- Admin ----------
@bp.get("/admin/properties")
@require_permission("properties.view")
def api_admin_properties_list():
    filters, errors = validate_payload(PropertyFilters, query_args())
    if errors:
        return validation_failed(errors)
    s = db_session()
    properties, pagination = list_admin_properties(s, filters)
    return ok([p.to_dict() for p in properties], pagination=pagination)


@bp.post("/admin/properties")
@require_permission("properties.edit")
def api_admin_properties_create():
    payload, errors = validate_payload(PropertyCreate, json_body())
    if errors:
        return validation_failed(errors)
    s = db_session()
    prop = create_property(s, payload, _current_user())
    s.commit()
    return ok(prop.to_dict(detail=True), 201)


@bp.patch("/admin/properties/<int:property_id>")
@require_permission("properties.edit")
def api_admin_properties_update(property_id: int):
    s = db_session()
    prop = s.get(Property, property_id)
    if prop is None:
        return fail("Property not found", 404)
    payload, errors = validate_payload(PropertyUpdate, json_body())
    if errors:
        return validation_failed(errors)
    update_property(s, prop, payload, _current_user())
    s.commit()
    return ok(prop.to_dict(detail=True))
