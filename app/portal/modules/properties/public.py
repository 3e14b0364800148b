from __future__ import annotations

from flask import Blueprint, abort, flash, redirect, render_template, request, url_for

from app.portal.constants import PROPERTY_STATUSES, PROPERTY_TYPES, SIERRA_LEONE_REGIONS
from app.portal.db import db_session
from app.portal.modules.properties.schemas import ExpressionOfInterestCreate, PropertyFilters
from app.portal.modules.properties.service import (
    PropertyError,
    find_published_property,
    get_public_property,
    interest_count,
    list_public_properties,
    submit_expression_of_interest,
)
from app.portal.ratelimit import check_rate_limit, client_ip
from app.portal.validation import form_payload, validate_payload

bp = Blueprint("properties_public", __name__)

_EOI_FIELDS = (
    "full_name",
    "email",
    "phone",
    "organization",
    "address",
    "nationality",
    "nin",
    "passport_number",
    "intended_use",
    "proposed_amount",
    "message",
)


@bp.get("/properties")
def properties_list():
    s = db_session()
    filters, errors = validate_payload(PropertyFilters, dict(request.args.items()))
    if errors:
        for e in errors:
            flash(e, "danger")
        filters = PropertyFilters()
    properties, pagination = list_public_properties(s, filters)
    return render_template(
        "public/properties/list.html",
        properties=properties,
        pagination=pagination,
        filters=filters,
        property_types=PROPERTY_TYPES,
        property_statuses=PROPERTY_STATUSES,
        regions=SIERRA_LEONE_REGIONS,
    )


@bp.get("/properties/<slug>")
def property_detail(slug: str):
    s = db_session()
    prop = get_public_property(s, slug)
    if prop is None:
        abort(404)
    s.commit()
    return render_template(
        "public/properties/detail.html",
        property=prop,
        interest_count=interest_count(s, prop),
    )


@bp.post("/properties/<slug>/interest")
def property_interest_post(slug: str):
    s = db_session()
    prop = find_published_property(s, slug)
    if prop is None:
        abort(404)

    if not check_rate_limit().allowed:
        flash("Too many requests. Please try again later.", "danger")
        return redirect(url_for("properties_public.property_detail", slug=prop.slug))

    payload, errors = validate_payload(ExpressionOfInterestCreate, form_payload(request.form, _EOI_FIELDS))
    if errors:
        for e in errors:
            flash(e, "danger")
        return redirect(url_for("properties_public.property_detail", slug=prop.slug))

    try:
        eoi = submit_expression_of_interest(s, prop.id, payload, client_ip(request))
    except PropertyError as e:
        flash(e.message, "danger")
        return redirect(url_for("properties_public.property_detail", slug=prop.slug))
    s.commit()

    flash(f"Your expression of interest has been submitted successfully. Reference: {eoi.reference_number}", "success")
    return redirect(url_for("properties_public.property_detail", slug=prop.slug))
