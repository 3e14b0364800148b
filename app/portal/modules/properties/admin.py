from __future__ import annotations

from flask import Blueprint, abort, flash, g, redirect, render_template, request, url_for

from app.portal.constants import EOI_STATUSES, PROPERTY_STATUSES, PROPERTY_TYPES, SIERRA_LEONE_REGIONS
from app.portal.db import db_session
from app.portal.models import User
from app.portal.modules.properties.models import ExpressionOfInterest, Property, PropertyImage
from app.portal.modules.properties.schemas import (
    InterestStatusUpdate,
    PropertyCreate,
    PropertyFilters,
    PropertyUpdate,
)
from app.portal.modules.properties.service import (
    add_property_document,
    add_property_image,
    create_property,
    delete_property,
    delete_property_image,
    list_admin_properties,
    publish_property,
    update_interest_status,
    update_property,
)
from app.portal.rbac import require_permission
from app.portal.uploads import save_upload
from app.portal.validation import form_payload, validate_payload

bp = Blueprint("properties_admin", __name__)

_FORM_FIELDS = (
    "title",
    "description",
    "type",
    "status",
    "region",
    "district",
    "address",
    "latitude",
    "longitude",
    "estimated_value",
    "minimum_bid",
    "currency",
    "auction_date",
    "auction_venue",
    "auction_end_date",
    "size",
    "bedrooms",
    "bathrooms",
    "year_built",
    "features",
    "case_reference",
    "former_owner",
    "recovery_date",
)
_FORM_CHECKBOXES = ("is_featured", "publish")


def _current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


def _get_property_or_404(property_id: int) -> Property:
    prop = db_session().get(Property, property_id)
    if not prop:
        abort(404)
    return prop


def _form_context() -> dict:
    return {
        "property_types": PROPERTY_TYPES,
        "property_statuses": PROPERTY_STATUSES,
        "regions": SIERRA_LEONE_REGIONS,
    }


# ---------- List ----------
@bp.get("/properties")
@require_permission("properties.view")
def properties_list():
    s = db_session()
    filters, errors = validate_payload(PropertyFilters, dict(request.args.items()))
    if errors:
        for e in errors:
            flash(e, "danger")
        filters = PropertyFilters()
    properties, pagination = list_admin_properties(s, filters)
    return render_template(
        "admin/properties/list.html",
        properties=properties,
        pagination=pagination,
        filters=filters,
        **_form_context(),
    )


# ---------- New ----------
@bp.get("/properties/new")
@require_permission("properties.edit")
def properties_new_get():
    return render_template("admin/properties/form.html", property=None, form={}, **_form_context())


@bp.post("/properties/new")
@require_permission("properties.edit")
def properties_new_post():
    s = db_session()
    raw = form_payload(request.form, _FORM_FIELDS, checkboxes=_FORM_CHECKBOXES)
    payload, errors = validate_payload(PropertyCreate, raw)
    if errors:
        for e in errors:
            flash(e, "danger")
        return render_template("admin/properties/form.html", property=None, form=raw, **_form_context()), 400

    prop = create_property(s, payload, _current_user())
    s.commit()
    flash(f"Property {prop.reference_number} created.", "success")
    return redirect(url_for("properties_admin.property_detail", property_id=prop.id))


# ---------- Detail ----------
@bp.get("/properties/<int:property_id>")
@require_permission("properties.view")
def property_detail(property_id: int):
    s = db_session()
    prop = _get_property_or_404(property_id)
    interests = (
        s.query(ExpressionOfInterest)
        .filter(ExpressionOfInterest.property_id == prop.id)
        .order_by(ExpressionOfInterest.created_at.desc())
        .all()
    )
    return render_template(
        "admin/properties/detail.html",
        property=prop,
        interests=interests,
        eoi_statuses=EOI_STATUSES,
    )


# ---------- Edit ----------
@bp.get("/properties/<int:property_id>/edit")
@require_permission("properties.edit")
def property_edit_get(property_id: int):
    prop = _get_property_or_404(property_id)
    return render_template("admin/properties/form.html", property=prop, form={}, **_form_context())


@bp.post("/properties/<int:property_id>/edit")
@require_permission("properties.edit")
def property_edit_post(property_id: int):
    s = db_session()
    prop = _get_property_or_404(property_id)
    raw = form_payload(request.form, _FORM_FIELDS, checkboxes=_FORM_CHECKBOXES)
    payload, errors = validate_payload(PropertyUpdate, raw)
    if errors:
        for e in errors:
            flash(e, "danger")
        return render_template("admin/properties/form.html", property=prop, form=raw, **_form_context()), 400

    update_property(s, prop, payload, _current_user())
    s.commit()
    flash("Property updated.", "success")
    return redirect(url_for("properties_admin.property_detail", property_id=prop.id))


@bp.post("/properties/<int:property_id>/publish")
@require_permission("properties.edit")
def property_publish(property_id: int):
    s = db_session()
    prop = _get_property_or_404(property_id)
    publish = (request.form.get("publish") or "1") == "1"
    publish_property(s, prop, publish, _current_user())
    s.commit()
    flash("Property published." if publish else "Property unpublished.", "success")
    return redirect(url_for("properties_admin.property_detail", property_id=prop.id))


@bp.post("/properties/<int:property_id>/delete")
@require_permission("properties.delete")
def property_delete(property_id: int):
    s = db_session()
    prop = _get_property_or_404(property_id)
    ref = prop.reference_number
    delete_property(s, prop, _current_user())
    s.commit()
    flash(f"Property {ref} deleted.", "success")
    return redirect(url_for("properties_admin.properties_list"))


# ---------- Images / Documents ----------
@bp.post("/properties/<int:property_id>/images")
@require_permission("properties.edit")
def property_image_upload(property_id: int):
    s = db_session()
    u = _current_user()
    prop = _get_property_or_404(property_id)
    files = [f for f in request.files.getlist("images") if f and f.filename]
    if not files:
        flash("Select at least one image.", "danger")
        return redirect(url_for("properties_admin.property_detail", property_id=prop.id))

    caption = (request.form.get("caption") or "").strip() or None
    added = 0
    for f in files:
        result = save_upload(f, f"properties/{prop.id}", kind="image")
        if not result.success:
            flash(f"{f.filename}: {result.error}", "danger")
            continue
        add_property_image(s, prop, result, u, caption=caption)
        added += 1
    s.commit()
    if added:
        flash(f"{added} image(s) uploaded.", "success")
    return redirect(url_for("properties_admin.property_detail", property_id=prop.id))


@bp.post("/properties/<int:property_id>/images/<int:image_id>/delete")
@require_permission("properties.edit")
def property_image_delete(property_id: int, image_id: int):
    s = db_session()
    image = s.get(PropertyImage, image_id)
    if not image or image.property_id != property_id:
        abort(404)
    delete_property_image(s, image, _current_user())
    s.commit()
    flash("Image removed.", "success")
    return redirect(url_for("properties_admin.property_detail", property_id=property_id))


@bp.post("/properties/<int:property_id>/documents")
@require_permission("properties.edit")
def property_document_upload(property_id: int):
    s = db_session()
    prop = _get_property_or_404(property_id)
    f = request.files.get("file")
    if not f or not f.filename:
        flash("No file selected.", "danger")
        return redirect(url_for("properties_admin.property_detail", property_id=prop.id))

    result = save_upload(f, f"properties/{prop.id}/documents", kind="document")
    if not result.success:
        flash(result.error or "Upload failed.", "danger")
        return redirect(url_for("properties_admin.property_detail", property_id=prop.id))

    add_property_document(s, prop, result, _current_user(), title=request.form.get("title"))
    s.commit()
    flash("Document uploaded.", "success")
    return redirect(url_for("properties_admin.property_detail", property_id=prop.id))


# ---------- Expressions of interest ----------
@bp.get("/interests")
@require_permission("properties.view")
def interests_list():
    s = db_session()
    status_filter = (request.args.get("status") or "").strip()
    q = s.query(ExpressionOfInterest)
    if status_filter:
        q = q.filter(ExpressionOfInterest.status == status_filter)
    interests = q.order_by(ExpressionOfInterest.created_at.desc()).limit(500).all()
    return render_template(
        "admin/properties/interests.html",
        interests=interests,
        show_property=True,
        status_filter=status_filter,
        eoi_statuses=EOI_STATUSES,
    )


@bp.post("/interests/<int:interest_id>/status")
@require_permission("properties.edit")
def interest_status_post(interest_id: int):
    s = db_session()
    eoi = s.get(ExpressionOfInterest, interest_id)
    if not eoi:
        abort(404)
    payload, errors = validate_payload(
        InterestStatusUpdate, form_payload(request.form, ("status", "admin_notes"))
    )
    if errors:
        for e in errors:
            flash(e, "danger")
    else:
        update_interest_status(s, eoi, payload.status, payload.admin_notes, _current_user())
        s.commit()
        flash(f"Interest {eoi.reference_number} marked {payload.status}.", "success")
    nxt = (request.form.get("next") or "").strip()
    if nxt.startswith("/") and not nxt.startswith("//"):
        return redirect(nxt)
    return redirect(url_for("properties_admin.interests_list"))
