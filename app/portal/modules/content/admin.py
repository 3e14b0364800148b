from __future__ import annotations

from flask import Blueprint, abort, flash, g, redirect, render_template, request, url_for

from app.portal.constants import CONTENT_STATUSES, RESOURCE_TYPES, SIERRA_LEONE_REGIONS
from app.portal.db import db_session
from app.portal.models import User
from app.portal.modules.content.service import (
    ContentKind,
    create_content,
    delete_content,
    get_kind,
    list_admin,
    update_content,
)
from app.portal.rbac import require_permission
from app.portal.uploads import save_upload
from app.portal.validation import form_payload, validate_payload

bp = Blueprint("content_admin", __name__)

KIND_PATH = "<any(cases, news, resources):kind_key>"

_FORM_FIELDS = {
    "cases": (
        "title",
        "summary",
        "content",
        "case_number",
        "defendant",
        "charges",
        "verdict",
        "sentence",
        "amount_involved",
        "amount_recovered",
        "sector",
        "region",
        "case_date",
        "verdict_date",
        "featured_image",
        "status",
    ),
    "news": ("title", "excerpt", "content", "category", "tags", "featured_image", "status"),
    "resources": (
        "title",
        "description",
        "content",
        "category",
        "resource_type",
        "featured_image",
        "file_url",
        "video_url",
        "status",
    ),
}


def _current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


def _kind_or_404(kind_key: str) -> ContentKind:
    kind = get_kind(kind_key)
    if kind is None:
        abort(404)
    return kind


def _item_or_404(kind: ContentKind, item_id: int):
    item = db_session().get(kind.model, item_id)
    if item is None:
        abort(404)
    return item


def _form_context(kind: ContentKind) -> dict:
    return {
        "kind": kind,
        "content_statuses": CONTENT_STATUSES,
        "resource_types": RESOURCE_TYPES,
        "regions": SIERRA_LEONE_REGIONS,
    }


def _collect_form(kind: ContentKind) -> dict:
    raw = form_payload(request.form, _FORM_FIELDS[kind.key])
    # Optional image upload replaces the featured_image URL
    f = request.files.get("featured_image_file")
    if f and f.filename:
        result = save_upload(f, kind.key, kind="image")
        if result.success:
            raw["featured_image"] = result.url
        else:
            flash(result.error or "Image upload failed.", "danger")
    if kind.key == "resources":
        doc = request.files.get("resource_file")
        if doc and doc.filename:
            result = save_upload(doc, "resources/files", kind="document")
            if result.success:
                raw["file_url"] = result.url
            else:
                flash(result.error or "File upload failed.", "danger")
    return raw


@bp.get(f"/{KIND_PATH}")
@require_permission("content.view")
def content_list(kind_key: str):
    kind = _kind_or_404(kind_key)
    s = db_session()
    status_filter = (request.args.get("status") or "").strip()
    search = (request.args.get("q") or "").strip()
    items = list_admin(s, kind, status=status_filter or None, search=search or None)
    return render_template(
        "admin/content/list.html",
        items=items,
        status_filter=status_filter,
        search=search,
        **_form_context(kind),
    )


@bp.get(f"/{KIND_PATH}/new")
@require_permission("content.edit")
def content_new_get(kind_key: str):
    kind = _kind_or_404(kind_key)
    return render_template("admin/content/form.html", item=None, form={}, **_form_context(kind))


@bp.post(f"/{KIND_PATH}/new")
@require_permission("content.edit")
def content_new_post(kind_key: str):
    kind = _kind_or_404(kind_key)
    s = db_session()
    raw = _collect_form(kind)
    payload, errors = validate_payload(kind.create_schema, raw)
    if errors:
        for e in errors:
            flash(e, "danger")
        return render_template("admin/content/form.html", item=None, form=raw, **_form_context(kind)), 400

    item = create_content(s, kind, payload, _current_user())
    s.commit()
    flash(f"{kind.label} created.", "success")
    return redirect(url_for("content_admin.content_list", kind_key=kind.key))


@bp.get(f"/{KIND_PATH}/<int:item_id>/edit")
@require_permission("content.edit")
def content_edit_get(kind_key: str, item_id: int):
    kind = _kind_or_404(kind_key)
    item = _item_or_404(kind, item_id)
    return render_template("admin/content/form.html", item=item, form={}, **_form_context(kind))


@bp.post(f"/{KIND_PATH}/<int:item_id>/edit")
@require_permission("content.edit")
def content_edit_post(kind_key: str, item_id: int):
    kind = _kind_or_404(kind_key)
    s = db_session()
    item = _item_or_404(kind, item_id)
    raw = _collect_form(kind)
    payload, errors = validate_payload(kind.update_schema, raw)
    if errors:
        for e in errors:
            flash(e, "danger")
        return render_template("admin/content/form.html", item=item, form=raw, **_form_context(kind)), 400

    update_content(s, kind, item, payload, _current_user())
    s.commit()
    flash(f"{kind.label} updated.", "success")
    return redirect(url_for("content_admin.content_list", kind_key=kind.key))


@bp.post(f"/{KIND_PATH}/<int:item_id>/delete")
@require_permission("content.delete")
def content_delete(kind_key: str, item_id: int):
    kind = _kind_or_404(kind_key)
    s = db_session()
    item = _item_or_404(kind, item_id)
    delete_content(s, kind, item, _current_user())
    s.commit()
    flash(f"{kind.label} deleted.", "success")
    return redirect(url_for("content_admin.content_list", kind_key=kind.key))
