from __future__ import annotations

from flask import Blueprint, abort, g, request

from app.portal.db import db_session
from app.portal.models import User
from app.portal.modules.content.admin import KIND_PATH
from app.portal.modules.content.service import ContentKind, create_content, get_kind, list_admin, update_content
from app.portal.rbac import require_permission
from app.portal.responses import fail, json_body, ok, validation_failed
from app.portal.validation import validate_payload

bp = Blueprint("content_api", __name__)


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


@bp.get(f"/admin/{KIND_PATH}")
@require_permission("content.view")
def api_content_list(kind_key: str):
    kind = _kind_or_404(kind_key)
    s = db_session()
    items = list_admin(
        s,
        kind,
        status=(request.args.get("status") or "").strip() or None,
        search=(request.args.get("search") or "").strip() or None,
    )
    return ok([i.to_dict() for i in items])


@bp.post(f"/admin/{KIND_PATH}")
@require_permission("content.edit")
def api_content_create(kind_key: str):
    kind = _kind_or_404(kind_key)
    payload, errors = validate_payload(kind.create_schema, json_body())
    if errors:
        return validation_failed(errors)
    s = db_session()
    item = create_content(s, kind, payload, _current_user())
    s.commit()
    return ok(item.to_dict(), 201)


@bp.patch(f"/admin/{KIND_PATH}/<int:item_id>")
@require_permission("content.edit")
def api_content_update(kind_key: str, item_id: int):
    kind = _kind_or_404(kind_key)
    s = db_session()
    item = s.get(kind.model, item_id)
    if item is None:
        return fail(f"{kind.label} not found", 404)
    payload, errors = validate_payload(kind.update_schema, json_body())
    if errors:
        return validation_failed(errors)
    update_content(s, kind, item, payload, _current_user())
    s.commit()
    return ok(item.to_dict())
