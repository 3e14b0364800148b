from __future__ import annotations

from flask import Blueprint, g

from app.portal.db import db_session
from app.portal.models import User
from app.portal.modules.users.schemas import UserCreate, UserUpdate
from app.portal.modules.users.service import UserError, create_user, list_users, update_user
from app.portal.rbac import require_permission
from app.portal.responses import fail, json_body, ok, validation_failed
from app.portal.validation import validate_payload

bp = Blueprint("users_api", __name__)


@bp.get("/admin/users")
@require_permission("users.manage")
def api_users_list():
    return ok([u.to_dict() for u in list_users(db_session())])


@bp.post("/admin/users")
@require_permission("users.manage")
def api_users_create():
    payload, errors = validate_payload(UserCreate, json_body())
    if errors:
        return validation_failed(errors)
    s = db_session()
    try:
        user = create_user(s, payload, g.current_user)
    except UserError as e:
        return fail(e.message, e.status_code)
    s.commit()
    return ok(user.to_dict(), 201)


@bp.patch("/admin/users/<int:user_id>")
@require_permission("users.manage")
def api_users_update(user_id: int):
    s = db_session()
    user = s.get(User, user_id)
    if user is None:
        return fail("User not found", 404)
    payload, errors = validate_payload(UserUpdate, json_body())
    if errors:
        return validation_failed(errors)
    try:
        update_user(s, user, payload, g.current_user)
    except UserError as e:
        return fail(e.message, e.status_code)
    s.commit()
    return ok(user.to_dict())
