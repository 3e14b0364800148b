from __future__ import annotations

from flask import Blueprint, abort, flash, g, redirect, render_template, request, url_for

from app.portal.constants import ROLES
from app.portal.db import db_session
from app.portal.models import User
from app.portal.modules.users.schemas import UserCreate
from app.portal.modules.users.service import UserError, create_user, list_users, set_active, set_role
from app.portal.rbac import require_permission
from app.portal.validation import form_payload, validate_payload

bp = Blueprint("users_admin", __name__)


def _get_user_or_404(user_id: int) -> User:
    u = db_session().get(User, user_id)
    if not u:
        abort(404)
    return u


@bp.get("/users")
@require_permission("users.manage")
def users_list():
    return render_template("admin/users/list.html", users=list_users(db_session()), roles=ROLES)


@bp.get("/users/new")
@require_permission("users.manage")
def users_new_get():
    return render_template("admin/users/new.html", form={"is_active": True, "role": "viewer"}, roles=ROLES)


@bp.post("/users/new")
@require_permission("users.manage")
def users_new_post():
    s = db_session()
    raw = form_payload(request.form, ("name", "email", "password", "role"), checkboxes=("is_active",))
    payload, errors = validate_payload(UserCreate, raw)
    if not errors:
        try:
            user = create_user(s, payload, g.current_user)
        except UserError as e:
            errors = [e.message]
    if errors:
        for e in errors:
            flash(e, "danger")
        raw.pop("password", None)
        return render_template("admin/users/new.html", form=raw, roles=ROLES), 400
    s.commit()
    flash(f"User {user.email} created.", "success")
    return redirect(url_for("users_admin.users_list"))


@bp.post("/users/<int:user_id>/toggle")
@require_permission("users.manage")
def users_toggle(user_id: int):
    s = db_session()
    user = _get_user_or_404(user_id)
    try:
        set_active(s, user, not user.is_active, g.current_user)
    except UserError as e:
        flash(e.message, "danger")
        return redirect(url_for("users_admin.users_list"))
    s.commit()
    flash(f"User {user.email} {'activated' if user.is_active else 'deactivated'}.", "success")
    return redirect(url_for("users_admin.users_list"))


@bp.post("/users/<int:user_id>/role")
@require_permission("users.manage")
def users_role(user_id: int):
    s = db_session()
    user = _get_user_or_404(user_id)
    role_key = (request.form.get("role") or "").strip()
    if role_key not in ROLES:
        flash("Unknown role.", "danger")
        return redirect(url_for("users_admin.users_list"))
    try:
        set_role(s, user, role_key, g.current_user)
    except UserError as e:
        flash(e.message, "danger")
        return redirect(url_for("users_admin.users_list"))
    s.commit()
    flash(f"Role for {user.email} set to {ROLES[role_key]}.", "success")
    return redirect(url_for("users_admin.users_list"))
