from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from werkzeug.security import generate_password_hash

from app.portal.audit import record_event
from app.portal.models import Role, User

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.portal.modules.users.schemas import UserCreate, UserUpdate


class UserError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def list_users(s: "Session") -> list[User]:
    return s.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def _role(s: "Session", key: str) -> Role:
    role = s.query(Role).filter(Role.key == key).one_or_none()
    if role is None:
        raise UserError(f"Role '{key}' is not configured. Run scripts/init_db.py.")
    return role


def create_user(s: "Session", payload: "UserCreate", actor: User) -> User:
    email = str(payload.email).strip().lower()
    if s.query(User).filter(User.email == email).one_or_none() is not None:
        raise UserError("Email already in use")

    user = User(
        email=email,
        name=payload.name,
        password_hash=generate_password_hash(payload.password),
        is_active=payload.is_active,
        created_at=datetime.utcnow(),
    )
    user.roles = [_role(s, payload.role)]
    s.add(user)
    s.flush()
    record_event(
        s,
        actor=actor,
        action="user.create",
        entity_type="User",
        entity_id=str(user.id),
        metadata={"email": user.email, "role": payload.role, "is_active": user.is_active},
    )
    return user


def set_active(s: "Session", user: User, active: bool, actor: User) -> User:
    if not active and user.id == actor.id:
        raise UserError("You cannot deactivate your own account")
    if user.is_active != active:
        user.is_active = active
        record_event(
            s,
            actor=actor,
            action="user.activate" if active else "user.deactivate",
            entity_type="User",
            entity_id=str(user.id),
            metadata={"email": user.email},
        )
    return user


def set_role(s: "Session", user: User, role_key: str, actor: User) -> User:
    old = user.role_key
    if old == role_key and len(user.roles) == 1:
        return user
    if user.id == actor.id and old == "admin" and role_key != "admin":
        raise UserError("You cannot remove your own admin role")
    user.roles = [_role(s, role_key)]
    record_event(
        s,
        actor=actor,
        action="user.role_change",
        entity_type="User",
        entity_id=str(user.id),
        metadata={"email": user.email, "old": old, "new": role_key},
    )
    return user


def update_user(s: "Session", user: User, payload: "UserUpdate", actor: User) -> User:
    provided = payload.model_dump(exclude_unset=True)
    if provided.get("is_active") is not None:
        set_active(s, user, provided["is_active"], actor)
    if provided.get("role"):
        set_role(s, user, provided["role"], actor)
    if provided.get("name") and provided["name"] != user.name:
        record_event(
            s,
            actor=actor,
            action="user.edit",
            entity_type="User",
            entity_id=str(user.id),
            metadata={"name": {"old": user.name, "new": provided["name"]}},
        )
        user.name = provided["name"]
    if provided.get("password"):
        user.password_hash = generate_password_hash(provided["password"])
        record_event(s, actor=actor, action="user.password_reset", entity_type="User", entity_id=str(user.id))
    return user
