import os
import sys
from pathlib import Path

from werkzeug.security import generate_password_hash

# Ensure repo root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.portal.constants import PERMISSIONS, ROLE_PERMISSIONS, ROLES
from app.portal.models import Base, Permission, Role, User
from scripts._db_utils import create_script_engine, script_session


def seed_rbac(s) -> dict[str, Role]:
    """Create missing permissions/roles and sync role grants with ROLE_PERMISSIONS."""
    perms: dict[str, Permission] = {}
    for key, name in PERMISSIONS.items():
        p = s.query(Permission).filter(Permission.key == key).one_or_none()
        if not p:
            p = Permission(key=key, name=name)
            s.add(p)
        perms[key] = p

    roles: dict[str, Role] = {}
    for key, name in ROLES.items():
        role = s.query(Role).filter(Role.key == key).one_or_none()
        if not role:
            role = Role(key=key, name=name)
            s.add(role)
        for perm_key in ROLE_PERMISSIONS[key]:
            if perms[perm_key] not in role.permissions:
                role.permissions.append(perms[perm_key])
        roles[key] = role
    return roles


def seed_only(*, database_url: str | None = None) -> None:
    """
    Seed permissions/roles/admin user in an idempotent way.
    Does NOT overwrite an existing admin user's password.
    """
    admin_email = (os.environ.get("ADMIN_EMAIL") or "admin@anticorruption.gov.sl").strip().lower()
    admin_password = os.environ.get("ADMIN_PASSWORD") or "change-me"

    db_url = (database_url or os.environ.get("DATABASE_URL") or "sqlite:///portal.db").strip()

    with script_session(db_url) as s:
        roles = seed_rbac(s)
        user = s.query(User).filter(User.email == admin_email).one_or_none()
        if not user:
            user = User(
                email=admin_email,
                name="Administrator",
                password_hash=generate_password_hash(admin_password),
                is_active=True,
            )
            s.add(user)
        if roles["admin"] not in user.roles:
            user.roles.append(roles["admin"])

    print("Initialized database (seed_only).")
    print(f"Admin email: {admin_email}")
    print("Admin password: (from ADMIN_PASSWORD)")


def main() -> None:
    """Local development: create tables directly (no alembic) and seed."""
    db_url = (os.environ.get("DATABASE_URL") or "sqlite:///portal.db").strip()
    engine = create_script_engine(db_url)
    Base.metadata.create_all(engine)
    engine.dispose()
    seed_only(database_url=db_url)


if __name__ == "__main__":
    main()
