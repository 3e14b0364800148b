"""Tests for staff user management and role-based access."""
import pytest
from werkzeug.security import generate_password_hash

from app.portal import create_app
from app.portal.constants import PERMISSIONS, ROLE_PERMISSIONS, ROLES
from app.portal.db import session_scope
from app.portal.models import AuditEvent, Base, Permission, Role, User
from app.portal.rbac import user_has_permission


def _seed_rbac(s):
    perms = {key: Permission(key=key, name=name) for key, name in PERMISSIONS.items()}
    roles = {}
    for key, name in ROLES.items():
        r = Role(key=key, name=name)
        r.permissions.extend(perms[p] for p in ROLE_PERMISSIONS[key])
        roles[key] = r
    s.add_all([*perms.values(), *roles.values()])
    return roles


@pytest.fixture()
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("STORAGE_BACKEND", "local")
    for k in ("S3_ENDPOINT", "S3_REGION", "S3_BUCKET", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY"):
        monkeypatch.delenv(k, raising=False)

    app = create_app()
    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)

    with session_scope(app) as s:
        roles = _seed_rbac(s)
        users = []
        for email, role in (
            ("admin@example.com", "admin"),
            ("editor@example.com", "editor"),
            ("viewer@example.com", "viewer"),
        ):
            u = User(email=email, password_hash=generate_password_hash("pw"), is_active=True)
            u.roles.append(roles[role])
            users.append(u)
        s.add_all(users)

    return app.test_client()


def _login(client, email="admin@example.com", password="pw"):
    return client.post("/auth/login", data={"email": email, "password": password}, follow_redirects=True)


def _csrf(client):
    with client.session_transaction() as sess:
        sess["csrf_token"] = "test-token"
    return "test-token"


def _user_id(client, email):
    with session_scope(client.application) as s:
        return s.query(User.id).filter(User.email == email).scalar()


def test_role_permission_matrix(client):
    with session_scope(client.application) as s:
        admin = s.query(User).filter(User.email == "admin@example.com").one()
        editor = s.query(User).filter(User.email == "editor@example.com").one()
        viewer = s.query(User).filter(User.email == "viewer@example.com").one()

        assert all(user_has_permission(admin, key) for key in PERMISSIONS)
        assert user_has_permission(editor, "properties.edit")
        assert not user_has_permission(editor, "properties.delete")
        assert not user_has_permission(editor, "users.manage")
        assert user_has_permission(viewer, "reports.view")
        assert not user_has_permission(viewer, "reports.edit")
        assert not user_has_permission(None, "admin.view")

        viewer.is_active = False
        assert not user_has_permission(viewer, "reports.view")


def test_anonymous_admin_pages_redirect_to_login(client):
    r = client.get("/admin/properties?status=SOLD")
    assert r.status_code == 302
    assert "/auth/login" in r.headers["Location"]
    assert "next=" in r.headers["Location"]


def test_login_next_redirect_is_local_only(client):
    r = client.post(
        "/auth/login",
        data={"email": "admin@example.com", "password": "pw", "next": "//evil.example/"},
    )
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/admin/")


def test_editor_cannot_manage_users(client):
    _login(client, "editor@example.com")
    assert client.get("/admin/properties").status_code == 200
    assert client.get("/admin/users").status_code == 403
    r = client.get("/api/admin/users")
    assert r.status_code == 403
    assert r.json == {"success": False, "error": "Forbidden"}


def test_viewer_cannot_edit(client):
    _login(client, "viewer@example.com")
    assert client.get("/admin/properties/new").status_code == 403
    r = client.post(
        "/api/admin/properties",
        json={
            "title": "Viewer should not create this",
            "description": "A description long enough to pass validation.",
            "type": "LAND",
            "region": "Bo",
            "estimatedValue": 1000,
        },
    )
    assert r.status_code == 403


def test_inactive_user_cannot_log_in(client):
    with session_scope(client.application) as s:
        s.query(User).filter(User.email == "viewer@example.com").one().is_active = False

    r = _login(client, "viewer@example.com")
    assert b"Invalid credentials" in r.data
    assert client.get("/admin/").status_code == 302


def test_create_user_via_api(client):
    _login(client)
    r = client.post(
        "/api/admin/users",
        json={"name": "Hawa Koroma", "email": "Hawa.Koroma@acc.gov.sl", "password": "s3cure-pass", "role": "editor"},
    )
    assert r.status_code == 201
    assert r.json["data"]["email"] == "hawa.koroma@acc.gov.sl"
    assert r.json["data"]["role"] == "editor"

    r = client.post(
        "/api/admin/users",
        json={"name": "Hawa Again", "email": "hawa.koroma@acc.gov.sl", "password": "s3cure-pass"},
    )
    assert r.status_code == 400
    assert r.json["error"] == "Email already in use"

    client.get("/auth/logout")
    _login(client, "hawa.koroma@acc.gov.sl", "s3cure-pass")
    assert client.get("/admin/properties").status_code == 200


def test_create_user_validation(client):
    _login(client)
    r = client.post("/api/admin/users", json={"name": "X", "email": "bad", "password": "short", "role": "root"})
    assert r.status_code == 400
    assert len(r.json["errors"]) == 4


def test_cannot_deactivate_self_or_drop_own_admin_role(client):
    _login(client)
    admin_id = _user_id(client, "admin@example.com")

    r = client.patch(f"/api/admin/users/{admin_id}", json={"isActive": False})
    assert r.status_code == 400
    assert r.json["error"] == "You cannot deactivate your own account"

    r = client.patch(f"/api/admin/users/{admin_id}", json={"role": "viewer"})
    assert r.status_code == 400
    assert r.json["error"] == "You cannot remove your own admin role"


def test_update_other_user_role_and_status(client):
    _login(client)
    viewer_id = _user_id(client, "viewer@example.com")

    r = client.patch(f"/api/admin/users/{viewer_id}", json={"role": "editor", "name": "Promoted Viewer"})
    assert r.status_code == 200
    assert r.json["data"]["role"] == "editor"
    assert r.json["data"]["name"] == "Promoted Viewer"

    r = client.patch(f"/api/admin/users/{viewer_id}", json={"isActive": False})
    assert r.status_code == 200
    assert r.json["data"]["is_active"] is False

    with session_scope(client.application) as s:
        actions = {a for (a,) in s.query(AuditEvent.action).filter(AuditEvent.entity_id == str(viewer_id))}
        assert {"user.role_change", "user.edit", "user.deactivate"} <= actions


def test_users_admin_forms(client):
    _login(client)
    token = _csrf(client)
    r = client.post(
        "/admin/users/new",
        data={
            "csrf_token": token,
            "name": "Musa Jalloh",
            "email": "musa@acc.gov.sl",
            "password": "long-enough",
            "role": "viewer",
            "is_active": "1",
        },
    )
    assert r.status_code == 302
    musa_id = _user_id(client, "musa@acc.gov.sl")
    assert musa_id is not None

    r = client.post(f"/admin/users/{musa_id}/toggle", data={"csrf_token": token})
    assert r.status_code == 302
    with session_scope(client.application) as s:
        assert s.get(User, musa_id).is_active is False

    r = client.post(f"/admin/users/{musa_id}/role", data={"csrf_token": token, "role": "editor"})
    assert r.status_code == 302
    with session_scope(client.application) as s:
        assert s.get(User, musa_id).role_key == "editor"
