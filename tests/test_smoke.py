import pytest
from werkzeug.security import generate_password_hash

from app.portal import create_app
from app.portal.constants import PERMISSIONS, ROLE_PERMISSIONS, ROLES
from app.portal.db import session_scope
from app.portal.models import Base, Permission, Role, User


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
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    for k in ("S3_ENDPOINT", "S3_REGION", "S3_BUCKET", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY"):
        monkeypatch.delenv(k, raising=False)

    app = create_app()

    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)

    with session_scope(app) as s:
        roles = _seed_rbac(s)
        u = User(email="admin@example.com", password_hash=generate_password_hash("pw"), is_active=True)
        u.roles.append(roles["admin"])
        s.add(u)

    return app.test_client()


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json["ok"] is True


def test_healthz_ok(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.data == b"ok"


def test_login_and_admin_access(client):
    # Anonymous should be redirected to login
    r = client.get("/admin/")
    assert r.status_code in (302, 403)

    r = client.post("/auth/login", data={"email": "admin@example.com", "password": "pw"}, follow_redirects=False)
    assert r.status_code == 302

    r = client.get("/admin/")
    assert r.status_code == 200


def test_login_rejects_bad_password(client):
    r = client.post("/auth/login", data={"email": "admin@example.com", "password": "nope"}, follow_redirects=True)
    assert b"Invalid credentials" in r.data
    r = client.get("/admin/")
    assert r.status_code == 302


def test_login_is_rate_limited(client):
    for _ in range(5):
        client.post("/auth/login", data={"email": "admin@example.com", "password": "nope"})
    r = client.post("/auth/login", data={"email": "admin@example.com", "password": "pw"}, follow_redirects=True)
    assert b"Too many login attempts" in r.data


@pytest.mark.parametrize(
    "path",
    ["/", "/properties", "/dashboard", "/cases", "/news", "/resources", "/report-corruption", "/auth/login"],
)
def test_public_pages_render(client, path):
    r = client.get(path)
    assert r.status_code == 200


def test_unknown_page_is_404(client):
    r = client.get("/properties/does-not-exist")
    assert r.status_code == 404


def test_unknown_api_path_returns_json_404(client):
    r = client.get("/api/nothing-here")
    assert r.status_code == 404
    assert r.json == {"success": False, "error": "Not found"}


def test_form_post_without_csrf_token_is_rejected(client):
    r = client.post("/subscribe", data={"email": "someone@acc.gov.sl"})
    assert r.status_code == 400


def test_admin_pages_render_for_admin(client):
    client.post("/auth/login", data={"email": "admin@example.com", "password": "pw"})
    for path in (
        "/admin/",
        "/admin/me",
        "/admin/audit",
        "/admin/properties",
        "/admin/properties/new",
        "/admin/interests",
        "/admin/cases",
        "/admin/news",
        "/admin/resources",
        "/admin/statistics",
        "/admin/reports",
        "/admin/users",
        "/admin/settings",
    ):
        r = client.get(path)
        assert r.status_code == 200, path
