"""Tests for case highlights, news and educational resources."""
import pytest
from werkzeug.security import generate_password_hash

from app.portal import create_app
from app.portal.constants import PERMISSIONS, ROLE_PERMISSIONS, ROLES
from app.portal.db import session_scope
from app.portal.models import Base, Permission, Role, User
from app.portal.modules.content.models import CaseHighlight, EducationalResource, NewsUpdate


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
        admin = User(email="admin@example.com", password_hash=generate_password_hash("pw"), is_active=True)
        admin.roles.append(roles["admin"])
        viewer = User(email="viewer@example.com", password_hash=generate_password_hash("pw"), is_active=True)
        viewer.roles.append(roles["viewer"])
        s.add_all([admin, viewer])

    return app.test_client()


def _login(client, email="admin@example.com"):
    client.post("/auth/login", data={"email": email, "password": "pw"}, follow_redirects=True)


def _csrf(client):
    with client.session_transaction() as sess:
        sess["csrf_token"] = "test-token"
    return "test-token"


_LONG_TEXT = (
    "The Commission secured the conviction after a two-year investigation into the "
    "diversion of public funds meant for rural health clinics."
)


def _case(**overrides):
    data = {
        "title": "Former procurement officer convicted",
        "summary": "High Court conviction for procurement fraud in the health sector.",
        "content": _LONG_TEXT,
        "defendant": "M. Bangura",
        "charges": "Misappropriation of public funds, Abuse of office",
        "sector": "Health",
        "caseDate": "2023-05-10",
        "amountRecovered": 450000,
        "status": "PUBLISHED",
    }
    data.update(overrides)
    return data


def test_create_case_via_api(client):
    _login(client)
    r = client.post("/api/admin/cases", json=_case())
    assert r.status_code == 201
    data = r.json["data"]
    assert data["charges"] == ["Misappropriation of public funds", "Abuse of office"]
    assert data["published_at"] is not None
    assert data["slug"].startswith("former-procurement-officer-convicted-")


def test_content_validation(client):
    _login(client)
    r = client.post("/api/admin/cases", json=_case(content="Too short"))
    assert r.status_code == 400
    assert r.json["success"] is False

    r = client.post("/api/admin/resources", json={"title": "Guide to reporting", "description": "short"})
    assert r.status_code == 400


def test_viewer_cannot_create_content(client):
    _login(client, "viewer@example.com")
    r = client.get("/api/admin/news")
    assert r.status_code == 200
    r = client.post("/api/admin/news", json={"title": "Some news title", "content": _LONG_TEXT})
    assert r.status_code == 403


def test_draft_news_is_not_public_until_published(client):
    _login(client)
    r = client.post(
        "/api/admin/news",
        json={"title": "Integrity week announced", "content": _LONG_TEXT, "tags": "integrity, schools"},
    )
    assert r.status_code == 201
    item = r.json["data"]
    assert item["status"] == "DRAFT"
    assert item["published_at"] is None
    assert item["tags"] == ["integrity", "schools"]

    assert client.get(f"/news/{item['slug']}").status_code == 404
    assert b"Integrity week announced" not in client.get("/news").data

    r = client.patch(f"/api/admin/news/{item['id']}", json={"status": "PUBLISHED"})
    assert r.status_code == 200
    assert r.json["data"]["published_at"] is not None

    r = client.get(f"/news/{item['slug']}")
    assert r.status_code == 200
    assert b"Integrity week announced" in r.data
    assert b"Integrity week announced" in client.get("/news").data


def test_archived_case_is_hidden(client):
    _login(client)
    item = client.post("/api/admin/cases", json=_case()).json["data"]
    assert client.get(f"/cases/{item['slug']}").status_code == 200

    client.patch(f"/api/admin/cases/{item['id']}", json={"status": "ARCHIVED"})
    assert client.get(f"/cases/{item['slug']}").status_code == 404


def test_update_keeps_required_fields(client):
    _login(client)
    item = client.post("/api/admin/cases", json=_case()).json["data"]
    r = client.patch(f"/api/admin/cases/{item['id']}", json={"title": "", "verdict": "Guilty"})
    assert r.status_code == 200
    assert r.json["data"]["title"] == "Former procurement officer convicted"
    assert r.json["data"]["verdict"] == "Guilty"

    r = client.patch("/api/admin/cases/999", json={"verdict": "Guilty"})
    assert r.status_code == 404
    assert r.json["error"] == "Case Highlight not found"


def test_public_case_filters(client):
    _login(client)
    client.post("/api/admin/cases", json=_case())
    client.post(
        "/api/admin/cases",
        json=_case(title="Mining licence bribery case", sector="Mining", caseDate="2021-02-01", defendant="K. Conteh"),
    )

    r = client.get("/cases?sector=Mining")
    assert b"Mining licence bribery case" in r.data
    assert b"Former procurement officer convicted" not in r.data

    r = client.get("/cases?year=2023")
    assert b"Former procurement officer convicted" in r.data
    assert b"Mining licence bribery case" not in r.data


def test_resource_detail_counts_views(client):
    _login(client)
    r = client.post(
        "/api/admin/resources",
        json={
            "title": "How to report corruption",
            "description": "Step-by-step guide to reporting corruption safely.",
            "category": "Guides",
            "resourceType": "ARTICLE",
            "status": "PUBLISHED",
        },
    )
    slug = r.json["data"]["slug"]
    assert client.get(f"/resources/{slug}").status_code == 200
    assert client.get(f"/resources/{slug}").status_code == 200

    with session_scope(client.application) as s:
        assert s.query(EducationalResource).one().view_count == 2


def test_create_news_via_admin_form(client):
    _login(client)
    token = _csrf(client)
    r = client.post(
        "/admin/news/new",
        data={
            "csrf_token": token,
            "title": "Commission opens regional office",
            "content": _LONG_TEXT,
            "category": "Announcements",
            "tags": "offices\nregions",
            "status": "PUBLISHED",
        },
    )
    assert r.status_code == 302

    with session_scope(client.application) as s:
        news = s.query(NewsUpdate).one()
        assert news.tags == ["offices", "regions"]
        assert news.published_at is not None

    r = client.get("/admin/news")
    assert r.status_code == 200
    assert b"Commission opens regional office" in r.data


def test_delete_case_via_admin_form(client):
    _login(client)
    item = client.post("/api/admin/cases", json=_case()).json["data"]
    token = _csrf(client)
    r = client.post(f"/admin/cases/{item['id']}/delete", data={"csrf_token": token})
    assert r.status_code == 302

    with session_scope(client.application) as s:
        assert s.query(CaseHighlight).count() == 0
