"""Tests for the auctioned properties module."""
import io

import pytest
from werkzeug.security import generate_password_hash

from app.portal import create_app
from app.portal.constants import PERMISSIONS, ROLE_PERMISSIONS, ROLES
from app.portal.db import session_scope
from app.portal.models import AuditEvent, Base, Permission, Role, User
from app.portal.modules.properties.models import ExpressionOfInterest, Property


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


def _login(client):
    client.post("/auth/login", data={"email": "admin@example.com", "password": "pw"}, follow_redirects=True)


def _csrf(client):
    with client.session_transaction() as sess:
        sess["csrf_token"] = "test-token"
    return "test-token"


def _property_payload(**overrides):
    data = {
        "title": "Three-bedroom house in Kissy",
        "description": "Recovered residential property with a fenced compound.",
        "type": "RESIDENTIAL",
        "region": "Western Area Urban",
        "estimatedValue": 1500000,
        "features": ["Generator", "Borehole"],
        "publish": True,
    }
    data.update(overrides)
    return data


def _create_property(client, **overrides):
    r = client.post("/api/admin/properties", json=_property_payload(**overrides))
    assert r.status_code == 201, r.json
    return r.json["data"]


def _interest_payload(**overrides):
    data = {
        "fullName": "Aminata Sesay",
        "email": "aminata@acc.gov.sl",
        "phone": "+23276123456",
        "nationality": "Sierra Leonean",
        "nin": "SL1234567",
        "proposedAmount": 1600000,
    }
    data.update(overrides)
    return data


def test_admin_create_requires_auth(client):
    r = client.post("/api/admin/properties", json=_property_payload())
    assert r.status_code == 401
    assert r.json == {"success": False, "error": "Authentication required"}


def test_admin_create_property_via_api(client):
    _login(client)
    data = _create_property(client)
    assert data["reference_number"].startswith("PROP-")
    assert data["slug"].startswith("three-bedroom-house-in-kissy-")
    assert data["published_at"] is not None
    assert data["features"] == ["Generator", "Borehole"]
    assert data["status"] == "AVAILABLE"

    with session_scope(client.application) as s:
        ev = s.query(AuditEvent).filter(AuditEvent.action == "property.create").one()
        assert ev.actor_user_email == "admin@example.com"


def test_admin_create_property_validation(client):
    _login(client)
    r = client.post("/api/admin/properties", json=_property_payload(title="Hut"))
    assert r.status_code == 400
    assert r.json["success"] is False
    assert r.json["errors"]


def test_public_list_shows_published_only(client):
    _login(client)
    _create_property(client, title="Published warehouse at Wellington", type="COMMERCIAL")
    _create_property(client, title="Draft plot at Waterloo", type="LAND", publish=False)

    r = client.get("/api/properties")
    assert r.status_code == 200
    titles = [p["title"] for p in r.json["data"]]
    assert titles == ["Published warehouse at Wellington"]
    assert r.json["pagination"] == {"total": 1, "page": 1, "limit": 12, "total_pages": 1}

    r = client.get("/api/admin/properties")
    assert r.json["pagination"]["total"] == 2


def test_public_list_filters(client):
    _login(client)
    _create_property(client, title="Land Cruiser recovered in Bo", type="VEHICLE", region="Bo", estimatedValue=300000)
    _create_property(client, title="Office block on Siaka Stevens", type="COMMERCIAL", estimatedValue=9000000)

    r = client.get("/api/properties?type=VEHICLE")
    assert [p["type"] for p in r.json["data"]] == ["VEHICLE"]

    r = client.get("/api/properties?minPrice=1000000")
    assert [p["type"] for p in r.json["data"]] == ["COMMERCIAL"]

    r = client.get("/api/properties?search=cruiser")
    assert len(r.json["data"]) == 1

    r = client.get("/api/properties?type=SPACESHIP")
    assert r.status_code == 400


def test_public_detail_counts_views(client):
    _login(client)
    prop = _create_property(client)

    r = client.get(f"/api/properties/{prop['slug']}")
    assert r.status_code == 200
    assert r.json["data"]["view_count"] == 1
    assert r.json["data"]["interest_count"] == 0

    r = client.get(f"/api/properties/{prop['id']}")
    assert r.json["data"]["view_count"] == 2

    r = client.get(f"/properties/{prop['slug']}")
    assert r.status_code == 200
    assert b"Three-bedroom house in Kissy" in r.data


def test_unpublished_property_is_hidden(client):
    _login(client)
    prop = _create_property(client, publish=False)
    assert client.get(f"/api/properties/{prop['slug']}").status_code == 404
    assert client.get(f"/properties/{prop['slug']}").status_code == 404


def test_expression_of_interest_submitted(client):
    _login(client)
    prop = _create_property(client)

    r = client.post(f"/api/properties/{prop['id']}/interest", json=_interest_payload())
    assert r.status_code == 200
    assert r.json["data"]["reference_number"].startswith("EOI-")

    with session_scope(client.application) as s:
        eoi = s.query(ExpressionOfInterest).one()
        assert eoi.status == "PENDING"
        assert eoi.property_id == prop["id"]
        assert eoi.email == "aminata@acc.gov.sl"

    r = client.get(f"/api/properties/{prop['id']}")
    assert r.json["data"]["interest_count"] == 1


def test_expression_of_interest_requires_identity_document(client):
    _login(client)
    prop = _create_property(client)

    r = client.post(f"/api/properties/{prop['id']}/interest", json=_interest_payload(nin=None))
    assert r.status_code == 400
    assert r.json["error"] == "NIN must be at least 8 characters"

    r = client.post(
        f"/api/properties/{prop['id']}/interest",
        json=_interest_payload(nationality="Ghanaian", nin=None, passportNumber="G12"),
    )
    assert r.status_code == 400
    assert r.json["error"] == "Passport number must be at least 5 characters"


def test_expression_of_interest_rejected_for_closed_property(client):
    _login(client)
    prop = _create_property(client, status="SOLD")

    r = client.post(f"/api/properties/{prop['id']}/interest", json=_interest_payload())
    assert r.status_code == 400
    assert r.json["error"] == "This property is no longer available"


def test_expression_of_interest_rejected_for_unpublished_property(client):
    _login(client)
    prop = _create_property(client, publish=False)

    r = client.post(f"/api/properties/{prop['id']}/interest", json=_interest_payload())
    assert r.status_code == 404
    assert r.json["error"] == "Property not found"


def test_admin_update_property_via_api(client):
    _login(client)
    prop = _create_property(client)

    r = client.patch(f"/api/admin/properties/{prop['id']}", json={"status": "UNDER_AUCTION", "publish": False})
    assert r.status_code == 200
    assert r.json["data"]["status"] == "UNDER_AUCTION"
    assert r.json["data"]["published_at"] is None

    r = client.patch("/api/admin/properties/999", json={"status": "SOLD"})
    assert r.status_code == 404


def test_admin_create_property_via_form(client):
    _login(client)
    token = _csrf(client)
    r = client.post(
        "/admin/properties/new",
        data={
            "csrf_token": token,
            "title": "Two-storey building in Makeni",
            "description": "Commercial building forfeited after an embezzlement conviction.",
            "type": "COMMERCIAL",
            "status": "AVAILABLE",
            "region": "Bombali",
            "estimated_value": "750000",
            "currency": "SLE",
            "features": "Shop fronts\nWater tank",
            "publish": "1",
        },
        follow_redirects=False,
    )
    assert r.status_code == 302

    with session_scope(client.application) as s:
        prop = s.query(Property).one()
        assert prop.features == ["Shop fronts", "Water tank"]
        assert prop.is_published
        assert prop.is_featured is False
        property_id = prop.id

    r = client.get(f"/admin/properties/{property_id}")
    assert r.status_code == 200
    assert b"Two-storey building in Makeni" in r.data


def test_admin_form_validation_rerenders(client):
    _login(client)
    token = _csrf(client)
    r = client.post(
        "/admin/properties/new",
        data={"csrf_token": token, "title": "Tiny", "description": "short", "type": "LAND", "region": "Bo"},
    )
    assert r.status_code == 400
    with session_scope(client.application) as s:
        assert s.query(Property).count() == 0


def test_admin_image_upload(client):
    _login(client)
    prop = _create_property(client)
    token = _csrf(client)

    r = client.post(
        f"/admin/properties/{prop['id']}/images",
        data={"csrf_token": token, "images": (io.BytesIO(b"\x89PNG fake"), "front view.png"), "caption": "Front"},
        content_type="multipart/form-data",
    )
    assert r.status_code == 302

    r = client.get(f"/api/properties/{prop['id']}")
    images = r.json["data"]["images"]
    assert len(images) == 1
    assert images[0]["is_primary"] is True
    assert images[0]["url"].startswith(f"/uploads/properties/{prop['id']}/")

    r = client.get(images[0]["url"])
    assert r.status_code == 200
    assert r.data == b"\x89PNG fake"


def test_admin_image_upload_rejects_documents(client):
    _login(client)
    prop = _create_property(client)
    token = _csrf(client)

    client.post(
        f"/admin/properties/{prop['id']}/images",
        data={"csrf_token": token, "images": (io.BytesIO(b"%PDF-1.4"), "deed.pdf")},
        content_type="multipart/form-data",
    )
    r = client.get(f"/api/properties/{prop['id']}")
    assert r.json["data"]["images"] == []


def test_interest_status_update(client):
    _login(client)
    prop = _create_property(client)
    client.post(f"/api/properties/{prop['id']}/interest", json=_interest_payload())
    with session_scope(client.application) as s:
        eoi_id = s.query(ExpressionOfInterest.id).scalar()

    token = _csrf(client)
    r = client.post(
        f"/admin/interests/{eoi_id}/status",
        data={"csrf_token": token, "status": "UNDER_REVIEW", "admin_notes": "Called bidder"},
    )
    assert r.status_code == 302

    with session_scope(client.application) as s:
        eoi = s.get(ExpressionOfInterest, eoi_id)
        assert eoi.status == "UNDER_REVIEW"
        assert eoi.admin_notes == "Called bidder"

    r = client.get("/admin/interests")
    assert r.status_code == 200
