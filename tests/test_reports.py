"""Tests for public corruption reporting and report triage."""
import io

import pytest
from werkzeug.security import generate_password_hash

from app.portal import create_app
from app.portal.constants import PERMISSIONS, ROLE_PERMISSIONS, ROLES
from app.portal.db import session_scope
from app.portal.models import AuditEvent, Base, Permission, Role, User
from app.portal.modules.reports.models import CorruptionReport
from app.portal.modules.settings.models import SiteSetting


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


_DESCRIPTION = (
    "The district officer demanded a payment before releasing the approved school "
    "grant to our community school."
)


def _report(**overrides):
    data = {"description": _DESCRIPTION, "category": "BRIBERY", "region": "Kenema"}
    data.update(overrides)
    return data


def _submit(client, **overrides):
    r = client.post("/api/reports", json=_report(**overrides))
    return r


def test_anonymous_report_strips_identity(client):
    r = _submit(client, reporterName="Fatmata K.", reporterEmail="fatmata@acc.gov.sl", isAnonymous=True)
    assert r.status_code == 200
    assert r.json["data"]["reference_number"].startswith("CR-")
    assert r.json["data"]["message"] == "Your report has been submitted successfully"

    with session_scope(client.application) as s:
        report = s.query(CorruptionReport).one()
        assert report.is_anonymous is True
        assert report.reporter_name is None
        assert report.reporter_email is None
        assert report.reporter_phone is None
        assert report.status == "RECEIVED"
        assert report.priority == "MEDIUM"
        ev = s.query(AuditEvent).filter(AuditEvent.action == "report.submit").one()
        assert ev.actor_user_id is None


def test_named_report_requires_contact(client):
    r = _submit(client, isAnonymous=False, reporterName="Ibrahim Kamara")
    assert r.status_code == 400
    assert r.json["error"] == "Please provide at least an email or phone number for non-anonymous reports"

    r = _submit(client, isAnonymous=False, reporterName="Ibrahim Kamara", reporterPhone="+23278555555")
    assert r.status_code == 200
    with session_scope(client.application) as s:
        report = s.query(CorruptionReport).one()
        assert report.reporter_name == "Ibrahim Kamara"
        assert report.reporter_phone == "+23278555555"


def test_report_description_minimum_length(client):
    r = _submit(client, description="Too short to be useful")
    assert r.status_code == 400


def test_anonymous_reports_can_be_disabled(client):
    with session_scope(client.application) as s:
        s.add(SiteSetting(key="enable_anonymous_reports", value=False))

    r = _submit(client, isAnonymous=True)
    assert r.status_code == 400
    assert r.json["error"] == "Anonymous reports are currently not accepted. Please provide your contact details."

    r = _submit(client, isAnonymous=False, reporterEmail="witness@acc.gov.sl")
    assert r.status_code == 200


def test_report_api_is_rate_limited(client):
    for _ in range(5):
        assert _submit(client).status_code == 200
    r = _submit(client)
    assert r.status_code == 429
    assert r.headers["Retry-After"]
    assert r.json["success"] is False


def test_report_form_with_evidence(client):
    client.get("/report-corruption")
    token = _csrf(client)
    r = client.post(
        "/report-corruption",
        data={
            "csrf_token": token,
            "is_anonymous": "1",
            "reporter_name": "Should be dropped",
            "description": _DESCRIPTION,
            "category": "BRIBERY",
            "evidence": [(io.BytesIO(b"%PDF-1.4 receipt"), "receipt.pdf")],
        },
        content_type="multipart/form-data",
    )
    assert r.status_code == 302
    assert "/report-corruption/submitted/CR-" in r.headers["Location"]

    with session_scope(client.application) as s:
        report = s.query(CorruptionReport).one()
        assert report.reporter_name is None
        assert report.has_evidence is True
        assert len(report.attachments) == 1
        assert report.attachments[0].file_name == "receipt.pdf"
        assert report.attachments[0].content_type == "application/pdf"

    r = client.get(r.headers["Location"])
    assert r.status_code == 200
    assert b"CR-" in r.data


def test_report_form_rejects_bad_attachment(client):
    token = _csrf(client)
    r = client.post(
        "/report-corruption",
        data={
            "csrf_token": token,
            "is_anonymous": "1",
            "description": _DESCRIPTION,
            "evidence": [(io.BytesIO(b"MZ"), "payload.exe")],
        },
        content_type="multipart/form-data",
    )
    assert r.status_code == 400
    with session_scope(client.application) as s:
        assert s.query(CorruptionReport).count() == 0


def test_report_form_limits_attachment_count(client):
    token = _csrf(client)
    files = [(io.BytesIO(b"%PDF-1.4"), f"doc{i}.pdf") for i in range(6)]
    r = client.post(
        "/report-corruption",
        data={"csrf_token": token, "is_anonymous": "1", "description": _DESCRIPTION, "evidence": files},
        content_type="multipart/form-data",
    )
    assert r.status_code == 400
    assert b"at most 5 files" in r.data


def test_admin_reports_require_login(client):
    _submit(client)
    r = client.get("/api/admin/reports")
    assert r.status_code == 401


def test_admin_lists_and_updates_report(client):
    _submit(client)
    _login(client)

    r = client.get("/api/admin/reports")
    assert r.status_code == 200
    assert r.json["pagination"]["total"] == 1
    report_id = r.json["data"][0]["id"]
    assert "ip_address" not in r.json["data"][0]

    r = client.patch(
        f"/api/admin/reports/{report_id}",
        json={"status": "INVESTIGATING", "priority": "HIGH", "assignedToId": 1, "internalNotes": "Assigned to team B"},
    )
    assert r.status_code == 200
    data = r.json["data"]
    assert data["status"] == "INVESTIGATING"
    assert data["priority"] == "HIGH"
    assert data["assigned_to"]["email"] == "admin@example.com"
    assert data["attachments"] == []

    r = client.get("/api/admin/reports?status=INVESTIGATING")
    assert r.json["pagination"]["total"] == 1
    r = client.get("/api/admin/reports?status=RECEIVED")
    assert r.json["pagination"]["total"] == 0


def test_admin_update_rejects_unknown_assignee(client):
    _submit(client)
    _login(client)
    with session_scope(client.application) as s:
        report_id = s.query(CorruptionReport.id).scalar()

    r = client.patch(f"/api/admin/reports/{report_id}", json={"assignedToId": 999})
    assert r.status_code == 400
    assert r.json["error"] == "Assigned user does not exist"

    r = client.get("/api/admin/reports/999")
    assert r.status_code == 404
    assert r.json["error"] == "Report not found"


def test_viewer_cannot_update_report(client):
    _submit(client)
    _login(client, "viewer@example.com")
    with session_scope(client.application) as s:
        report_id = s.query(CorruptionReport.id).scalar()

    assert client.get(f"/api/admin/reports/{report_id}").status_code == 200
    r = client.patch(f"/api/admin/reports/{report_id}", json={"status": "REFERRED"})
    assert r.status_code == 403


def test_admin_report_form_update(client):
    _submit(client)
    _login(client)
    with session_scope(client.application) as s:
        report_id = s.query(CorruptionReport.id).scalar()

    assert client.get(f"/admin/reports/{report_id}").status_code == 200

    token = _csrf(client)
    r = client.post(
        f"/admin/reports/{report_id}",
        data={"csrf_token": token, "status": "UNDER_REVIEW", "priority": "URGENT", "assigned_to_id": ""},
    )
    assert r.status_code == 302

    with session_scope(client.application) as s:
        report = s.get(CorruptionReport, report_id)
        assert report.status == "UNDER_REVIEW"
        assert report.priority == "URGENT"
        assert report.assigned_to_id is None
