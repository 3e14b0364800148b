from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Iterable

from sqlalchemy import or_

from app.portal.audit import record_event
from app.portal.models import User
from app.portal.modules.reports.models import CorruptionReport, ReportAttachment
from app.portal.modules.settings.service import current_settings
from app.portal.utils import generate_reference_number, pagination_dict

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.portal.modules.reports.schemas import CorruptionReportCreate, CorruptionReportUpdate, ReportFilters
    from app.portal.uploads import UploadResult

_IDENTITY_FIELDS = ("reporter_name", "reporter_email", "reporter_phone")


class ReportError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def submit_report(
    s: "Session",
    payload: "CorruptionReportCreate",
    ip_address: str | None,
    attachments: Iterable["UploadResult"] = (),
) -> CorruptionReport:
    """
    Store a public corruption report.

    Anonymous reports never keep reporter identity, even if the form sent it.
    """
    if payload.is_anonymous and not current_settings(s).get("enable_anonymous_reports", True):
        raise ReportError("Anonymous reports are currently not accepted. Please provide your contact details.")

    data = payload.model_dump()
    if payload.is_anonymous:
        for field in _IDENTITY_FIELDS:
            data[field] = None

    now = datetime.utcnow()
    report = CorruptionReport(
        reference_number=generate_reference_number("CR"),
        status="RECEIVED",
        priority="MEDIUM",
        ip_address=ip_address,
        submitted_at=now,
        updated_at=now,
        **data,
    )
    for upload in attachments:
        report.attachments.append(
            ReportAttachment(
                file_name=upload.original_name or upload.file_name or "attachment",
                url=upload.url or "",
                storage_key=upload.storage_key,
                content_type=upload.content_type,
                size_bytes=upload.size_bytes,
            )
        )
    if report.attachments:
        report.has_evidence = True
    s.add(report)
    s.flush()
    record_event(
        s,
        actor=None,
        action="report.submit",
        entity_type="CorruptionReport",
        entity_id=str(report.id),
        metadata={"reference_number": report.reference_number, "attachments": len(report.attachments)},
    )
    return report


def list_reports(s: "Session", filters: "ReportFilters") -> tuple[list[CorruptionReport], dict]:
    q = s.query(CorruptionReport)
    if filters.status:
        q = q.filter(CorruptionReport.status == filters.status)
    if filters.priority:
        q = q.filter(CorruptionReport.priority == filters.priority)
    if filters.category:
        q = q.filter(CorruptionReport.category == filters.category)
    if filters.search:
        like = f"%{filters.search}%"
        q = q.filter(
            or_(
                CorruptionReport.reference_number.ilike(like),
                CorruptionReport.description.ilike(like),
                CorruptionReport.accused_name.ilike(like),
                CorruptionReport.accused_organization.ilike(like),
            )
        )
    total = q.count()
    items = (
        q.order_by(CorruptionReport.submitted_at.desc(), CorruptionReport.id.desc())
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
        .all()
    )
    return items, pagination_dict(total, filters.page, filters.limit)


def open_reports(s: "Session", limit: int = 5) -> list[CorruptionReport]:
    return (
        s.query(CorruptionReport)
        .filter(CorruptionReport.status == "RECEIVED")
        .order_by(CorruptionReport.submitted_at.desc())
        .limit(limit)
        .all()
    )


def update_report(
    s: "Session",
    report: CorruptionReport,
    payload: "CorruptionReportUpdate",
    user: User,
) -> CorruptionReport:
    provided = payload.model_dump(exclude_unset=True)
    # status / priority are NOT NULL; an explicit null leaves them alone
    for field in ("status", "priority"):
        if provided.get(field, ...) is None:
            provided.pop(field)

    assignee = None
    if provided.get("assigned_to_id") is not None:
        assignee = s.get(User, provided["assigned_to_id"])
        if assignee is None:
            raise ReportError("Assigned user does not exist")

    changes: dict[str, dict] = {}
    for field, new in provided.items():
        old = getattr(report, field)
        if new != old:
            # Notes can be long; only record that they changed.
            if field == "internal_notes":
                changes[field] = {"changed": True}
            else:
                changes[field] = {"old": old, "new": new}
            setattr(report, field, new)
    if "assigned_to_id" in provided:
        report.assigned_to = assignee

    report.updated_at = datetime.utcnow()
    record_event(
        s,
        actor=user,
        action="report.update",
        entity_type="CorruptionReport",
        entity_id=str(report.id),
        metadata={"reference_number": report.reference_number, "changes": changes},
    )
    return report
