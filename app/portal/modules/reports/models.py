from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.portal.models import Base, User
from app.portal.modules.properties.models import Money
from app.portal.utils import model_to_dict


class CorruptionReport(Base):
    __tablename__ = "corruption_reports"
    __table_args__ = (
        Index("idx_corruption_reports_status", "status"),
        Index("idx_corruption_reports_priority", "priority"),
        Index("idx_corruption_reports_submitted_at", "submitted_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    reference_number: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)  # CR-...

    # Reporter (all empty when anonymous)
    reporter_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    reporter_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    reporter_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Incident
    incident_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    incident_location: Mapped[str | None] = mapped_column(String(500), nullable=True)
    region: Mapped[str | None] = mapped_column(String(128), nullable=True)

    # Accused
    accused_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    accused_position: Mapped[str | None] = mapped_column(String(200), nullable=True)
    accused_organization: Mapped[str | None] = mapped_column(String(200), nullable=True)

    category: Mapped[str | None] = mapped_column(String(32), nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    estimated_amount: Mapped[float | None] = mapped_column(Money, nullable=True)

    has_evidence: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    evidence_description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Case handling
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="RECEIVED")
    priority: Mapped[str] = mapped_column(String(16), nullable=False, default="MEDIUM")
    assigned_to_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    internal_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    assigned_to: Mapped[User | None] = relationship(foreign_keys=[assigned_to_id], lazy="selectin")
    attachments: Mapped[list["ReportAttachment"]] = relationship(
        back_populates="report",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by=lambda: ReportAttachment.id.asc(),
    )

    def to_dict(self, *, detail: bool = False) -> dict:
        data = model_to_dict(self, exclude=("ip_address",))
        data["assigned_to"] = self.assigned_to.to_dict() if self.assigned_to else None
        if detail:
            data["attachments"] = [a.to_dict() for a in self.attachments]
        return data


class ReportAttachment(Base):
    __tablename__ = "report_attachments"
    __table_args__ = (Index("idx_report_attachments_report", "report_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    report_id: Mapped[int] = mapped_column(ForeignKey("corruption_reports.id", ondelete="CASCADE"), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(String(512), nullable=False)
    storage_key: Mapped[str | None] = mapped_column(String(512), nullable=True)
    content_type: Mapped[str | None] = mapped_column(String(128), nullable=True)
    size_bytes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    report: Mapped[CorruptionReport] = relationship(back_populates="attachments")

    def to_dict(self) -> dict:
        return model_to_dict(self, exclude=("storage_key",))
