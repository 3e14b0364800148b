from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import EmailStr, Field, model_validator

from app.portal.validation import BaseSchema

ReportCategory = Literal[
    "BRIBERY",
    "EMBEZZLEMENT",
    "FRAUD",
    "NEPOTISM",
    "ABUSE_OF_OFFICE",
    "PROCUREMENT_FRAUD",
    "EXTORTION",
    "MONEY_LAUNDERING",
    "OTHER",
]
ReportStatus = Literal[
    "RECEIVED",
    "UNDER_REVIEW",
    "INVESTIGATING",
    "CLOSED_SUBSTANTIATED",
    "CLOSED_UNSUBSTANTIATED",
    "REFERRED",
]
ReportPriority = Literal["LOW", "MEDIUM", "HIGH", "URGENT"]


class CorruptionReportCreate(BaseSchema):
    reporter_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    reporter_email: Optional[EmailStr] = None
    reporter_phone: Optional[str] = Field(default=None, min_length=8, max_length=20)
    is_anonymous: bool = True

    incident_date: Optional[date] = None
    incident_location: Optional[str] = Field(default=None, max_length=500)
    region: Optional[str] = None

    accused_name: Optional[str] = Field(default=None, max_length=200)
    accused_position: Optional[str] = Field(default=None, max_length=200)
    accused_organization: Optional[str] = Field(default=None, max_length=200)

    category: Optional[ReportCategory] = None
    description: str = Field(min_length=50, max_length=5000)
    estimated_amount: Optional[float] = Field(default=None, ge=0)

    has_evidence: bool = False
    evidence_description: Optional[str] = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def _contact_for_named_reports(self) -> "CorruptionReportCreate":
        if not self.is_anonymous and not (self.reporter_email or self.reporter_phone):
            raise ValueError("Please provide at least an email or phone number for non-anonymous reports")
        return self


class CorruptionReportUpdate(BaseSchema):
    status: Optional[ReportStatus] = None
    priority: Optional[ReportPriority] = None
    assigned_to_id: Optional[int] = None
    internal_notes: Optional[str] = Field(default=None, max_length=5000)


class ReportFilters(BaseSchema):
    status: Optional[ReportStatus] = None
    priority: Optional[ReportPriority] = None
    category: Optional[ReportCategory] = None
    search: Optional[str] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=25, ge=1, le=100)
