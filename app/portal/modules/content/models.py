from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import JSON, Date, DateTime, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.portal.models import Base
from app.portal.utils import model_to_dict


class PublishableMixin:
    """Shared DRAFT/PUBLISHED/ARCHIVED lifecycle columns."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    featured_image: Mapped[str | None] = mapped_column(String(512), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="DRAFT")
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    @property
    def is_published(self) -> bool:
        return self.status == "PUBLISHED"

    def to_dict(self) -> dict:
        return model_to_dict(self)


class CaseHighlight(PublishableMixin, Base):
    __tablename__ = "case_highlights"
    __table_args__ = (
        Index("idx_case_highlights_status", "status"),
        Index("idx_case_highlights_sector", "sector"),
    )

    summary: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    case_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    defendant: Mapped[str | None] = mapped_column(String(200), nullable=True)
    charges: Mapped[list | None] = mapped_column(JSON, nullable=True, default=list)
    verdict: Mapped[str | None] = mapped_column(String(100), nullable=True)
    sentence: Mapped[str | None] = mapped_column(String(500), nullable=True)
    amount_involved: Mapped[float | None] = mapped_column(Numeric(20, 2, asdecimal=False), nullable=True)
    amount_recovered: Mapped[float | None] = mapped_column(Numeric(20, 2, asdecimal=False), nullable=True)
    sector: Mapped[str | None] = mapped_column(String(128), nullable=True)
    region: Mapped[str | None] = mapped_column(String(128), nullable=True)
    case_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    verdict_date: Mapped[date | None] = mapped_column(Date, nullable=True)


class NewsUpdate(PublishableMixin, Base):
    __tablename__ = "news_updates"
    __table_args__ = (
        Index("idx_news_updates_status", "status"),
        Index("idx_news_updates_category", "category"),
    )

    excerpt: Mapped[str | None] = mapped_column(String(500), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str | None] = mapped_column(String(128), nullable=True)
    tags: Mapped[list | None] = mapped_column(JSON, nullable=True, default=list)


class EducationalResource(PublishableMixin, Base):
    __tablename__ = "educational_resources"
    __table_args__ = (
        Index("idx_educational_resources_status", "status"),
        Index("idx_educational_resources_category", "category"),
    )

    description: Mapped[str] = mapped_column(String(1000), nullable=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(128), nullable=False)
    resource_type: Mapped[str] = mapped_column(String(16), nullable=False)  # ARTICLE, VIDEO, PDF, INFOGRAPHIC
    file_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    video_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
