from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.portal.models import Base
from app.portal.modules.properties.models import Money
from app.portal.utils import model_to_dict


class RecoveryStatistic(Base):
    """One reporting period of recovery / prosecution figures (e.g. "2024", "2024-Q1", "2024-01")."""

    __tablename__ = "recovery_statistics"
    __table_args__ = (
        UniqueConstraint("period", "period_type", name="uq_recovery_statistics_period"),
        Index("idx_recovery_statistics_period", "period"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    period: Mapped[str] = mapped_column(String(10), nullable=False)
    period_type: Mapped[str] = mapped_column(String(16), nullable=False)  # monthly, quarterly, yearly

    total_recovered: Mapped[float] = mapped_column(Money, nullable=False, default=0)
    cash_recovered: Mapped[float | None] = mapped_column(Money, nullable=True)
    assets_recovered: Mapped[float | None] = mapped_column(Money, nullable=True)
    funds_to_treasury: Mapped[float | None] = mapped_column(Money, nullable=True)

    cases_opened: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cases_closed: Mapped[int | None] = mapped_column(Integer, nullable=True)
    prosecutions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    convictions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    acquittals: Mapped[int | None] = mapped_column(Integer, nullable=True)

    properties_seized: Mapped[int | None] = mapped_column(Integer, nullable=True)
    properties_auctioned: Mapped[int | None] = mapped_column(Integer, nullable=True)

    sector_breakdown: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    region_breakdown: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    def to_dict(self) -> dict:
        return model_to_dict(self)
