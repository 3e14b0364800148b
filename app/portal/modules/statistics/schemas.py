from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import Field, field_validator

from app.portal.validation import BaseSchema

PeriodType = Literal["monthly", "quarterly", "yearly"]
Amount = Optional[float]
Count = Optional[int]


def parse_breakdown(value: Any) -> Any:
    """Admin forms send breakdowns as one `Name: amount` pair per line."""
    if not isinstance(value, str):
        return value
    out: dict[str, str] = {}
    for line in value.replace("\r", "").split("\n"):
        if not line.strip():
            continue
        name, sep, amount = line.rpartition(":")
        if not sep or not name.strip():
            raise ValueError(f"Breakdown line must look like 'Name: amount', got '{line.strip()}'")
        out[name.strip()] = amount.strip().replace(",", "")
    return out or None


class RecoveryStatisticCreate(BaseSchema):
    period: str = Field(min_length=4, max_length=10)
    period_type: PeriodType
    total_recovered: float = Field(ge=0)
    cash_recovered: Amount = Field(default=None, ge=0)
    assets_recovered: Amount = Field(default=None, ge=0)
    funds_to_treasury: Amount = Field(default=None, ge=0)
    cases_opened: Count = Field(default=None, ge=0)
    cases_closed: Count = Field(default=None, ge=0)
    prosecutions: Count = Field(default=None, ge=0)
    convictions: Count = Field(default=None, ge=0)
    acquittals: Count = Field(default=None, ge=0)
    properties_seized: Count = Field(default=None, ge=0)
    properties_auctioned: Count = Field(default=None, ge=0)
    sector_breakdown: Optional[dict[str, float]] = None
    region_breakdown: Optional[dict[str, float]] = None

    @field_validator("sector_breakdown", "region_breakdown", mode="before")
    @classmethod
    def _parse_breakdown(cls, v):
        return parse_breakdown(v)


class RecoveryStatisticUpdate(BaseSchema):
    period: Optional[str] = Field(default=None, min_length=4, max_length=10)
    period_type: Optional[PeriodType] = None
    total_recovered: Amount = Field(default=None, ge=0)
    cash_recovered: Amount = Field(default=None, ge=0)
    assets_recovered: Amount = Field(default=None, ge=0)
    funds_to_treasury: Amount = Field(default=None, ge=0)
    cases_opened: Count = Field(default=None, ge=0)
    cases_closed: Count = Field(default=None, ge=0)
    prosecutions: Count = Field(default=None, ge=0)
    convictions: Count = Field(default=None, ge=0)
    acquittals: Count = Field(default=None, ge=0)
    properties_seized: Count = Field(default=None, ge=0)
    properties_auctioned: Count = Field(default=None, ge=0)
    sector_breakdown: Optional[dict[str, float]] = None
    region_breakdown: Optional[dict[str, float]] = None

    @field_validator("sector_breakdown", "region_breakdown", mode="before")
    @classmethod
    def _parse_breakdown(cls, v):
        return parse_breakdown(v)


class DashboardFilters(BaseSchema):
    period_type: Optional[PeriodType] = None
