from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import Field, field_validator

from app.portal.validation import BaseSchema, split_list

ContentStatus = Literal["DRAFT", "PUBLISHED", "ARCHIVED"]
ResourceType = Literal["ARTICLE", "VIDEO", "PDF", "INFOGRAPHIC"]


# ---------- Case highlights ----------
class CaseHighlightCreate(BaseSchema):
    title: str = Field(min_length=5, max_length=200)
    summary: str = Field(min_length=20, max_length=500)
    content: str = Field(min_length=50)
    case_number: Optional[str] = Field(default=None, max_length=50)
    defendant: Optional[str] = Field(default=None, max_length=200)
    charges: list[str] = Field(default_factory=list)
    verdict: Optional[str] = Field(default=None, max_length=100)
    sentence: Optional[str] = Field(default=None, max_length=500)
    amount_involved: Optional[float] = Field(default=None, ge=0)
    amount_recovered: Optional[float] = Field(default=None, ge=0)
    sector: Optional[str] = None
    region: Optional[str] = None
    case_date: Optional[date] = None
    verdict_date: Optional[date] = None
    featured_image: Optional[str] = Field(default=None, max_length=512)
    status: ContentStatus = "DRAFT"

    @field_validator("charges", mode="before")
    @classmethod
    def _split_charges(cls, v):
        return split_list(v)


class CaseHighlightUpdate(BaseSchema):
    title: Optional[str] = Field(default=None, min_length=5, max_length=200)
    summary: Optional[str] = Field(default=None, min_length=20, max_length=500)
    content: Optional[str] = Field(default=None, min_length=50)
    case_number: Optional[str] = Field(default=None, max_length=50)
    defendant: Optional[str] = Field(default=None, max_length=200)
    charges: Optional[list[str]] = None
    verdict: Optional[str] = Field(default=None, max_length=100)
    sentence: Optional[str] = Field(default=None, max_length=500)
    amount_involved: Optional[float] = Field(default=None, ge=0)
    amount_recovered: Optional[float] = Field(default=None, ge=0)
    sector: Optional[str] = None
    region: Optional[str] = None
    case_date: Optional[date] = None
    verdict_date: Optional[date] = None
    featured_image: Optional[str] = Field(default=None, max_length=512)
    status: Optional[ContentStatus] = None

    @field_validator("charges", mode="before")
    @classmethod
    def _split_charges(cls, v):
        return split_list(v)


class CaseFilters(BaseSchema):
    sector: Optional[str] = None
    region: Optional[str] = None
    year: Optional[int] = Field(default=None, ge=1900, le=2100)
    search: Optional[str] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=50)


# ---------- News ----------
class NewsUpdateCreate(BaseSchema):
    title: str = Field(min_length=5, max_length=200)
    excerpt: Optional[str] = Field(default=None, max_length=500)
    content: str = Field(min_length=50)
    category: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    featured_image: Optional[str] = Field(default=None, max_length=512)
    status: ContentStatus = "DRAFT"

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, v):
        return split_list(v)


class NewsUpdateUpdate(BaseSchema):
    title: Optional[str] = Field(default=None, min_length=5, max_length=200)
    excerpt: Optional[str] = Field(default=None, max_length=500)
    content: Optional[str] = Field(default=None, min_length=50)
    category: Optional[str] = None
    tags: Optional[list[str]] = None
    featured_image: Optional[str] = Field(default=None, max_length=512)
    status: Optional[ContentStatus] = None

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, v):
        return split_list(v)


class NewsFilters(BaseSchema):
    category: Optional[str] = None
    search: Optional[str] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=50)


# ---------- Educational resources ----------
class EducationalResourceCreate(BaseSchema):
    title: str = Field(min_length=5, max_length=200)
    description: str = Field(min_length=20, max_length=1000)
    content: Optional[str] = None
    category: str = Field(min_length=1)
    resource_type: ResourceType
    featured_image: Optional[str] = Field(default=None, max_length=512)
    file_url: Optional[str] = Field(default=None, max_length=512)
    video_url: Optional[str] = Field(default=None, max_length=512)
    status: ContentStatus = "DRAFT"


class EducationalResourceUpdate(BaseSchema):
    title: Optional[str] = Field(default=None, min_length=5, max_length=200)
    description: Optional[str] = Field(default=None, min_length=20, max_length=1000)
    content: Optional[str] = None
    category: Optional[str] = Field(default=None, min_length=1)
    resource_type: Optional[ResourceType] = None
    featured_image: Optional[str] = Field(default=None, max_length=512)
    file_url: Optional[str] = Field(default=None, max_length=512)
    video_url: Optional[str] = Field(default=None, max_length=512)
    status: Optional[ContentStatus] = None


class ResourceFilters(BaseSchema):
    category: Optional[str] = None
    type: Optional[ResourceType] = None
    search: Optional[str] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=12, ge=1, le=50)
