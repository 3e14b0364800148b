from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import or_

from app.portal.audit import record_event
from app.portal.modules.content.models import CaseHighlight, EducationalResource, NewsUpdate
from app.portal.modules.content.schemas import (
    CaseFilters,
    CaseHighlightCreate,
    CaseHighlightUpdate,
    EducationalResourceCreate,
    EducationalResourceUpdate,
    NewsFilters,
    NewsUpdateCreate,
    NewsUpdateUpdate,
    ResourceFilters,
)
from app.portal.utils import generate_slug, pagination_dict

if TYPE_CHECKING:
    from pydantic import BaseModel
    from sqlalchemy.orm import Session
    from app.portal.models import User


@dataclass(frozen=True)
class ContentKind:
    key: str  # url segment: cases / news / resources
    label: str
    model: type
    create_schema: type
    update_schema: type
    filters_schema: type
    search_fields: tuple[str, ...]
    required_fields: tuple[str, ...]
    list_fields: tuple[str, ...]  # JSON list columns


CASES = ContentKind(
    key="cases",
    label="Case Highlight",
    model=CaseHighlight,
    create_schema=CaseHighlightCreate,
    update_schema=CaseHighlightUpdate,
    filters_schema=CaseFilters,
    search_fields=("title", "summary", "defendant", "case_number"),
    required_fields=("title", "summary", "content", "status"),
    list_fields=("charges",),
)
NEWS = ContentKind(
    key="news",
    label="News Update",
    model=NewsUpdate,
    create_schema=NewsUpdateCreate,
    update_schema=NewsUpdateUpdate,
    filters_schema=NewsFilters,
    search_fields=("title", "excerpt", "content"),
    required_fields=("title", "content", "status"),
    list_fields=("tags",),
)
RESOURCES = ContentKind(
    key="resources",
    label="Educational Resource",
    model=EducationalResource,
    create_schema=EducationalResourceCreate,
    update_schema=EducationalResourceUpdate,
    filters_schema=ResourceFilters,
    search_fields=("title", "description"),
    required_fields=("title", "description", "category", "resource_type", "status"),
    list_fields=(),
)

CONTENT_KINDS = {k.key: k for k in (CASES, NEWS, RESOURCES)}


def get_kind(key: str) -> ContentKind | None:
    return CONTENT_KINDS.get(key)


def _apply_filters(q, kind: ContentKind, filters: "BaseModel"):
    model = kind.model
    if kind is CASES:
        if filters.sector:
            q = q.filter(model.sector == filters.sector)
        if filters.region:
            q = q.filter(model.region == filters.region)
        if filters.year:
            q = q.filter(model.case_date >= date(filters.year, 1, 1), model.case_date < date(filters.year + 1, 1, 1))
    elif kind is NEWS:
        if filters.category:
            q = q.filter(model.category == filters.category)
    elif kind is RESOURCES:
        if filters.category:
            q = q.filter(model.category == filters.category)
        if filters.type:
            q = q.filter(model.resource_type == filters.type)

    if filters.search:
        like = f"%{filters.search}%"
        q = q.filter(or_(*[getattr(model, f).ilike(like) for f in kind.search_fields]))
    return q


def list_published(s: "Session", kind: ContentKind, filters: "BaseModel") -> tuple[list, dict]:
    model = kind.model
    q = _apply_filters(s.query(model).filter(model.status == "PUBLISHED"), kind, filters)
    total = q.count()
    items = (
        q.order_by(model.published_at.desc(), model.id.desc())
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
        .all()
    )
    return items, pagination_dict(total, filters.page, filters.limit)


def latest_published(s: "Session", kind: ContentKind, limit: int = 3) -> list:
    model = kind.model
    return (
        s.query(model)
        .filter(model.status == "PUBLISHED")
        .order_by(model.published_at.desc(), model.id.desc())
        .limit(limit)
        .all()
    )


def list_admin(s: "Session", kind: ContentKind, *, status: str | None = None, search: str | None = None) -> list:
    model = kind.model
    q = s.query(model)
    if status:
        q = q.filter(model.status == status)
    if search:
        like = f"%{search}%"
        q = q.filter(or_(*[getattr(model, f).ilike(like) for f in kind.search_fields]))
    return q.order_by(model.created_at.desc(), model.id.desc()).limit(500).all()


def get_published(s: "Session", kind: ContentKind, slug: str):
    """Published item by slug; counts the view."""
    model = kind.model
    item = s.query(model).filter(model.slug == slug, model.status == "PUBLISHED").one_or_none()
    if item is not None:
        item.view_count = (item.view_count or 0) + 1
    return item


def distinct_values(s: "Session", kind: ContentKind, column: str) -> list[str]:
    col = getattr(kind.model, column)
    rows = s.query(col).filter(col.isnot(None), kind.model.status == "PUBLISHED").distinct().all()
    return sorted(r[0] for r in rows if r[0])


def _apply_status(item, status: str | None) -> None:
    if status is None:
        return
    item.status = status
    if status == "PUBLISHED" and item.published_at is None:
        item.published_at = datetime.utcnow()


def create_content(s: "Session", kind: ContentKind, payload: "BaseModel", user: "User"):
    now = datetime.utcnow()
    data = payload.model_dump(exclude={"status"})
    item = kind.model(
        slug=generate_slug(payload.title),
        created_at=now,
        updated_at=now,
        view_count=0,
        **data,
    )
    _apply_status(item, payload.status)
    s.add(item)
    s.flush()
    record_event(
        s,
        actor=user,
        action=f"{kind.key}.create",
        entity_type=kind.model.__name__,
        entity_id=str(item.id),
        metadata={"title": item.title, "status": item.status},
    )
    return item


def update_content(s: "Session", kind: ContentKind, item, payload: "BaseModel", user: "User"):
    changes: dict[str, dict] = {}
    provided = payload.model_dump(exclude_unset=True)
    new_status = provided.pop("status", None)

    for field, new in provided.items():
        if new is None and field in kind.required_fields:
            continue
        if new is None and field in kind.list_fields:
            new = []
        old = getattr(item, field)
        if new != old:
            changes[field] = {"old": str(old) if old is not None else None, "new": str(new) if new is not None else None}
            setattr(item, field, new)

    if new_status and new_status != item.status:
        changes["status"] = {"old": item.status, "new": new_status}
        _apply_status(item, new_status)

    item.updated_at = datetime.utcnow()
    record_event(
        s,
        actor=user,
        action=f"{kind.key}.edit",
        entity_type=kind.model.__name__,
        entity_id=str(item.id),
        metadata={"title": item.title, "changes": changes},
    )
    return item


def delete_content(s: "Session", kind: ContentKind, item, user: "User") -> None:
    record_event(
        s,
        actor=user,
        action=f"{kind.key}.delete",
        entity_type=kind.model.__name__,
        entity_id=str(item.id),
        metadata={"title": item.title},
    )
    s.delete(item)
