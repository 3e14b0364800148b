from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import or_

from app.portal.audit import record_event
from app.portal.constants import PROPERTY_CLOSED_STATUSES
from app.portal.modules.properties.models import ExpressionOfInterest, Property, PropertyDocument, PropertyImage
from app.portal.utils import generate_reference_number, generate_slug, pagination_dict

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.portal.models import User
    from app.portal.modules.properties.schemas import (
        ExpressionOfInterestCreate,
        PropertyCreate,
        PropertyFilters,
        PropertyUpdate,
    )
    from app.portal.uploads import UploadResult


class PropertyError(Exception):
    """Business-rule failure with an HTTP-ish status code."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


_EDITABLE_FIELDS = (
    "title",
    "description",
    "type",
    "status",
    "region",
    "district",
    "address",
    "latitude",
    "longitude",
    "estimated_value",
    "minimum_bid",
    "currency",
    "auction_date",
    "auction_venue",
    "auction_end_date",
    "size",
    "bedrooms",
    "bathrooms",
    "year_built",
    "features",
    "case_reference",
    "former_owner",
    "recovery_date",
    "is_featured",
)


def _filtered_query(s: "Session", filters: "PropertyFilters", *, published_only: bool):
    q = s.query(Property)
    if published_only:
        q = q.filter(Property.published_at.isnot(None))
    if filters.type:
        q = q.filter(Property.type == filters.type)
    if filters.status:
        q = q.filter(Property.status == filters.status)
    if filters.region:
        q = q.filter(Property.region == filters.region)
    if filters.min_price is not None:
        q = q.filter(Property.estimated_value >= filters.min_price)
    if filters.max_price is not None:
        q = q.filter(Property.estimated_value <= filters.max_price)
    if filters.search:
        like = f"%{filters.search}%"
        q = q.filter(
            or_(
                Property.title.ilike(like),
                Property.description.ilike(like),
                Property.reference_number.ilike(like),
                Property.address.ilike(like),
            )
        )
    return q


def list_public_properties(s: "Session", filters: "PropertyFilters") -> tuple[list[Property], dict]:
    """Published properties, featured first then newest, paginated."""
    q = _filtered_query(s, filters, published_only=True)
    total = q.count()
    items = (
        q.order_by(Property.is_featured.desc(), Property.published_at.desc(), Property.id.desc())
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
        .all()
    )
    return items, pagination_dict(total, filters.page, filters.limit)


def list_admin_properties(s: "Session", filters: "PropertyFilters") -> tuple[list[Property], dict]:
    q = _filtered_query(s, filters, published_only=False)
    total = q.count()
    items = (
        q.order_by(Property.created_at.desc(), Property.id.desc())
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
        .all()
    )
    return items, pagination_dict(total, filters.page, filters.limit)


def featured_properties(s: "Session", limit: int) -> list[Property]:
    return (
        s.query(Property)
        .filter(Property.published_at.isnot(None), Property.is_featured.is_(True))
        .order_by(Property.published_at.desc())
        .limit(limit)
        .all()
    )


def find_published_property(s: "Session", id_or_slug: str) -> Property | None:
    conds = [Property.slug == id_or_slug]
    if id_or_slug.isdigit():
        conds.append(Property.id == int(id_or_slug))
    return s.query(Property).filter(or_(*conds), Property.published_at.isnot(None)).first()


def get_public_property(s: "Session", id_or_slug: str) -> Property | None:
    """Published property by slug or id; counts the view."""
    prop = find_published_property(s, id_or_slug)
    if prop is None:
        return None
    prop.view_count = (prop.view_count or 0) + 1
    return prop


def interest_count(s: "Session", prop: Property) -> int:
    return s.query(ExpressionOfInterest).filter(ExpressionOfInterest.property_id == prop.id).count()


def create_property(s: "Session", payload: "PropertyCreate", user: "User") -> Property:
    now = datetime.utcnow()
    data = payload.model_dump(exclude={"publish"})
    prop = Property(
        reference_number=generate_reference_number("PROP"),
        slug=generate_slug(payload.title),
        published_at=now if payload.publish else None,
        created_at=now,
        updated_at=now,
        created_by_user_id=user.id,
        view_count=0,
        **data,
    )
    s.add(prop)
    s.flush()

    record_event(
        s,
        actor=user,
        action="property.create",
        entity_type="Property",
        entity_id=str(prop.id),
        metadata={"reference_number": prop.reference_number, "title": prop.title, "published": prop.is_published},
    )
    return prop


def update_property(s: "Session", prop: Property, payload: "PropertyUpdate", user: "User") -> Property:
    """Apply only the fields present in the payload and audit the diff."""
    changes: dict[str, dict] = {}
    provided = payload.model_dump(exclude_unset=True)

    for field in _EDITABLE_FIELDS:
        if field not in provided:
            continue
        new = provided[field]
        if field in ("title", "description", "type", "status", "region", "estimated_value", "currency", "is_featured") and new is None:
            continue  # required columns cannot be cleared
        if field == "features" and new is None:
            new = []
        old = getattr(prop, field)
        if new != old:
            changes[field] = {"old": str(old) if old is not None else None, "new": str(new) if new is not None else None}
            setattr(prop, field, new)

    if "publish" in provided and provided["publish"] is not None:
        set_published(prop, bool(provided["publish"]), changes)

    prop.updated_at = datetime.utcnow()
    record_event(
        s,
        actor=user,
        action="property.edit",
        entity_type="Property",
        entity_id=str(prop.id),
        metadata={"reference_number": prop.reference_number, "changes": changes},
    )
    return prop


def set_published(prop: Property, publish: bool, changes: dict | None = None) -> None:
    if publish and prop.published_at is None:
        prop.published_at = datetime.utcnow()
        if changes is not None:
            changes["published"] = {"old": "False", "new": "True"}
    elif not publish and prop.published_at is not None:
        prop.published_at = None
        if changes is not None:
            changes["published"] = {"old": "True", "new": "False"}


def publish_property(s: "Session", prop: Property, publish: bool, user: "User") -> None:
    set_published(prop, publish)
    prop.updated_at = datetime.utcnow()
    record_event(
        s,
        actor=user,
        action="property.publish" if publish else "property.unpublish",
        entity_type="Property",
        entity_id=str(prop.id),
        metadata={"reference_number": prop.reference_number},
    )


def delete_property(s: "Session", prop: Property, user: "User") -> None:
    record_event(
        s,
        actor=user,
        action="property.delete",
        entity_type="Property",
        entity_id=str(prop.id),
        metadata={"reference_number": prop.reference_number, "title": prop.title},
    )
    s.delete(prop)


def add_property_image(
    s: "Session",
    prop: Property,
    upload: "UploadResult",
    user: "User",
    *,
    caption: str | None = None,
    is_primary: bool = False,
) -> PropertyImage:
    # First image becomes primary automatically
    if not prop.images:
        is_primary = True
    if is_primary:
        for img in prop.images:
            img.is_primary = False
    image = PropertyImage(
        property_id=prop.id,
        url=upload.url,
        storage_key=upload.storage_key,
        caption=caption,
        is_primary=is_primary,
        sort_order=len(prop.images),
    )
    s.add(image)
    prop.images.append(image)
    s.flush()
    record_event(
        s,
        actor=user,
        action="property.image_upload",
        entity_type="PropertyImage",
        entity_id=str(image.id),
        metadata={"property_id": prop.id, "url": image.url},
    )
    return image


def delete_property_image(s: "Session", image: PropertyImage, user: "User") -> None:
    prop = image.property
    was_primary = image.is_primary
    record_event(
        s,
        actor=user,
        action="property.image_delete",
        entity_type="PropertyImage",
        entity_id=str(image.id),
        metadata={"property_id": prop.id, "url": image.url},
    )
    prop.images.remove(image)
    s.delete(image)
    if was_primary and prop.images:
        prop.images[0].is_primary = True


def add_property_document(
    s: "Session",
    prop: Property,
    upload: "UploadResult",
    user: "User",
    *,
    title: str | None = None,
) -> PropertyDocument:
    doc = PropertyDocument(
        property_id=prop.id,
        title=(title or "").strip() or upload.original_name or upload.file_name or "Document",
        url=upload.url,
        storage_key=upload.storage_key,
        file_type=upload.content_type,
        size_bytes=upload.size_bytes,
    )
    s.add(doc)
    prop.documents.append(doc)
    s.flush()
    record_event(
        s,
        actor=user,
        action="property.document_upload",
        entity_type="PropertyDocument",
        entity_id=str(doc.id),
        metadata={"property_id": prop.id, "title": doc.title},
    )
    return doc


def submit_expression_of_interest(
    s: "Session",
    property_id: int,
    payload: "ExpressionOfInterestCreate",
    ip_address: str | None,
) -> ExpressionOfInterest:
    prop = s.get(Property, property_id)
    if prop is None or prop.published_at is None:
        raise PropertyError("Property not found", 404)
    if prop.status in PROPERTY_CLOSED_STATUSES:
        raise PropertyError("This property is no longer available", 400)

    now = datetime.utcnow()
    eoi = ExpressionOfInterest(
        reference_number=generate_reference_number("EOI"),
        property_id=prop.id,
        status="PENDING",
        ip_address=ip_address,
        created_at=now,
        updated_at=now,
        **payload.model_dump(),
    )
    s.add(eoi)
    s.flush()
    record_event(
        s,
        actor=None,
        action="interest.submit",
        entity_type="ExpressionOfInterest",
        entity_id=str(eoi.id),
        metadata={"property_id": prop.id, "reference_number": eoi.reference_number},
    )
    return eoi


def update_interest_status(
    s: "Session",
    eoi: ExpressionOfInterest,
    status: str,
    admin_notes: str | None,
    user: "User",
) -> ExpressionOfInterest:
    old_status = eoi.status
    eoi.status = status
    if admin_notes is not None:
        eoi.admin_notes = admin_notes
    eoi.updated_at = datetime.utcnow()
    record_event(
        s,
        actor=user,
        action="interest.update_status",
        entity_type="ExpressionOfInterest",
        entity_id=str(eoi.id),
        metadata={"old": old_status, "new": status, "reference_number": eoi.reference_number},
    )
    return eoi
