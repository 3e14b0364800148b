from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import JSON, Boolean, Date, DateTime, Float, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.portal.models import Base
from app.portal.utils import model_to_dict

Money = Numeric(20, 2, asdecimal=False)


class Property(Base):
    __tablename__ = "properties"
    __table_args__ = (
        Index("idx_properties_status", "status"),
        Index("idx_properties_type", "type"),
        Index("idx_properties_region", "region"),
        Index("idx_properties_published_at", "published_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    reference_number: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)  # PROP-...
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)  # RESIDENTIAL, COMMERCIAL, ...
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="AVAILABLE")

    # Location
    region: Mapped[str] = mapped_column(String(128), nullable=False)
    district: Mapped[str | None] = mapped_column(String(128), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Valuation / auction
    estimated_value: Mapped[float] = mapped_column(Money, nullable=False)
    minimum_bid: Mapped[float | None] = mapped_column(Money, nullable=True)
    currency: Mapped[str] = mapped_column(String(8), nullable=False, default="SLE")
    auction_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    auction_venue: Mapped[str | None] = mapped_column(String(255), nullable=True)
    auction_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Details
    size: Mapped[str | None] = mapped_column(String(64), nullable=True)
    bedrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    year_built: Mapped[int | None] = mapped_column(Integer, nullable=True)
    features: Mapped[list | None] = mapped_column(JSON, nullable=True, default=list)

    # Provenance
    case_reference: Mapped[str | None] = mapped_column(String(64), nullable=True)
    former_owner: Mapped[str | None] = mapped_column(String(255), nullable=True)
    recovery_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    created_by_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    images: Mapped[list["PropertyImage"]] = relationship(
        back_populates="property",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by=lambda: [PropertyImage.is_primary.desc(), PropertyImage.sort_order.asc(), PropertyImage.id.asc()],
    )
    documents: Mapped[list["PropertyDocument"]] = relationship(
        back_populates="property",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    expressions_of_interest: Mapped[list["ExpressionOfInterest"]] = relationship(
        back_populates="property",
        cascade="all, delete-orphan",
        lazy="select",
    )

    @property
    def is_published(self) -> bool:
        return self.published_at is not None

    @property
    def primary_image(self) -> "PropertyImage | None":
        return self.images[0] if self.images else None

    def to_dict(self, *, detail: bool = False) -> dict:
        data = model_to_dict(self)
        if detail:
            data["images"] = [img.to_dict() for img in self.images]
            data["documents"] = [doc.to_dict() for doc in self.documents]
        else:
            data["images"] = [self.primary_image.to_dict()] if self.primary_image else []
        return data


class PropertyImage(Base):
    __tablename__ = "property_images"
    __table_args__ = (Index("idx_property_images_property", "property_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[int] = mapped_column(ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    url: Mapped[str] = mapped_column(String(512), nullable=False)
    storage_key: Mapped[str | None] = mapped_column(String(512), nullable=True)
    caption: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    property: Mapped[Property] = relationship(back_populates="images")

    def to_dict(self) -> dict:
        return model_to_dict(self, exclude=("storage_key",))


class PropertyDocument(Base):
    __tablename__ = "property_documents"
    __table_args__ = (Index("idx_property_documents_property", "property_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[int] = mapped_column(ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(String(512), nullable=False)
    storage_key: Mapped[str | None] = mapped_column(String(512), nullable=True)
    file_type: Mapped[str | None] = mapped_column(String(128), nullable=True)
    size_bytes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    property: Mapped[Property] = relationship(back_populates="documents")

    def to_dict(self) -> dict:
        return model_to_dict(self, exclude=("storage_key",))


class ExpressionOfInterest(Base):
    __tablename__ = "expressions_of_interest"
    __table_args__ = (
        Index("idx_eoi_property", "property_id"),
        Index("idx_eoi_status", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    reference_number: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)  # EOI-...
    property_id: Mapped[int] = mapped_column(ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)

    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    organization: Mapped[str | None] = mapped_column(String(200), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    nationality: Mapped[str] = mapped_column(String(128), nullable=False)
    nin: Mapped[str | None] = mapped_column(String(64), nullable=True)
    passport_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    intended_use: Mapped[str | None] = mapped_column(String(500), nullable=True)
    proposed_amount: Mapped[float | None] = mapped_column(Money, nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(String(32), nullable=False, default="PENDING")
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    property: Mapped[Property] = relationship(back_populates="expressions_of_interest", lazy="selectin")

    def to_dict(self) -> dict:
        return model_to_dict(self, exclude=("ip_address",))
