import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from .lifecycle import ShipmentStatus


class Base(DeclarativeBase):
    pass


class TransportMode(str, Enum):
    TRUCK = "truck"
    SHIP = "ship"
    RAIL = "rail"
    AIR = "air"
    MULTI_MODAL = "multi-modal"


def _uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # naive datetimes from clients are taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Shipment(Base):
    __tablename__ = "shipments"
    __table_args__ = (
        # actual arrival is recorded exactly when the shipment is delivered
        CheckConstraint(
            "(status = 'delivered' AND actual_arrival_date IS NOT NULL) OR "
            "(status <> 'delivered' AND actual_arrival_date IS NULL)",
            name="ck_shipments_arrival_matches_status",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    tracking_id: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    origin: Mapped[str] = mapped_column(String(200))
    destination: Mapped[str] = mapped_column(String(200))
    transport_type: Mapped[str] = mapped_column(String(20))
    product_type: Mapped[str] = mapped_column(String(100))
    quantity: Mapped[int] = mapped_column(Integer)
    weight: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    distance_km: Mapped[float] = mapped_column(Float)
    carbon_footprint: Mapped[float] = mapped_column(Float)
    status: Mapped[str] = mapped_column(String(20), default=ShipmentStatus.PROCESSING.value, index=True)
    planned_departure_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    estimated_arrival_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    # null until the shipment is delivered
    actual_arrival_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    # user ids come from the identity provider; no FK
    customer_id: Mapped[str] = mapped_column(String(64), index=True)
    assigned_driver_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    verification_ref: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    updates: Mapped[list["DeliveryUpdate"]] = relationship(
        "DeliveryUpdate", back_populates="shipment", order_by="DeliveryUpdate.created_at.desc()"
    )


class DeliveryUpdate(Base):
    __tablename__ = "delivery_updates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    shipment_id: Mapped[str] = mapped_column(ForeignKey("shipments.id", ondelete="RESTRICT"), index=True)
    status: Mapped[str] = mapped_column(String(20))
    location: Mapped[str] = mapped_column(String(200))
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    temperature: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    humidity: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    shock_detected: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    battery_level: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    recorded_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    verification_ref: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    shipment: Mapped[Shipment] = relationship("Shipment", back_populates="updates")


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("shipment_id", "user_id", name="uq_reviews_shipment_user"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    shipment_id: Mapped[str] = mapped_column(ForeignKey("shipments.id", ondelete="RESTRICT"), index=True)
    user_id: Mapped[str] = mapped_column(String(64))
    rating: Mapped[int] = mapped_column(Integer)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    approved: Mapped[bool] = mapped_column(Boolean, default=False)
    verification_ref: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class SustainabilitySuggestion(Base):
    __tablename__ = "sustainability_suggestions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    shipment_id: Mapped[str] = mapped_column(ForeignKey("shipments.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text)
    carbon_savings: Mapped[float] = mapped_column(Float)
    cost_savings: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    implemented: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
