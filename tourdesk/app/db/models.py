"""SQLAlchemy ORM models for the rate catalogue, tours and B2B pricing."""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class ServiceRate(Base):
    """Rate catalogue row - every category in one table.

    Category-specific attributes (board basis, vehicle capacity, meal type...)
    live in the JSON details column.
    """

    __tablename__ = "service_rate"
    __table_args__ = (
        Index("idx_rate_org_category_city", "org_id", "category", "city"),
        Index("idx_rate_org_service_code", "org_id", "service_code"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    service_code: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    city: Mapped[str] = mapped_column(Text, nullable=False, default="")
    tier: Mapped[str | None] = mapped_column(Text, nullable=True)
    base_rate_eur: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    base_rate_non_eur: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    valid_from: Mapped[date | None] = mapped_column(Date, nullable=True)
    valid_to: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class TourRow(Base):
    """Tour header."""

    __tablename__ = "tour"
    __table_args__ = (
        UniqueConstraint("org_id", "tour_code", name="uq_tour_org_code"),
        Index("idx_tour_org_created", "org_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    tour_code: Mapped[str] = mapped_column(Text, nullable=False)
    tour_name: Mapped[str] = mapped_column(Text, nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False)
    cities: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    tour_type: Mapped[str] = mapped_column(Text, nullable=False)
    is_template: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    days: Mapped[list["TourDayRow"]] = relationship(
        "TourDayRow",
        back_populates="tour",
        cascade="all, delete-orphan",
        order_by="TourDayRow.day_number",
    )
    pricing_snapshots: Mapped[list["TourPricingRow"]] = relationship(
        "TourPricingRow", back_populates="tour", cascade="all, delete-orphan"
    )


class TourDayRow(Base):
    """Day of a tour with its service references."""

    __tablename__ = "tour_day"
    __table_args__ = (UniqueConstraint("tour_id", "day_number", name="uq_tour_day_number"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tour_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("tour.id", ondelete="CASCADE"), nullable=False
    )
    day_number: Mapped[int] = mapped_column(Integer, nullable=False)
    city: Mapped[str] = mapped_column(Text, nullable=False, default="")
    accommodation_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    breakfast_included: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    lunch_meal_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    dinner_meal_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    guide_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    guide_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    tour: Mapped["TourRow"] = relationship("TourRow", back_populates="days")
    activities: Mapped[list["TourDayActivityRow"]] = relationship(
        "TourDayActivityRow",
        back_populates="day",
        cascade="all, delete-orphan",
        order_by="TourDayActivityRow.activity_order",
    )
    services: Mapped[list["TourDayServiceRow"]] = relationship(
        "TourDayServiceRow", back_populates="day", cascade="all, delete-orphan"
    )


class TourDayActivityRow(Base):
    """Activity of a tour day (entrance and/or transportation leg)."""

    __tablename__ = "tour_day_activity"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tour_day_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("tour_day.id", ondelete="CASCADE"), nullable=False
    )
    activity_order: Mapped[int] = mapped_column(Integer, nullable=False)
    entrance_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    transportation_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    activity_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    day: Mapped["TourDayRow"] = relationship("TourDayRow", back_populates="activities")


class TourDayServiceRow(Base):
    """Additional service booked on a tour day."""

    __tablename__ = "tour_day_service"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tour_day_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("tour_day.id", ondelete="CASCADE"), nullable=False
    )
    service_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)

    day: Mapped["TourDayRow"] = relationship("TourDayRow", back_populates="services")


class TourPricingRow(Base):
    """Pricing snapshot stored alongside a saved tour."""

    __tablename__ = "tour_pricing"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tour_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("tour.id", ondelete="CASCADE"), nullable=False
    )
    pax: Mapped[int] = mapped_column(Integer, nullable=False)
    is_euro_passport: Mapped[bool] = mapped_column(Boolean, nullable=False)
    total_accommodation: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_meals: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_guides: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_transportation: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_entrances: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_additional_services: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    grand_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    per_person_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    breakdown: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    calculated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    tour: Mapped["TourRow"] = relationship("TourRow", back_populates="pricing_snapshots")


class B2BPartnerRow(Base):
    """Reseller partner."""

    __tablename__ = "b2b_partner"
    __table_args__ = (Index("idx_partner_org", "org_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    contact_email: Mapped[str | None] = mapped_column(Text, nullable=True)
    default_margin_percent: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    overrides: Mapped[list["B2BPartnerPricingRow"]] = relationship(
        "B2BPartnerPricingRow", back_populates="partner", cascade="all, delete-orphan"
    )


class B2BPartnerPricingRow(Base):
    """Partner margin override per tour variation."""

    __tablename__ = "b2b_partner_pricing"
    __table_args__ = (
        UniqueConstraint("partner_id", "variation_code", name="uq_partner_variation"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    partner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("b2b_partner.id", ondelete="CASCADE"), nullable=False
    )
    variation_code: Mapped[str] = mapped_column(Text, nullable=False)
    margin_percent_override: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    partner: Mapped["B2BPartnerRow"] = relationship("B2BPartnerRow", back_populates="overrides")


class B2BPricingRuleRow(Base):
    """Group-size pricing rule; tiers stored as JSON."""

    __tablename__ = "b2b_pricing_rule"
    __table_args__ = (Index("idx_pricing_rule_org", "org_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    service_name: Mapped[str] = mapped_column(Text, nullable=False)
    pricing_model: Mapped[str] = mapped_column(Text, nullable=False)
    unit_type: Mapped[str] = mapped_column(Text, nullable=False, default="unit")
    tiers: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class B2BTransportPackageRow(Base):
    """Transport package between two cities; vehicles stored as JSON."""

    __tablename__ = "b2b_transport_package"
    __table_args__ = (Index("idx_transport_package_org", "org_id", "package_type"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    package_type: Mapped[str] = mapped_column(Text, nullable=False)
    origin_city: Mapped[str] = mapped_column(Text, nullable=False)
    destination_city: Mapped[str] = mapped_column(Text, nullable=False)
    vehicles: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
