"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

Creates:
- service_rate (rate catalogue, all categories)
- tour, tour_day, tour_day_activity, tour_day_service, tour_pricing
- b2b_partner, b2b_partner_pricing, b2b_pricing_rule, b2b_transport_package
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(
        name, sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )


def _money(name: str) -> sa.Column:
    return sa.Column(name, sa.Numeric(12, 2), nullable=False)


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        "service_rate",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("org_id", sa.Uuid(), nullable=False),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("service_code", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("city", sa.Text(), nullable=False),
        sa.Column("tier", sa.Text(), nullable=True),
        _money("base_rate_eur"),
        _money("base_rate_non_eur"),
        sa.Column("valid_from", sa.Date(), nullable=True),
        sa.Column("valid_to", sa.Date(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("details", sa.JSON(), nullable=False),
        _created_at(),
    )
    op.create_index("idx_rate_org_category_city", "service_rate", ["org_id", "category", "city"])
    op.create_index("idx_rate_org_service_code", "service_rate", ["org_id", "service_code"])

    op.create_table(
        "tour",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("org_id", sa.Uuid(), nullable=False),
        sa.Column("created_by", sa.Uuid(), nullable=False),
        sa.Column("tour_code", sa.Text(), nullable=False),
        sa.Column("tour_name", sa.Text(), nullable=False),
        sa.Column("duration_days", sa.Integer(), nullable=False),
        sa.Column("cities", sa.JSON(), nullable=False),
        sa.Column("tour_type", sa.Text(), nullable=False),
        sa.Column("is_template", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _created_at(),
        sa.UniqueConstraint("org_id", "tour_code", name="uq_tour_org_code"),
    )
    op.create_index("idx_tour_org_created", "tour", ["org_id", "created_at"])

    op.create_table(
        "tour_day",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("tour_id", sa.Uuid(), nullable=False),
        sa.Column("day_number", sa.Integer(), nullable=False),
        sa.Column("city", sa.Text(), nullable=False),
        sa.Column("accommodation_id", sa.Uuid(), nullable=True),
        sa.Column("breakfast_included", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("lunch_meal_id", sa.Uuid(), nullable=True),
        sa.Column("dinner_meal_id", sa.Uuid(), nullable=True),
        sa.Column("guide_required", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("guide_id", sa.Uuid(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["tour_id"], ["tour.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("tour_id", "day_number", name="uq_tour_day_number"),
    )

    op.create_table(
        "tour_day_activity",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("tour_day_id", sa.Uuid(), nullable=False),
        sa.Column("activity_order", sa.Integer(), nullable=False),
        sa.Column("entrance_id", sa.Uuid(), nullable=True),
        sa.Column("transportation_id", sa.Uuid(), nullable=True),
        sa.Column("activity_notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["tour_day_id"], ["tour_day.id"], ondelete="CASCADE"),
    )

    op.create_table(
        "tour_day_service",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("tour_day_id", sa.Uuid(), nullable=False),
        sa.Column("service_id", sa.Uuid(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["tour_day_id"], ["tour_day.id"], ondelete="CASCADE"),
    )

    op.create_table(
        "tour_pricing",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("tour_id", sa.Uuid(), nullable=False),
        sa.Column("pax", sa.Integer(), nullable=False),
        sa.Column("is_euro_passport", sa.Boolean(), nullable=False),
        _money("total_accommodation"),
        _money("total_meals"),
        _money("total_guides"),
        _money("total_transportation"),
        _money("total_entrances"),
        _money("total_additional_services"),
        _money("grand_total"),
        _money("per_person_total"),
        sa.Column("breakdown", sa.JSON(), nullable=False),
        _created_at("calculated_at"),
        sa.ForeignKeyConstraint(["tour_id"], ["tour.id"], ondelete="CASCADE"),
    )

    op.create_table(
        "b2b_partner",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("org_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("contact_email", sa.Text(), nullable=True),
        sa.Column("default_margin_percent", sa.Numeric(6, 2), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        _created_at(),
    )
    op.create_index("idx_partner_org", "b2b_partner", ["org_id"])

    op.create_table(
        "b2b_partner_pricing",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("partner_id", sa.Uuid(), nullable=False),
        sa.Column("variation_code", sa.Text(), nullable=False),
        sa.Column("margin_percent_override", sa.Numeric(6, 2), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.ForeignKeyConstraint(["partner_id"], ["b2b_partner.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("partner_id", "variation_code", name="uq_partner_variation"),
    )

    op.create_table(
        "b2b_pricing_rule",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("org_id", sa.Uuid(), nullable=False),
        sa.Column("service_name", sa.Text(), nullable=False),
        sa.Column("pricing_model", sa.Text(), nullable=False),
        sa.Column("unit_type", sa.Text(), nullable=False),
        sa.Column("tiers", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
    )
    op.create_index("idx_pricing_rule_org", "b2b_pricing_rule", ["org_id"])

    op.create_table(
        "b2b_transport_package",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("org_id", sa.Uuid(), nullable=False),
        sa.Column("package_type", sa.Text(), nullable=False),
        sa.Column("origin_city", sa.Text(), nullable=False),
        sa.Column("destination_city", sa.Text(), nullable=False),
        sa.Column("vehicles", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
    )
    op.create_index(
        "idx_transport_package_org", "b2b_transport_package", ["org_id", "package_type"]
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("b2b_transport_package")
    op.drop_table("b2b_pricing_rule")
    op.drop_table("b2b_partner_pricing")
    op.drop_table("b2b_partner")
    op.drop_table("tour_pricing")
    op.drop_table("tour_day_service")
    op.drop_table("tour_day_activity")
    op.drop_table("tour_day")
    op.drop_table("tour")
    op.drop_table("service_rate")
