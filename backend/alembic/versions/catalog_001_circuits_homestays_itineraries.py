"""Catalog: circuits, homestays, itineraries tables

Revision ID: catalog_001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision = "catalog_001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # --- circuits ---
    op.create_table(
        "circuits",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("category", sa.String(100)),
        sa.Column("categories", JSONB, server_default="[]"),
        sa.Column("tags", JSONB, server_default="[]"),
        sa.Column("theme", sa.String(100)),
        sa.Column("experiences", JSONB, server_default="[]"),
        sa.Column("featured_activities", JSONB, server_default="[]"),
        sa.Column("locations", JSONB, server_default="[]"),
        sa.Column("best_seasons", JSONB, server_default="[]"),
        sa.Column("entry_points", JSONB, server_default="[]"),
        sa.Column("transport", JSONB, server_default="[]"),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("duration", sa.String(100), nullable=False),
        sa.Column("is_offbeat", sa.Boolean, server_default="false"),
        sa.Column("km_rates", JSONB, server_default="{}"),
        sa.Column("img", sa.String(500)),
        sa.Column("images", JSONB, server_default="[]"),
        *_timestamps(),
    )
    op.create_index("ix_circuits_name", "circuits", ["name"])
    # GIN indexes back the ?| overlap filters used for circuit selection
    op.create_index("idx_circuits_categories", "circuits", ["categories"], postgresql_using="gin")
    op.create_index("idx_circuits_experiences", "circuits", ["experiences"], postgresql_using="gin")

    # --- homestays ---
    op.create_table(
        "homestays",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("circuit_id", UUID(as_uuid=True), sa.ForeignKey("circuits.id", ondelete="CASCADE"), nullable=False),
        sa.Column("homestay_name", sa.String(200), nullable=False),
        sa.Column("place_name", sa.String(200), nullable=False),
        sa.Column("distance", sa.Numeric(8, 2), server_default="0"),
        sa.Column("images", JSONB, server_default="[]"),
        sa.Column("description", sa.Text, server_default=""),
        sa.Column("pricing_type", sa.String(20), server_default="perhead"),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("contact", sa.String(200), server_default=""),
        sa.Column("rooms", sa.Integer, server_default="0"),
        sa.Column("room_configs", JSONB, server_default="[]"),
        sa.Column("room_types", JSONB, server_default="[]"),
        sa.Column("guest_types", JSONB, server_default="[]"),
        sa.Column("addons", JSONB, server_default="[]"),
        sa.Column("is_featured", sa.Boolean, server_default="false"),
        sa.Column("experiences", JSONB, server_default="[]"),
        sa.Column("experience_distances", JSONB, server_default="{}"),
        sa.Column("location_types", JSONB, server_default="[]"),
        sa.Column("average_rating", sa.Numeric(3, 2), server_default="0"),
        sa.Column("rating_count", sa.Integer, server_default="0"),
        sa.Column("reviews", JSONB, server_default="[]"),
        *_timestamps(),
        sa.UniqueConstraint("circuit_id", "homestay_name", "place_name", name="uniq_circuit_homestay_place"),
    )
    op.create_index("ix_homestays_circuit_id", "homestays", ["circuit_id"])

    # --- itineraries ---
    op.create_table(
        "itineraries",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("circuit_id", UUID(as_uuid=True), sa.ForeignKey("circuits.id", ondelete="CASCADE"), nullable=False),
        sa.Column("theme", sa.String(100), server_default=""),
        sa.Column("category_tags", JSONB, server_default="[]"),
        sa.Column("experience_tags", JSONB, server_default="[]"),
        sa.Column("duration_days", sa.Integer, server_default="1"),
        sa.Column("guest_type", sa.String(20)),
        sa.Column("pax_min", sa.Integer, server_default="0"),
        sa.Column("pax_max", sa.Integer, server_default="0"),
        sa.Column("budget_min", sa.Numeric(12, 2), server_default="0"),
        sa.Column("budget_max", sa.Numeric(12, 2), server_default="0"),
        sa.Column("transport_included", sa.Boolean, server_default="false"),
        sa.Column("car_type", sa.String(20), server_default="hatchback"),
        sa.Column("is_featured", sa.Boolean, server_default="false"),
        sa.Column("no_of_rooms", sa.Integer, server_default="0"),
        sa.Column("image", sa.String(500), server_default=""),
        sa.Column("day_wise_plan", JSONB, server_default="[]"),
        sa.Column("local_guide", JSONB, server_default="{}"),
        sa.Column("addon_suggestions", JSONB, server_default="[]"),
        *_timestamps(),
        sa.CheckConstraint("duration_days >= 1", name="ck_itineraries_duration_days"),
    )
    op.create_index("ix_itineraries_circuit_id", "itineraries", ["circuit_id"])
    op.create_index("ix_itineraries_is_featured", "itineraries", ["is_featured"])


def downgrade() -> None:
    op.drop_table("itineraries")
    op.drop_table("homestays")
    op.drop_index("idx_circuits_experiences", table_name="circuits")
    op.drop_index("idx_circuits_categories", table_name="circuits")
    op.drop_index("ix_circuits_name", table_name="circuits")
    op.drop_table("circuits")
