"""create catalog and enrichment tables

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "vendors",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code"),
    )

    op.create_table(
        "products",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("vendor_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("collection", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("description_long", sa.Text(), nullable=True),
        sa.Column("description_short", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["vendor_id"], ["vendors.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "vendor_id",
            "collection",
            "name",
            name="products_vendor_collection_name_unique",
        ),
    )
    op.create_index("ix_products_vendor_id", "products", ["vendor_id"], unique=False)
    op.create_index(
        "ix_products_vendor_collection",
        "products",
        ["vendor_id", "collection"],
        unique=False,
    )

    op.create_table(
        "skus",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("product_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("vendor_sku", sa.Text(), nullable=False),
        sa.Column("internal_sku", sa.Text(), nullable=False),
        sa.Column("variant_name", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("internal_sku"),
    )
    op.create_index("ix_skus_product_id", "skus", ["product_id"], unique=False)

    op.create_table(
        "attributes",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("slug", sa.Text(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("is_filterable", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )

    op.create_table(
        "sku_attributes",
        sa.Column("sku_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("attribute_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["sku_id"], ["skus.id"]),
        sa.ForeignKeyConstraint(["attribute_id"], ["attributes.id"]),
        sa.PrimaryKeyConstraint("sku_id", "attribute_id"),
    )
    op.create_index(
        "ix_sku_attributes_attribute_id",
        "sku_attributes",
        ["attribute_id"],
        unique=False,
    )

    op.create_table(
        "media_assets",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("product_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("sku_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("asset_type", sa.String(length=30), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("original_url", sa.Text(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"]),
        sa.ForeignKeyConstraint(["sku_id"], ["skus.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_media_assets_product_id", "media_assets", ["product_id"], unique=False)
    op.create_index(
        "ix_media_assets_product_type",
        "media_assets",
        ["product_id", "asset_type"],
        unique=False,
    )
    op.create_index(
        "uq_media_assets_product_slot",
        "media_assets",
        ["product_id", "asset_type", "sort_order"],
        unique=True,
        postgresql_where=sa.text("sku_id IS NULL"),
    )
    op.create_index(
        "uq_media_assets_sku_slot",
        "media_assets",
        ["product_id", "sku_id", "asset_type", "sort_order"],
        unique=True,
        postgresql_where=sa.text("sku_id IS NOT NULL"),
    )

    op.create_table(
        "vendor_sources",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("vendor_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("source_type", sa.String(length=20), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("base_url", sa.Text(), nullable=False),
        sa.Column("config", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("scraper_key", sa.Text(), nullable=True),
        sa.Column("schedule", sa.String(length=100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_scraped_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["vendor_id"], ["vendors.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_vendor_sources_vendor_id", "vendor_sources", ["vendor_id"], unique=False)

    op.create_table(
        "scrape_jobs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("vendor_source_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("products_found", sa.Integer(), nullable=False),
        sa.Column("products_created", sa.Integer(), nullable=False),
        sa.Column("products_updated", sa.Integer(), nullable=False),
        sa.Column("skus_created", sa.Integer(), nullable=False),
        sa.Column(
            "errors",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default=sa.text("'[]'::jsonb"),
            nullable=False,
        ),
        sa.Column("log", sa.Text(), server_default="", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["vendor_source_id"], ["vendor_sources.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_scrape_jobs_vendor_source_id", "scrape_jobs", ["vendor_source_id"], unique=False)
    op.create_index("ix_scrape_jobs_status", "scrape_jobs", ["status"], unique=False)
    op.create_index("ix_scrape_jobs_created_at", "scrape_jobs", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_scrape_jobs_created_at", table_name="scrape_jobs")
    op.drop_index("ix_scrape_jobs_status", table_name="scrape_jobs")
    op.drop_index("ix_scrape_jobs_vendor_source_id", table_name="scrape_jobs")
    op.drop_table("scrape_jobs")
    op.drop_index("ix_vendor_sources_vendor_id", table_name="vendor_sources")
    op.drop_table("vendor_sources")
    op.drop_index("uq_media_assets_sku_slot", table_name="media_assets")
    op.drop_index("uq_media_assets_product_slot", table_name="media_assets")
    op.drop_index("ix_media_assets_product_type", table_name="media_assets")
    op.drop_index("ix_media_assets_product_id", table_name="media_assets")
    op.drop_table("media_assets")
    op.drop_index("ix_sku_attributes_attribute_id", table_name="sku_attributes")
    op.drop_table("sku_attributes")
    op.drop_table("attributes")
    op.drop_index("ix_skus_product_id", table_name="skus")
    op.drop_table("skus")
    op.drop_index("ix_products_vendor_collection", table_name="products")
    op.drop_index("ix_products_vendor_id", table_name="products")
    op.drop_table("products")
    op.drop_table("vendors")
