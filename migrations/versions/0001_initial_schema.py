"""initial schema: rbac, audit, properties, content, statistics, reports, settings

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:12:41.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_MONEY = sa.Numeric(20, 2)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def _publishable() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("slug", sa.String(255), nullable=False, unique=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("featured_image", sa.String(512), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="DRAFT"),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    ]


def upgrade() -> None:
    """Create every table; skips tables that already exist (idempotent)."""
    conn = op.get_bind()
    existing_tables = set(sa.inspect(conn).get_table_names())

    # RBAC
    if "users" not in existing_tables:
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("email", sa.String(320), nullable=False, unique=True),
            sa.Column("name", sa.String(128), nullable=True),
            sa.Column("password_hash", sa.String(255), nullable=False),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("last_login_at", sa.DateTime(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
    if "roles" not in existing_tables:
        op.create_table(
            "roles",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("key", sa.String(64), nullable=False, unique=True),
            sa.Column("name", sa.String(128), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
    if "permissions" not in existing_tables:
        op.create_table(
            "permissions",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("key", sa.String(128), nullable=False, unique=True),
            sa.Column("name", sa.String(128), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
    if "user_roles" not in existing_tables:
        op.create_table(
            "user_roles",
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
            sa.Column("role_id", sa.Integer(), sa.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
        )
    if "role_permissions" not in existing_tables:
        op.create_table(
            "role_permissions",
            sa.Column("role_id", sa.Integer(), sa.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
            sa.Column(
                "permission_id", sa.Integer(), sa.ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True
            ),
        )

    if "audit_events" not in existing_tables:
        op.create_table(
            "audit_events",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("request_id", sa.String(64), nullable=True),
            sa.Column("actor_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
            sa.Column("actor_user_email", sa.String(320), nullable=True),
            sa.Column("action", sa.String(128), nullable=False),
            sa.Column("entity_type", sa.String(128), nullable=True),
            sa.Column("entity_id", sa.String(128), nullable=True),
            sa.Column("reason", sa.String(512), nullable=True),
            sa.Column("metadata_json", sa.Text(), nullable=True),
            sa.Column("client_ip", sa.String(64), nullable=True),
        )

    # Properties
    if "properties" not in existing_tables:
        op.create_table(
            "properties",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("reference_number", sa.String(64), nullable=False, unique=True),
            sa.Column("slug", sa.String(255), nullable=False, unique=True),
            sa.Column("title", sa.String(200), nullable=False),
            sa.Column("description", sa.Text(), nullable=False),
            sa.Column("type", sa.String(32), nullable=False),
            sa.Column("status", sa.String(32), nullable=False, server_default="AVAILABLE"),
            sa.Column("region", sa.String(128), nullable=False),
            sa.Column("district", sa.String(128), nullable=True),
            sa.Column("address", sa.String(500), nullable=True),
            sa.Column("latitude", sa.Float(), nullable=True),
            sa.Column("longitude", sa.Float(), nullable=True),
            sa.Column("estimated_value", _MONEY, nullable=False),
            sa.Column("minimum_bid", _MONEY, nullable=True),
            sa.Column("currency", sa.String(8), nullable=False, server_default="SLE"),
            sa.Column("auction_date", sa.Date(), nullable=True),
            sa.Column("auction_venue", sa.String(255), nullable=True),
            sa.Column("auction_end_date", sa.Date(), nullable=True),
            sa.Column("size", sa.String(64), nullable=True),
            sa.Column("bedrooms", sa.Integer(), nullable=True),
            sa.Column("bathrooms", sa.Integer(), nullable=True),
            sa.Column("year_built", sa.Integer(), nullable=True),
            sa.Column("features", sa.JSON(), nullable=True),
            sa.Column("case_reference", sa.String(64), nullable=True),
            sa.Column("former_owner", sa.String(255), nullable=True),
            sa.Column("recovery_date", sa.Date(), nullable=True),
            sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("published_at", sa.DateTime(), nullable=True),
            *_timestamps(),
            sa.Column(
                "created_by_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True
            ),
        )
        op.create_index("idx_properties_status", "properties", ["status"])
        op.create_index("idx_properties_type", "properties", ["type"])
        op.create_index("idx_properties_region", "properties", ["region"])
        op.create_index("idx_properties_published_at", "properties", ["published_at"])

    if "property_images" not in existing_tables:
        op.create_table(
            "property_images",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "property_id", sa.Integer(), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False
            ),
            sa.Column("url", sa.String(512), nullable=False),
            sa.Column("storage_key", sa.String(512), nullable=True),
            sa.Column("caption", sa.String(255), nullable=True),
            sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
        op.create_index("idx_property_images_property", "property_images", ["property_id"])

    if "property_documents" not in existing_tables:
        op.create_table(
            "property_documents",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "property_id", sa.Integer(), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False
            ),
            sa.Column("title", sa.String(255), nullable=False),
            sa.Column("url", sa.String(512), nullable=False),
            sa.Column("storage_key", sa.String(512), nullable=True),
            sa.Column("file_type", sa.String(128), nullable=True),
            sa.Column("size_bytes", sa.Integer(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
        op.create_index("idx_property_documents_property", "property_documents", ["property_id"])

    if "expressions_of_interest" not in existing_tables:
        op.create_table(
            "expressions_of_interest",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("reference_number", sa.String(64), nullable=False, unique=True),
            sa.Column(
                "property_id", sa.Integer(), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False
            ),
            sa.Column("full_name", sa.String(100), nullable=False),
            sa.Column("email", sa.String(320), nullable=False),
            sa.Column("phone", sa.String(20), nullable=False),
            sa.Column("organization", sa.String(200), nullable=True),
            sa.Column("address", sa.String(500), nullable=True),
            sa.Column("nationality", sa.String(128), nullable=False),
            sa.Column("nin", sa.String(64), nullable=True),
            sa.Column("passport_number", sa.String(64), nullable=True),
            sa.Column("intended_use", sa.String(500), nullable=True),
            sa.Column("proposed_amount", _MONEY, nullable=True),
            sa.Column("message", sa.Text(), nullable=True),
            sa.Column("status", sa.String(32), nullable=False, server_default="PENDING"),
            sa.Column("admin_notes", sa.Text(), nullable=True),
            sa.Column("ip_address", sa.String(64), nullable=True),
            *_timestamps(),
        )
        op.create_index("idx_eoi_property", "expressions_of_interest", ["property_id"])
        op.create_index("idx_eoi_status", "expressions_of_interest", ["status"])

    # Published content
    if "case_highlights" not in existing_tables:
        op.create_table(
            "case_highlights",
            *_publishable(),
            sa.Column("summary", sa.String(500), nullable=False),
            sa.Column("content", sa.Text(), nullable=False),
            sa.Column("case_number", sa.String(50), nullable=True),
            sa.Column("defendant", sa.String(200), nullable=True),
            sa.Column("charges", sa.JSON(), nullable=True),
            sa.Column("verdict", sa.String(100), nullable=True),
            sa.Column("sentence", sa.String(500), nullable=True),
            sa.Column("amount_involved", _MONEY, nullable=True),
            sa.Column("amount_recovered", _MONEY, nullable=True),
            sa.Column("sector", sa.String(128), nullable=True),
            sa.Column("region", sa.String(128), nullable=True),
            sa.Column("case_date", sa.Date(), nullable=True),
            sa.Column("verdict_date", sa.Date(), nullable=True),
        )
        op.create_index("idx_case_highlights_status", "case_highlights", ["status"])
        op.create_index("idx_case_highlights_sector", "case_highlights", ["sector"])

    if "news_updates" not in existing_tables:
        op.create_table(
            "news_updates",
            *_publishable(),
            sa.Column("excerpt", sa.String(500), nullable=True),
            sa.Column("content", sa.Text(), nullable=False),
            sa.Column("category", sa.String(128), nullable=True),
            sa.Column("tags", sa.JSON(), nullable=True),
        )
        op.create_index("idx_news_updates_status", "news_updates", ["status"])
        op.create_index("idx_news_updates_category", "news_updates", ["category"])

    if "educational_resources" not in existing_tables:
        op.create_table(
            "educational_resources",
            *_publishable(),
            sa.Column("description", sa.String(1000), nullable=False),
            sa.Column("content", sa.Text(), nullable=True),
            sa.Column("category", sa.String(128), nullable=False),
            sa.Column("resource_type", sa.String(16), nullable=False),
            sa.Column("file_url", sa.String(512), nullable=True),
            sa.Column("video_url", sa.String(512), nullable=True),
        )
        op.create_index("idx_educational_resources_status", "educational_resources", ["status"])
        op.create_index("idx_educational_resources_category", "educational_resources", ["category"])

    # Statistics
    if "recovery_statistics" not in existing_tables:
        op.create_table(
            "recovery_statistics",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("period", sa.String(10), nullable=False),
            sa.Column("period_type", sa.String(16), nullable=False),
            sa.Column("total_recovered", _MONEY, nullable=False, server_default="0"),
            sa.Column("cash_recovered", _MONEY, nullable=True),
            sa.Column("assets_recovered", _MONEY, nullable=True),
            sa.Column("funds_to_treasury", _MONEY, nullable=True),
            sa.Column("cases_opened", sa.Integer(), nullable=True),
            sa.Column("cases_closed", sa.Integer(), nullable=True),
            sa.Column("prosecutions", sa.Integer(), nullable=True),
            sa.Column("convictions", sa.Integer(), nullable=True),
            sa.Column("acquittals", sa.Integer(), nullable=True),
            sa.Column("properties_seized", sa.Integer(), nullable=True),
            sa.Column("properties_auctioned", sa.Integer(), nullable=True),
            sa.Column("sector_breakdown", sa.JSON(), nullable=True),
            sa.Column("region_breakdown", sa.JSON(), nullable=True),
            *_timestamps(),
            sa.UniqueConstraint("period", "period_type", name="uq_recovery_statistics_period"),
        )
        op.create_index("idx_recovery_statistics_period", "recovery_statistics", ["period"])

    # Reports
    if "corruption_reports" not in existing_tables:
        op.create_table(
            "corruption_reports",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("reference_number", sa.String(64), nullable=False, unique=True),
            sa.Column("reporter_name", sa.String(100), nullable=True),
            sa.Column("reporter_email", sa.String(320), nullable=True),
            sa.Column("reporter_phone", sa.String(20), nullable=True),
            sa.Column("is_anonymous", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("incident_date", sa.Date(), nullable=True),
            sa.Column("incident_location", sa.String(500), nullable=True),
            sa.Column("region", sa.String(128), nullable=True),
            sa.Column("accused_name", sa.String(200), nullable=True),
            sa.Column("accused_position", sa.String(200), nullable=True),
            sa.Column("accused_organization", sa.String(200), nullable=True),
            sa.Column("category", sa.String(32), nullable=True),
            sa.Column("description", sa.Text(), nullable=False),
            sa.Column("estimated_amount", _MONEY, nullable=True),
            sa.Column("has_evidence", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("evidence_description", sa.Text(), nullable=True),
            sa.Column("status", sa.String(32), nullable=False, server_default="RECEIVED"),
            sa.Column("priority", sa.String(16), nullable=False, server_default="MEDIUM"),
            sa.Column("assigned_to_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
            sa.Column("internal_notes", sa.Text(), nullable=True),
            sa.Column("ip_address", sa.String(64), nullable=True),
            sa.Column("submitted_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
        op.create_index("idx_corruption_reports_status", "corruption_reports", ["status"])
        op.create_index("idx_corruption_reports_priority", "corruption_reports", ["priority"])
        op.create_index("idx_corruption_reports_submitted_at", "corruption_reports", ["submitted_at"])

    if "report_attachments" not in existing_tables:
        op.create_table(
            "report_attachments",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "report_id", sa.Integer(), sa.ForeignKey("corruption_reports.id", ondelete="CASCADE"), nullable=False
            ),
            sa.Column("file_name", sa.String(255), nullable=False),
            sa.Column("url", sa.String(512), nullable=False),
            sa.Column("storage_key", sa.String(512), nullable=True),
            sa.Column("content_type", sa.String(128), nullable=True),
            sa.Column("size_bytes", sa.Integer(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
        op.create_index("idx_report_attachments_report", "report_attachments", ["report_id"])

    # Settings
    if "site_settings" not in existing_tables:
        op.create_table(
            "site_settings",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("key", sa.String(128), nullable=False, unique=True),
            sa.Column("value", sa.JSON(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )

    if "email_subscriptions" not in existing_tables:
        op.create_table(
            "email_subscriptions",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("email", sa.String(320), nullable=False, unique=True),
            sa.Column("name", sa.String(128), nullable=True),
            sa.Column("categories", sa.JSON(), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("confirmed_at", sa.DateTime(), nullable=True),
            sa.Column("unsubscribed_at", sa.DateTime(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )


def downgrade() -> None:
    for table in (
        "email_subscriptions",
        "site_settings",
        "report_attachments",
        "corruption_reports",
        "recovery_statistics",
        "educational_resources",
        "news_updates",
        "case_highlights",
        "expressions_of_interest",
        "property_documents",
        "property_images",
        "properties",
        "audit_events",
        "role_permissions",
        "user_roles",
        "permissions",
        "roles",
        "users",
    ):
        op.drop_table(table)
