"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


class GUID(sa.TypeDecorator):
    impl = sa.CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            from sqlalchemy.dialects.postgresql import UUID

            return dialect.type_descriptor(UUID(as_uuid=True))
        return dialect.type_descriptor(sa.CHAR(36))


def _audit_columns():
    return [
        sa.Column("created_by", sa.String(length=64), nullable=False, server_default="system"),
        sa.Column("created_date", sa.DateTime(), nullable=False),
        sa.Column("modified_by", sa.String(length=64), nullable=True),
        sa.Column("modified_date", sa.DateTime(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
    ]


def upgrade() -> None:
    op.create_table(
        "lookup_values",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("table_name", sa.String(length=50), nullable=False),
        sa.Column("table_value", sa.String(length=100), nullable=False),
        sa.Column("table_sequence", sa.Integer(), nullable=True),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.UniqueConstraint("table_name", "table_value", name="uq_lookup_value"),
    )
    op.create_index("ix_lookup_values_table_name", "lookup_values", ["table_name"], unique=False)

    op.create_table(
        "stores",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("store_code", sa.String(length=20), nullable=False, unique=True),
        sa.Column("store_name", sa.String(length=255), nullable=False),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("contact_number", sa.String(length=30), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("status_id", sa.Integer(), sa.ForeignKey("lookup_values.id"), nullable=False),
        *_audit_columns(),
    )

    op.create_table(
        "users",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("user_code", sa.String(length=20), nullable=False, unique=True),
        sa.Column("full_name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=30), nullable=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=False),
        sa.Column("store_id", GUID(), sa.ForeignKey("stores.id"), nullable=True),
        sa.Column("status_id", sa.Integer(), sa.ForeignKey("lookup_values.id"), nullable=False),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        *_audit_columns(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_store_id", "users", ["store_id"], unique=False)

    op.create_table(
        "product_categories",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("category_code", sa.String(length=20), nullable=False, unique=True),
        sa.Column("category_name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_ref", sa.String(length=500), nullable=True),
        sa.Column("icon_ref", sa.String(length=100), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_popular", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status_id", sa.Integer(), sa.ForeignKey("lookup_values.id"), nullable=False),
        *_audit_columns(),
    )
    op.create_index("ix_product_categories_category_name", "product_categories", ["category_name"], unique=False)

    op.create_table(
        "products",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("product_code", sa.String(length=20), nullable=False, unique=True),
        sa.Column("product_name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_ref", sa.String(length=500), nullable=True),
        sa.Column("brand_name", sa.String(length=200), nullable=True),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("category_id", GUID(), sa.ForeignKey("product_categories.id"), nullable=False),
        sa.Column("status_id", sa.Integer(), sa.ForeignKey("lookup_values.id"), nullable=False),
        *_audit_columns(),
    )
    op.create_index("ix_products_category_id", "products", ["category_id"], unique=False)
    op.create_index("ix_products_category_name", "products", ["category_id", "product_name"], unique=False)

    op.create_table(
        "items",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("product_id", GUID(), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("store_id", GUID(), sa.ForeignKey("stores.id"), nullable=False),
        sa.Column("sku", sa.String(length=64), nullable=False),
        *_audit_columns(),
    )
    op.create_index("ix_items_product_id", "items", ["product_id"], unique=False)
    op.create_index("ix_items_store_id", "items", ["store_id"], unique=False)

    op.create_table(
        "store_product_assignments",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("store_id", GUID(), sa.ForeignKey("stores.id"), nullable=False),
        sa.Column("product_id", GUID(), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("can_manage", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("status_id", sa.Integer(), sa.ForeignKey("lookup_values.id"), nullable=False),
        *_audit_columns(),
        sa.UniqueConstraint("store_id", "product_id", name="uq_store_product_assignment"),
    )
    op.create_index("ix_store_product_assignments_store_id", "store_product_assignments", ["store_id"], unique=False)
    op.create_index(
        "ix_store_product_assignments_product_id", "store_product_assignments", ["product_id"], unique=False
    )
    op.create_index("ix_assignments_store_active", "store_product_assignments", ["store_id", "active"], unique=False)

    op.create_table(
        "idempotency_records",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("scope_key", sa.String(length=64), nullable=False),
        sa.Column("endpoint", sa.String(length=255), nullable=False),
        sa.Column("method", sa.String(length=10), nullable=False),
        sa.Column("idempotency_key", sa.String(length=255), nullable=False),
        sa.Column("request_hash", sa.String(length=64), nullable=False),
        sa.Column("state", sa.String(length=20), nullable=False),
        sa.Column("status_code", sa.Integer(), nullable=True),
        sa.Column("response_body", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("scope_key", "endpoint", "method", "idempotency_key", name="uq_idempotency"),
    )
    op.create_index("ix_idempotency_records_scope_key", "idempotency_records", ["scope_key"], unique=False)

    op.create_table(
        "audit_events",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("actor_id", sa.String(length=64), nullable=True),
        sa.Column("actor_role", sa.String(length=50), nullable=True),
        sa.Column("store_id", sa.String(length=64), nullable=True),
        sa.Column("trace_id", sa.String(length=64), nullable=True),
        sa.Column("action", sa.String(length=255), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.String(length=64), nullable=True),
        sa.Column("before_payload", sa.JSON(), nullable=True),
        sa.Column("after_payload", sa.JSON(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("result", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_audit_events_actor_id", "audit_events", ["actor_id"], unique=False)


def downgrade() -> None:
    op.drop_table("audit_events")
    op.drop_table("idempotency_records")
    op.drop_table("store_product_assignments")
    op.drop_table("items")
    op.drop_table("products")
    op.drop_table("product_categories")
    op.drop_table("users")
    op.drop_table("stores")
    op.drop_table("lookup_values")
