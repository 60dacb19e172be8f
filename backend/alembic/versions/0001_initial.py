"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

UUID_TYPE = sa.Uuid(as_uuid=True)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            # ORM-managed updated_at (no database trigger).
            nullable=False,
        ),
    ]


def _org_fk() -> sa.Column:
    return sa.Column(
        "organization_id",
        UUID_TYPE,
        sa.ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "organizations",
        sa.Column("id", UUID_TYPE, primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("address", sa.String(length=500)),
        sa.Column("phone", sa.String(length=50)),
        sa.Column("email", sa.String(length=255)),
        sa.Column("website", sa.String(length=500)),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="active"),
        *_timestamps(),
    )

    user_role = sa.Enum("admin", "staff", "volunteer", name="userrole")
    op.create_table(
        "users",
        sa.Column("id", UUID_TYPE, primary_key=True),
        _org_fk(),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("role", user_role, nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("phone", sa.String(length=50)),
        *_timestamps(),
    )
    op.create_index("ix_users_organization_id", "users", ["organization_id"])
    op.create_index("ix_users_org_name", "users", ["organization_id", "last_name", "first_name"])

    op.create_table(
        "volunteers",
        sa.Column("id", UUID_TYPE, primary_key=True),
        _org_fk(),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=50)),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="active"),
        sa.Column("skills", sa.JSON(), nullable=False),
        sa.Column("availability", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text()),
        *_timestamps(),
    )
    op.create_index("ix_volunteers_organization_id", "volunteers", ["organization_id"])
    op.create_index("ix_volunteers_org_status", "volunteers", ["organization_id", "status"])

    op.create_table(
        "clients",
        sa.Column("id", UUID_TYPE, primary_key=True),
        _org_fk(),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255)),
        sa.Column("phone", sa.String(length=50)),
        sa.Column("address", sa.String(length=500), nullable=False),
        sa.Column("household_size", sa.Integer(), nullable=False),
        sa.Column("dietary_restrictions", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="active"),
        sa.Column("notes", sa.Text()),
        *_timestamps(),
    )
    op.create_index("ix_clients_organization_id", "clients", ["organization_id"])
    op.create_index("ix_clients_org_status", "clients", ["organization_id", "status"])

    op.create_table(
        "client_visits",
        sa.Column("id", UUID_TYPE, primary_key=True),
        _org_fk(),
        sa.Column("client_id", UUID_TYPE, sa.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False),
        sa.Column("visit_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("notes", sa.Text()),
        sa.Column("served_by", UUID_TYPE, sa.ForeignKey("users.id", ondelete="SET NULL")),
    )
    op.create_index(
        "ix_client_visits_org_client_date",
        "client_visits",
        ["organization_id", "client_id", "visit_date"],
    )

    op.create_table(
        "inventory_categories",
        sa.Column("id", UUID_TYPE, primary_key=True),
        _org_fk(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_inventory_categories_org_name", "inventory_categories", ["organization_id", "name"])

    op.create_table(
        "inventory_items",
        sa.Column("id", UUID_TYPE, primary_key=True),
        _org_fk(),
        sa.Column(
            "category_id",
            UUID_TYPE,
            sa.ForeignKey("inventory_categories.id", ondelete="SET NULL"),
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("sku", sa.String(length=100)),
        sa.Column("barcode", sa.String(length=100)),
        sa.Column("unit_type", sa.String(length=50), nullable=False),
        sa.Column("minimum_stock", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("notes", sa.Text()),
        *_timestamps(),
        sa.CheckConstraint("minimum_stock >= 0", name="ck_inventory_items_minimum_stock_nonnegative"),
    )
    op.create_index("ix_inventory_items_category_id", "inventory_items", ["category_id"])
    op.create_index("ix_inventory_items_org_id", "inventory_items", ["organization_id"])
    op.create_index("ix_inventory_items_org_name", "inventory_items", ["organization_id", "name"])

    op.create_table(
        "inventory_transactions",
        sa.Column("id", UUID_TYPE, primary_key=True),
        _org_fk(),
        sa.Column(
            "item_id",
            UUID_TYPE,
            sa.ForeignKey("inventory_items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("transaction_type", sa.String(length=32), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text()),
        sa.Column("user_id", UUID_TYPE, sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column(
            "transaction_date",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint("quantity > 0", name="ck_inventory_transactions_quantity_positive"),
    )
    op.create_index(
        "ix_inventory_transactions_org_item",
        "inventory_transactions",
        ["organization_id", "item_id"],
    )
    op.create_index(
        "ix_inventory_transactions_item_date",
        "inventory_transactions",
        ["item_id", "transaction_date"],
    )
    op.create_index(
        "ix_inventory_transactions_org_date",
        "inventory_transactions",
        ["organization_id", "transaction_date"],
    )


def downgrade() -> None:
    op.drop_table("inventory_transactions")
    op.drop_table("inventory_items")
    op.drop_table("inventory_categories")
    op.drop_table("client_visits")
    op.drop_table("clients")
    op.drop_table("volunteers")
    op.drop_table("users")
    sa.Enum(name="userrole").drop(op.get_bind(), checkfirst=True)
    op.drop_table("organizations")
