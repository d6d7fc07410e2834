"""create base schema

Revision ID: 202610010900
Revises:
Create Date: 2026-10-01 09:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "202610010900"
down_revision = None
branch_labels = None
depends_on = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        nullable=False,
    )


def _restaurant_fk() -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(["restaurant_id"], ["restaurants.id"], ondelete="CASCADE")


def upgrade() -> None:
    op.create_table(
        "restaurants",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("logo_url", sa.String(length=1000), nullable=True),
        sa.Column("theme_color", sa.String(length=20), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "sessions",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("restaurant_id", sa.String(length=50), nullable=False),
        sa.Column("token", sa.String(length=255), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        _created_at(),
        _restaurant_fk(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("token"),
    )
    op.create_index("ix_sessions_restaurant_id", "sessions", ["restaurant_id"], unique=False)

    op.create_table(
        "tables",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("restaurant_id", sa.String(length=50), nullable=False),
        sa.Column("table_number", sa.String(length=50), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("qr_code_url", sa.String(length=1000), nullable=True),
        _created_at(),
        _restaurant_fk(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "restaurant_id",
            "table_number",
            name="uq_tables_restaurant_number",
        ),
    )
    op.create_index("ix_tables_restaurant_id", "tables", ["restaurant_id"], unique=False)

    op.create_table(
        "menu_categories",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("restaurant_id", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(length=1000), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _restaurant_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_menu_categories_restaurant_id",
        "menu_categories",
        ["restaurant_id"],
        unique=False,
    )

    op.create_table(
        "menu_items",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("restaurant_id", sa.String(length=50), nullable=False),
        sa.Column("category_id", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(length=1000), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("image_url", sa.String(length=1000), nullable=True),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_vegetarian", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_vegan", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("allergens", sa.JSON(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        _restaurant_fk(),
        sa.ForeignKeyConstraint(["category_id"], ["menu_categories.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_menu_items_restaurant_id", "menu_items", ["restaurant_id"], unique=False)
    op.create_index("ix_menu_items_category_id", "menu_items", ["category_id"], unique=False)

    op.create_table(
        "orders",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("restaurant_id", sa.String(length=50), nullable=False),
        sa.Column("table_id", sa.String(length=50), nullable=False),
        sa.Column("table_number", sa.String(length=50), nullable=False),
        sa.Column("customer_name", sa.String(length=255), nullable=True),
        sa.Column("customer_phone", sa.String(length=50), nullable=True),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("notes", sa.String(length=2000), nullable=True),
        sa.Column("preparation_time", sa.Integer(), nullable=True),
        sa.Column("rejection_reason", sa.String(length=1000), nullable=True),
        _created_at(),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cooking_started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        _restaurant_fk(),
        sa.ForeignKeyConstraint(["table_id"], ["tables.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_orders_restaurant_created_at_desc",
        "orders",
        ["restaurant_id", "created_at"],
        unique=False,
    )
    op.create_index(
        "ix_orders_restaurant_status",
        "orders",
        ["restaurant_id", "status"],
        unique=False,
    )

    op.create_table(
        "order_items",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("order_id", sa.String(length=50), nullable=False),
        sa.Column("menu_item_id", sa.String(length=50), nullable=False),
        sa.Column("item_name", sa.String(length=255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("special_instructions", sa.String(length=1000), nullable=True),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"], unique=False)

    op.create_table(
        "waiter_calls",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("restaurant_id", sa.String(length=50), nullable=False),
        sa.Column("table_id", sa.String(length=50), nullable=False),
        sa.Column("table_number", sa.String(length=50), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="open"),
        sa.Column("customer_message", sa.String(length=280), nullable=True),
        sa.Column("response_message", sa.String(length=180), nullable=True),
        _created_at(),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        _restaurant_fk(),
        sa.ForeignKeyConstraint(["table_id"], ["tables.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_waiter_calls_restaurant_created_at",
        "waiter_calls",
        ["restaurant_id", "created_at"],
        unique=False,
    )

    op.create_table(
        "printers",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("restaurant_id", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("printer_type", sa.String(length=20), nullable=False),
        sa.Column("connection_string", sa.String(length=500), nullable=True),
        sa.Column("printnode_id", sa.String(length=100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        _restaurant_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_printers_restaurant_id", "printers", ["restaurant_id"], unique=False)

    op.create_table(
        "item_labels",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("restaurant_id", sa.String(length=50), nullable=False),
        sa.Column("menu_item_id", sa.String(length=50), nullable=False),
        sa.Column("label_name", sa.String(length=255), nullable=False),
        sa.Column("ticket_id", sa.String(length=50), nullable=False),
        sa.Column("prepared_by", sa.String(length=255), nullable=True),
        sa.Column("prepared_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("printed_by", sa.String(length=255), nullable=True),
        sa.Column("printed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("track_code", sa.String(length=3), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at(),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        _restaurant_fk(),
        sa.ForeignKeyConstraint(["menu_item_id"], ["menu_items.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_item_labels_restaurant_id",
        "item_labels",
        ["restaurant_id"],
        unique=False,
    )

    op.create_table(
        "recipes",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("restaurant_id", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("prep_time", sa.String(length=100), nullable=False, server_default=""),
        sa.Column("portion_yield", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("ingredients", sa.JSON(), nullable=False),
        sa.Column("instructions", sa.JSON(), nullable=False),
        _created_at(),
        _restaurant_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_recipes_restaurant_id", "recipes", ["restaurant_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_recipes_restaurant_id", table_name="recipes")
    op.drop_table("recipes")
    op.drop_index("ix_item_labels_restaurant_id", table_name="item_labels")
    op.drop_table("item_labels")
    op.drop_index("ix_printers_restaurant_id", table_name="printers")
    op.drop_table("printers")
    op.drop_index("ix_waiter_calls_restaurant_created_at", table_name="waiter_calls")
    op.drop_table("waiter_calls")
    op.drop_index("ix_order_items_order_id", table_name="order_items")
    op.drop_table("order_items")
    op.drop_index("ix_orders_restaurant_status", table_name="orders")
    op.drop_index("ix_orders_restaurant_created_at_desc", table_name="orders")
    op.drop_table("orders")
    op.drop_index("ix_menu_items_category_id", table_name="menu_items")
    op.drop_index("ix_menu_items_restaurant_id", table_name="menu_items")
    op.drop_table("menu_items")
    op.drop_index("ix_menu_categories_restaurant_id", table_name="menu_categories")
    op.drop_table("menu_categories")
    op.drop_index("ix_tables_restaurant_id", table_name="tables")
    op.drop_table("tables")
    op.drop_index("ix_sessions_restaurant_id", table_name="sessions")
    op.drop_table("sessions")
    op.drop_table("restaurants")
