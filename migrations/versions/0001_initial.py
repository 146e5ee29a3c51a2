"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "cities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=150), nullable=False, unique=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "locations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("city_id", sa.Integer(), sa.ForeignKey("cities.id"), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("city_id", "name", name="uq_locations_city_name"),
    )
    op.create_index("ix_locations_city_id", "locations", ["city_id"])
    op.create_table(
        "pos_terminals",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("location_id", sa.Integer(), sa.ForeignKey("locations.id"), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("location_id", "name", name="uq_pos_terminals_location_name"),
    )
    op.create_index("ix_pos_terminals_location_id", "pos_terminals", ["location_id"])
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=False, server_default="USER"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_table(
        "user_pos",
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("pos_id", sa.Integer(), sa.ForeignKey("pos_terminals.id", ondelete="CASCADE"), primary_key=True),
    )
    op.create_table(
        "sales_types",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=150), nullable=False, unique=True),
        sa.Column("attachment_applicable", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("attachment_required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "sales_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("pos_id", sa.Integer(), sa.ForeignKey("pos_terminals.id"), nullable=False),
        sa.Column("entry_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="submitted"),
        sa.Column("submitted_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("pos_id", "entry_date", name="uq_sales_entries_pos_date"),
    )
    op.create_index("ix_sales_entries_user_id", "sales_entries", ["user_id"])
    op.create_index("ix_sales_entries_pos_id", "sales_entries", ["pos_id"])
    op.create_index("ix_sales_entries_entry_date", "sales_entries", ["entry_date"])
    op.create_table(
        "sales_entry_details",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("sales_entry_id", sa.Integer(), sa.ForeignKey("sales_entries.id"), nullable=False),
        sa.Column("sales_type_id", sa.Integer(), sa.ForeignKey("sales_types.id"), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("attachment_ref", sa.String(length=255), nullable=True),
        sa.UniqueConstraint("sales_entry_id", "sales_type_id", name="uq_sales_entry_details_entry_type"),
    )
    op.create_index("ix_sales_entry_details_sales_entry_id", "sales_entry_details", ["sales_entry_id"])
    op.create_index("ix_sales_entry_details_sales_type_id", "sales_entry_details", ["sales_type_id"])


def downgrade() -> None:
    op.drop_index("ix_sales_entry_details_sales_type_id", table_name="sales_entry_details")
    op.drop_index("ix_sales_entry_details_sales_entry_id", table_name="sales_entry_details")
    op.drop_table("sales_entry_details")
    op.drop_index("ix_sales_entries_entry_date", table_name="sales_entries")
    op.drop_index("ix_sales_entries_pos_id", table_name="sales_entries")
    op.drop_index("ix_sales_entries_user_id", table_name="sales_entries")
    op.drop_table("sales_entries")
    op.drop_table("sales_types")
    op.drop_table("user_pos")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_pos_terminals_location_id", table_name="pos_terminals")
    op.drop_table("pos_terminals")
    op.drop_index("ix_locations_city_id", table_name="locations")
    op.drop_table("locations")
    op.drop_table("cities")
