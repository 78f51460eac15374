"""initial schema: users, shops, documents

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19

- users: credentials (bcrypt hash) and role
- shops: shop rental records with audit columns
- documents: blob metadata bound to (entity_type, entity_id)
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_users")),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "shops",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("shop_number", sa.String(length=32), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=False),
        sa.Column("area", sa.Float(), nullable=True),
        sa.Column("rent_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("security_deposit", sa.Numeric(10, 2), nullable=True),
        sa.Column("tenant_name", sa.String(length=120), nullable=False),
        sa.Column("tenant_contact", sa.String(length=120), nullable=False),
        sa.Column("lease_start_date", sa.Date(), nullable=False),
        sa.Column("lease_end_date", sa.Date(), nullable=True),
        sa.Column("rent_due_day", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("include_in_water_bill", sa.Boolean(), nullable=False),
        sa.Column("include_in_current_bill", sa.Boolean(), nullable=False),
        sa.Column("water_bill_share", sa.Float(), nullable=True),
        sa.Column("current_bill_share", sa.Float(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=False),
        sa.Column("updated_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("rent_due_day BETWEEN 1 AND 31", name="ck_shops_rent_due_day"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], name=op.f("fk_shops_created_by_users")),
        sa.ForeignKeyConstraint(["updated_by"], ["users.id"], name=op.f("fk_shops_updated_by_users")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_shops")),
        sa.UniqueConstraint("shop_number", name=op.f("uq_shops_shop_number")),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_shops_tenant_name", "shops", ["tenant_name"])
    op.create_index("ix_shops_status", "shops", ["status"])
    op.create_index("ix_shops_lease_dates", "shops", ["lease_start_date", "lease_end_date"])

    op.create_table(
        "documents",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("original_name", sa.String(length=255), nullable=False),
        sa.Column("file_path", sa.String(length=512), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("mime_type", sa.String(length=255), nullable=False),
        sa.Column("entity_type", sa.String(length=32), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("tags", sa.String(length=255), nullable=True),
        sa.Column("uploaded_by", sa.Integer(), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["uploaded_by"], ["users.id"], name=op.f("fk_documents_uploaded_by_users")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_documents")),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_documents_entity", "documents", ["entity_type", "entity_id"])
    op.create_index("ix_documents_uploaded_by", "documents", ["uploaded_by"])


def downgrade():
    op.drop_index("ix_documents_uploaded_by", table_name="documents")
    op.drop_index("ix_documents_entity", table_name="documents")
    op.drop_table("documents")

    op.drop_index("ix_shops_lease_dates", table_name="shops")
    op.drop_index("ix_shops_status", table_name="shops")
    op.drop_index("ix_shops_tenant_name", table_name="shops")
    op.drop_table("shops")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
