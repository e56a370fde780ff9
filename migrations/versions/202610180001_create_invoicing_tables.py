"""Create user, invoice and activity log tables."""

import sqlalchemy as sa
from alembic import op


def _has_table(table_name: str, bind) -> bool:
    inspector = sa.inspect(bind)
    return inspector.has_table(table_name)


# revision identifiers, used by Alembic.
revision = "202610180001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()

    if not _has_table("user", bind):
        op.create_table(
            "user",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("username", sa.String(length=80), nullable=False),
            sa.Column("password", sa.String(length=255), nullable=False),
            sa.Column(
                "role",
                sa.Enum("MANAGER", "CLERK", name="userrole"),
                nullable=False,
            ),
            sa.Column("active", sa.Boolean(), nullable=False),
            sa.UniqueConstraint("username", name="uq_user_username"),
        )

    if not _has_table("invoice", bind):
        op.create_table(
            "invoice",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("payer", sa.String(length=120), nullable=False),
            sa.Column("amount", sa.Numeric(12, 2), nullable=False),
            sa.Column("description", sa.String(length=500), nullable=True),
            sa.Column("date_issued", sa.Date(), nullable=False),
            sa.Column("date_due", sa.Date(), nullable=True),
            sa.Column(
                "paid", sa.Boolean(), nullable=False, server_default="0"
            ),
            sa.Column("date_paid", sa.DateTime(), nullable=True),
            sa.Column("date_created", sa.DateTime(), nullable=False),
            sa.Column("created_by_id", sa.Integer(), nullable=True),
            sa.ForeignKeyConstraint(
                ["created_by_id"], ["user.id"], name="fk_invoice_created_by_id"
            ),
        )
        op.create_index(
            "ix_invoice_paid_issued", "invoice", ["paid", "date_issued"]
        )

    if not _has_table("activity_log", bind):
        op.create_table(
            "activity_log",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("user_id", sa.Integer(), nullable=True),
            sa.Column("activity", sa.String(length=255), nullable=False),
            sa.Column("timestamp", sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(
                ["user_id"], ["user.id"], name="fk_activity_log_user_id"
            ),
        )


def downgrade():
    bind = op.get_bind()
    if _has_table("activity_log", bind):
        op.drop_table("activity_log")
    if _has_table("invoice", bind):
        op.drop_index("ix_invoice_paid_issued", table_name="invoice")
        op.drop_table("invoice")
    if _has_table("user", bind):
        op.drop_table("user")
