"""Create lofts and reservations with overlap exclusion

Revision ID: 3f9a1c2d7b40
Revises:
Create Date: 2026-10-18 10:12:03.418227

"""

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op  # type: ignore[attr-defined]

# revision identifiers, used by Alembic.
revision = "3f9a1c2d7b40"
down_revision = None
branch_labels = None
depends_on = None

SCHEMA = "lofts"


def upgrade() -> None:
    """Upgrade schema."""
    # Needed for "loft_id WITH =" inside a GiST exclusion constraint
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")

    op.create_table(
        "lofts",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("price_per_night", sa.Numeric(12, 2), nullable=False),
        sa.Column("cleaning_fee", sa.Numeric(12, 2), nullable=True),
        sa.Column("tax_rate", sa.Numeric(5, 2), nullable=True),
        sa.Column("max_guests", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("minimum_stay", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("maximum_stay", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(), server_default=sa.text("'available'"), nullable=False),
        sa.Column("is_published", sa.Boolean(), server_default=sa.text("FALSE"), nullable=False),
        sa.Column(
            "created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()"), nullable=False
        ),
        schema=SCHEMA,
    )

    op.create_table(
        "reservations",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("customer_id", sa.String(), nullable=True),
        sa.Column("loft_id", sa.String(), nullable=False),
        sa.Column("check_in_date", sa.Date(), nullable=False),
        sa.Column("check_out_date", sa.Date(), nullable=False),
        sa.Column("nights", sa.Integer(), nullable=False),
        sa.Column("guest_info", postgresql.JSONB(), nullable=False),
        sa.Column("pricing", postgresql.JSONB(), nullable=False),
        sa.Column("special_requests", sa.Text(), nullable=True),
        sa.Column("dietary_requirements", sa.Text(), nullable=True),
        sa.Column("accessibility_needs", sa.Text(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("payment_status", sa.String(), nullable=False),
        sa.Column("confirmation_code", sa.String(), nullable=False),
        sa.Column("booking_reference", sa.String(), nullable=False),
        sa.Column("communication_preferences", postgresql.JSONB(), nullable=False),
        sa.Column("terms_accepted", sa.Boolean(), nullable=False),
        sa.Column("terms_accepted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("terms_version", sa.String(), nullable=False),
        sa.Column("booking_source", sa.String(), nullable=False),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        sa.Column("cancelled_by", sa.String(), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("updated_by", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(
            ["loft_id"],
            [f"{SCHEMA}.lofts.id"],
            name="reservations_loft_id_fkey",
            ondelete="RESTRICT",
        ),
        sa.UniqueConstraint("confirmation_code", name="uq_reservations_confirmation_code"),
        sa.UniqueConstraint("booking_reference", name="uq_reservations_booking_reference"),
        sa.CheckConstraint("check_in_date < check_out_date", name="ck_reservations_date_order"),
        schema=SCHEMA,
    )

    op.create_index(
        "ix_lofts_reservations_loft_id", "reservations", ["loft_id"], schema=SCHEMA
    )
    op.create_index(
        "ix_lofts_reservations_customer_id", "reservations", ["customer_id"], schema=SCHEMA
    )

    # Two active reservations for the same loft may not share a night.
    # '[)' makes the check-out day free for the next check-in.
    op.execute(
        f"""
        ALTER TABLE {SCHEMA}.reservations
        ADD CONSTRAINT ex_reservations_no_overlap
        EXCLUDE USING gist (
            loft_id WITH =,
            daterange(check_in_date, check_out_date, '[)') WITH &&
        )
        WHERE (status IN ('pending', 'confirmed'))
        """
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_constraint(
        "ex_reservations_no_overlap", "reservations", type_="exclude", schema=SCHEMA
    )
    op.drop_index("ix_lofts_reservations_customer_id", table_name="reservations", schema=SCHEMA)
    op.drop_index("ix_lofts_reservations_loft_id", table_name="reservations", schema=SCHEMA)
    op.drop_table("reservations", schema=SCHEMA)
    op.drop_table("lofts", schema=SCHEMA)
