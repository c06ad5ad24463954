"""Initial doctor directory schema."""

from alembic import op
import sqlalchemy as sa

revision = "20261018001"
down_revision = None
branch_labels = None
depends_on = None

DOCTOR_TYPES = (
    "general_practitioner",
    "dentist",
    "obgyn",
    "cardiologist",
    "dermatologist",
    "psychiatrist",
    "neurologist",
    "orthopedist",
    "pediatrician",
    "ophthalmologist",
    "other",
)
GENDERS = ("male", "female", "non_binary", "prefer_not_to_say")
APPROVAL_STATUSES = ("pending", "approved", "rejected")
WAIT_TIMES = ("same_day", "within_week", "within_month", "over_month", "unknown")


def upgrade() -> None:
    op.create_table(
        "offices",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
    )

    op.create_table(
        "doctor_referrals",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.Column("office_id", sa.Integer(), nullable=False),
        sa.Column("doctor_name", sa.Text(), nullable=False),
        sa.Column("type", sa.Enum(*DOCTOR_TYPES, name="doctor_type"), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("phone_number", sa.Text(), nullable=True),
        sa.Column("gender", sa.Enum(*GENDERS, name="gender"), nullable=False),
        sa.Column(
            "online_appointments", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column("wait_time", sa.Enum(*WAIT_TIMES, name="wait_time"), nullable=False),
        sa.Column(
            "same_day_service", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column(
            "approval_status",
            sa.Enum(*APPROVAL_STATUSES, name="approval_status"),
            nullable=False,
            server_default=sa.text("'pending'"),
        ),
        sa.Column("submitted_by", sa.Text(), nullable=True),
        sa.Column("approved_by", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(
            ["office_id"],
            ["offices.id"],
            name="fk_doctor_referrals_office_id_offices",
        ),
    )
    op.create_index(
        "ix_doctor_referrals_office_id", "doctor_referrals", ["office_id"], unique=False
    )
    op.create_index(
        "ix_doctor_referrals_approval_status",
        "doctor_referrals",
        ["approval_status"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_doctor_referrals_approval_status", table_name="doctor_referrals")
    op.drop_index("ix_doctor_referrals_office_id", table_name="doctor_referrals")
    op.drop_table("doctor_referrals")
    op.drop_table("offices")

    bind = op.get_bind()
    for enum_name in ("approval_status", "wait_time", "gender", "doctor_type"):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
