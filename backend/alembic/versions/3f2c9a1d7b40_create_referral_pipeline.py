"""create referral pipeline: users, employees, recommendations, commissions

Revision ID: 3f2c9a1d7b40
Revises:
Create Date: 2026-10-12
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "3f2c9a1d7b40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # -----------------------------------------------------
    # 1) Identities and the staff directory
    # -----------------------------------------------------
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("magic_code", sa.String(length=64), nullable=True),
        sa.Column("magic_code_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("full_name", sa.String(length=200), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "employees",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("first_name", sa.String(length=120), nullable=True),
        sa.Column("last_name", sa.String(length=120), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="employee"),
        sa.Column(
            "manager_id",
            sa.Uuid(),
            sa.ForeignKey("employees.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_employees_user_id", "employees", ["user_id"], unique=True)
    op.create_index("ix_employees_email", "employees", ["email"], unique=True)
    op.create_index("ix_employees_manager_id", "employees", ["manager_id"])

    # -----------------------------------------------------
    # 2) Referrals
    # -----------------------------------------------------
    op.create_table(
        "recommendations",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column(
            "prescriber_id",
            sa.Uuid(),
            sa.ForeignKey("employees.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("prescriber_name", sa.String(length=240), nullable=True),
        sa.Column("prescriber_email", sa.String(length=320), nullable=True),
        sa.Column(
            "receiver_id",
            sa.Uuid(),
            sa.ForeignKey("employees.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("receiver_email", sa.String(length=320), nullable=True),
        sa.Column("client_name", sa.String(length=240), nullable=False),
        sa.Column("client_email", sa.String(length=320), nullable=True),
        sa.Column("client_phone", sa.String(length=40), nullable=True),
        sa.Column("project_address", sa.Text(), nullable=True),
        sa.Column("project_details", sa.Text(), nullable=True),
        sa.Column("project_title", sa.String(length=80), nullable=True),
        sa.Column("intake_status", sa.String(length=30), nullable=False, server_default="non_traitee"),
        sa.Column("deal_stage", sa.String(length=30), nullable=False, server_default="nouveau"),
        sa.Column("amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("annual_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("last_reminder_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("manager_reminder_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("manager_notified_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_recommendations_created_at", "recommendations", ["created_at"])
    op.create_index("ix_recommendations_prescriber_id", "recommendations", ["prescriber_id"])
    op.create_index("ix_recommendations_receiver_id", "recommendations", ["receiver_id"])
    op.create_index("ix_recommendations_receiver_email", "recommendations", ["receiver_email"])
    # cron scans: untreated + age
    op.create_index("ix_recommendations_intake_created", "recommendations", ["intake_status", "created_at"])
    op.create_index("ix_recommendations_deal_stage", "recommendations", ["deal_stage"])

    # -----------------------------------------------------
    # 3) Commissions (at most one per referral)
    # -----------------------------------------------------
    op.create_table(
        "commissions",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column(
            "reco_id",
            sa.Uuid(),
            sa.ForeignKey("recommendations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("validated_by_manager", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("amount >= 0", name="ck_commissions_amount_non_negative"),
    )
    op.create_index("ix_commissions_reco_id", "commissions", ["reco_id"], unique=True)

    # -----------------------------------------------------
    # 4) Notes, audit trail, feature suggestions
    # -----------------------------------------------------
    op.create_table(
        "notes",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column(
            "reco_id",
            sa.Uuid(),
            sa.ForeignKey("recommendations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "author_id",
            sa.Uuid(),
            sa.ForeignKey("employees.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_notes_reco_id", "notes", ["reco_id"])

    op.create_table(
        "activities",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column(
            "reco_id",
            sa.Uuid(),
            sa.ForeignKey("recommendations.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "commission_id",
            sa.Uuid(),
            sa.ForeignKey("commissions.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("action_type", sa.String(length=40), nullable=False),
        sa.Column(
            "actor_id",
            sa.Uuid(),
            sa.ForeignKey("employees.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("actor_name", sa.String(length=240), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_activities_reco_created", "activities", ["reco_id", "created_at"])
    op.create_index("ix_activities_commission_id", "activities", ["commission_id"])
    op.create_index("ix_activities_action_type", "activities", ["action_type"])

    op.create_table(
        "feature_suggestions",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("name", sa.String(length=240), nullable=False),
        sa.Column("suggestion", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_feature_suggestions_user_id", "feature_suggestions", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_feature_suggestions_user_id", table_name="feature_suggestions")
    op.drop_table("feature_suggestions")

    op.drop_index("ix_activities_action_type", table_name="activities")
    op.drop_index("ix_activities_commission_id", table_name="activities")
    op.drop_index("ix_activities_reco_created", table_name="activities")
    op.drop_table("activities")

    op.drop_index("ix_notes_reco_id", table_name="notes")
    op.drop_table("notes")

    op.drop_index("ix_commissions_reco_id", table_name="commissions")
    op.drop_table("commissions")

    op.drop_index("ix_recommendations_deal_stage", table_name="recommendations")
    op.drop_index("ix_recommendations_intake_created", table_name="recommendations")
    op.drop_index("ix_recommendations_receiver_email", table_name="recommendations")
    op.drop_index("ix_recommendations_receiver_id", table_name="recommendations")
    op.drop_index("ix_recommendations_prescriber_id", table_name="recommendations")
    op.drop_index("ix_recommendations_created_at", table_name="recommendations")
    op.drop_table("recommendations")

    op.drop_index("ix_employees_manager_id", table_name="employees")
    op.drop_index("ix_employees_email", table_name="employees")
    op.drop_index("ix_employees_user_id", table_name="employees")
    op.drop_table("employees")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
