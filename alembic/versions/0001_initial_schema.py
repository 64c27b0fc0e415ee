"""initial schema

Revision ID: 0001
Revises:
Create Date: 2025-10-19 09:00:00
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import internhub.domain.mixins


revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

UTC = internhub.domain.mixins.UTCDateTime


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", UTC(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", UTC(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "candidates",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("submitted_at", UTC(), nullable=True),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("mobile", sa.String(50), nullable=True),
        sa.Column("city_state", sa.String(255), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("college_name", sa.String(255), nullable=True),
        sa.Column("degree", sa.String(255), nullable=True),
        sa.Column("branch", sa.String(255), nullable=True),
        sa.Column("year_of_study", sa.String(50), nullable=True),
        sa.Column("preferred_domain", sa.String(255), nullable=True),
        sa.Column("technical_skills", sa.JSON(), nullable=False),
        sa.Column("prior_experience", sa.Text(), nullable=True),
        sa.Column("portfolio_url", sa.String(500), nullable=True),
        sa.Column("motivation", sa.Text(), nullable=True),
        sa.Column("declaration", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_candidates_full_name", "candidates", ["full_name"])
    op.create_index("ix_candidates_email", "candidates", ["email"], unique=True)
    op.create_index("ix_candidates_college_name", "candidates", ["college_name"])
    op.create_index("ix_candidates_created_at", "candidates", ["created_at"])

    op.create_table(
        "domain_preferences",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("submitted_at", UTC(), nullable=True),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("contact_number", sa.String(50), nullable=True),
        sa.Column("college_name", sa.String(255), nullable=True),
        sa.Column("year_of_study", sa.String(50), nullable=True),
        sa.Column("domain", sa.String(255), nullable=True),
        sa.Column("skill_level", sa.String(100), nullable=True),
        sa.Column("interest_reason", sa.Text(), nullable=True),
        sa.Column("technologies", sa.JSON(), nullable=False),
        sa.Column("email_address", sa.String(255), nullable=True),
        sa.Column("portfolio_url", sa.String(500), nullable=True),
        *_timestamps(),
    )
    for column in ("submitted_at", "email", "college_name", "domain", "skill_level", "created_at"):
        op.create_index(f"ix_domain_preferences_{column}", "domain_preferences", [column])

    op.create_table(
        "offers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "candidate_id",
            sa.String(36),
            sa.ForeignKey("candidates.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("mobile", sa.String(50), nullable=True),
        sa.Column("token", sa.String(128), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("sent_at", UTC(), nullable=False),
        sa.Column("expires_at", UTC(), nullable=False),
        sa.Column("responded_at", UTC(), nullable=True),
        sa.Column("physical_letter_collected", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_offers_candidate_id", "offers", ["candidate_id"])
    op.create_index("ix_offers_email", "offers", ["email"])
    op.create_index("ix_offers_token", "offers", ["token"], unique=True)
    op.create_index("ix_offers_status", "offers", ["status"])
    op.create_index("ix_offers_sent_at", "offers", ["sent_at"])
    op.create_index("ix_offers_created_at", "offers", ["created_at"])

    op.create_table(
        "interns",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("mobile", sa.String(50), nullable=True),
        sa.Column("college_name", sa.String(255), nullable=True),
        sa.Column("degree", sa.String(255), nullable=True),
        sa.Column("branch", sa.String(255), nullable=True),
        sa.Column("year_of_study", sa.String(50), nullable=True),
        sa.Column("city_state", sa.String(255), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_interns_full_name", "interns", ["full_name"])
    op.create_index("ix_interns_email", "interns", ["email"], unique=True)
    op.create_index("ix_interns_created_at", "interns", ["created_at"])

    op.create_table(
        "intern_profiles",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "intern_id",
            sa.String(36),
            sa.ForeignKey("interns.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("preferred_domain", sa.String(255), nullable=True),
        sa.Column("skill_level", sa.String(100), nullable=True),
        sa.Column("technical_skills", sa.JSON(), nullable=False),
        sa.Column("prior_experience", sa.Text(), nullable=True),
        sa.Column("portfolio_url", sa.String(500), nullable=True),
        sa.Column("offer_status", sa.String(20), nullable=False),
        sa.Column("internship_status", sa.String(20), nullable=False),
        sa.Column("internship_fee_paid", sa.Boolean(), nullable=False),
        sa.Column("fee_paid_at", UTC(), nullable=True),
        sa.Column("offer_letter_issued", sa.Boolean(), nullable=False),
        sa.Column("offer_letter_issued_at", UTC(), nullable=True),
        sa.Column("offer_letter_url", sa.String(500), nullable=True),
        sa.Column("certificate_issued", sa.Boolean(), nullable=False),
        sa.Column("certificate_issued_at", UTC(), nullable=True),
        sa.Column("certificate_url", sa.String(500), nullable=True),
        sa.Column("joined_at", UTC(), nullable=True),
        sa.Column("completed_at", UTC(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_intern_profiles_offer_status", "intern_profiles", ["offer_status"])
    op.create_index("ix_intern_profiles_internship_status", "intern_profiles", ["internship_status"])
    op.create_index("ix_intern_profiles_created_at", "intern_profiles", ["created_at"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(36), nullable=False),
        sa.Column("action", sa.String(20), nullable=False),
        sa.Column("changes", sa.JSON(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("performed_by", sa.String(255), nullable=False),
        sa.Column("ip_address", sa.String(100), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("performed_at", UTC(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_audit_logs_entity_type", "audit_logs", ["entity_type"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_performed_at", "audit_logs", ["performed_at"])
    op.create_index("ix_audit_logs_entity", "audit_logs", ["entity_type", "entity_id", "performed_at"])
    op.create_index("ix_audit_logs_performer", "audit_logs", ["performed_by", "performed_at"])


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("intern_profiles")
    op.drop_table("interns")
    op.drop_table("offers")
    op.drop_table("domain_preferences")
    op.drop_table("candidates")
