"""SQLAlchemy ORM models for interns.

The intern row holds personal details only. Workflow and tracking state
lives on the 1:1 ``InternProfile`` so the two can evolve independently.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from internhub.db.base import Base
from internhub.domain.mixins import TimestampMixin, UTCDateTime


class ProfileOfferStatus(str, enum.Enum):
    NOT_SENT = "not_sent"
    SENT = "sent"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


class InternshipStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    COMPLETED = "completed"
    TERMINATED = "terminated"


class Intern(Base, TimestampMixin):
    __tablename__ = "interns"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    full_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    mobile: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    college_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    degree: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    branch: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    year_of_study: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    city_state: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class InternProfile(Base, TimestampMixin):
    __tablename__ = "intern_profiles"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    intern_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("interns.id", ondelete="CASCADE"), nullable=False, unique=True
    )

    preferred_domain: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    skill_level: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    technical_skills: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    prior_experience: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    portfolio_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Mirror of the offer status at conversion time; may drift from offers.status
    offer_status: Mapped[str] = mapped_column(
        String(20), default=ProfileOfferStatus.NOT_SENT.value, nullable=False, index=True
    )
    internship_status: Mapped[str] = mapped_column(
        String(20), default=InternshipStatus.NOT_STARTED.value, nullable=False, index=True
    )

    internship_fee_paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    fee_paid_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    offer_letter_issued: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    offer_letter_issued_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    offer_letter_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    certificate_issued: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    certificate_issued_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    certificate_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    joined_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
