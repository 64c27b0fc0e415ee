"""SQLAlchemy ORM model for internship offers and their lifecycle states."""

from __future__ import annotations

import enum
import secrets
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from internhub.db.base import Base
from internhub.domain.mixins import TimestampMixin, UTCDateTime, utcnow


class OfferStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


class OfferAction(str, enum.Enum):
    ACCEPT = "accept"
    DECLINE = "decline"


# Candidates with no offer row report this pseudo-status
NOT_SENT = "not_sent"


def generate_token() -> str:
    """64 hex chars from 32 random bytes; used in the public response link."""
    return secrets.token_hex(32)


class Offer(Base, TimestampMixin):
    __tablename__ = "offers"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    candidate_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False, index=True
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    mobile: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    token: Mapped[str] = mapped_column(
        String(128), nullable=False, unique=True, index=True, default=generate_token
    )
    # "pending" | "accepted" | "declined" | "expired"
    status: Mapped[str] = mapped_column(
        String(20), default=OfferStatus.PENDING.value, nullable=False, index=True
    )

    sent_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, nullable=False, index=True)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    responded_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    # Manual confirmation of a signed paper offer letter
    physical_letter_collected: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
