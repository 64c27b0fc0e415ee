"""SQLAlchemy ORM model for domain-preference survey responses.

Imported from a second spreadsheet and linked to candidates only by email.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from internhub.db.base import Base
from internhub.domain.mixins import TimestampMixin, UTCDateTime


class DomainPreference(Base, TimestampMixin):
    __tablename__ = "domain_preferences"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    submitted_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), index=True, nullable=True)

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Join key with candidates (not a foreign key)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    contact_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    college_name: Mapped[Optional[str]] = mapped_column(String(255), index=True, nullable=True)
    year_of_study: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    domain: Mapped[Optional[str]] = mapped_column(String(255), index=True, nullable=True)
    skill_level: Mapped[Optional[str]] = mapped_column(String(100), index=True, nullable=True)
    interest_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    technologies: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    email_address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    portfolio_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
