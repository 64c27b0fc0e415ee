"""SQLAlchemy ORM model for imported candidate applications.

Rows are owned by the spreadsheet importer: they are only ever written by a
sync (upsert keyed on ``email``) and read by the offer and intern services.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from internhub.db.base import Base
from internhub.domain.mixins import TimestampMixin, UTCDateTime


class Candidate(Base, TimestampMixin):
    __tablename__ = "candidates"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    # Form submission time as recorded by the sheet
    submitted_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    full_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    mobile: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    city_state: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    college_name: Mapped[Optional[str]] = mapped_column(String(255), index=True, nullable=True)
    degree: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    branch: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    year_of_study: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    preferred_domain: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    technical_skills: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    prior_experience: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    portfolio_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    motivation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    declaration: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
