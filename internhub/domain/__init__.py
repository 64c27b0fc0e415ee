"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  candidate.py          — Applications imported from the candidates sheet
  domain_preference.py  — Domain-preference survey rows (joined to candidates by email)
  offer.py              — Offers and their pending/accepted/declined/expired lifecycle
  intern.py             — Intern identity + 1:1 InternProfile status record
  audit.py              — Append-only intern audit trail (never updated or deleted)
  mixins.py             — UTCDateTime column type, TimestampMixin
"""

from internhub.domain.audit import AuditLog
from internhub.domain.candidate import Candidate
from internhub.domain.domain_preference import DomainPreference
from internhub.domain.intern import Intern, InternProfile
from internhub.domain.offer import Offer

__all__ = [
    "AuditLog",
    "Candidate",
    "DomainPreference",
    "Intern",
    "InternProfile",
    "Offer",
]
