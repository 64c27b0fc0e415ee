"""Pydantic schemas package.

Folder intent:
  common.py     — CamelModel base, chart points, health/message responses
  candidate.py  — candidates, domain preferences and sync results
  offer.py      — offer requests and responses
  intern.py     — conversion / update DTOs and intern responses
  audit.py      — audit log page
  reports.py    — dashboard and summary shapes
"""
