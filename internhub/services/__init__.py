"""Services package — all business logic lives here, never in routers.

Files:
  offers.py    — offer lifecycle state machine, expiry, physical letters
  interns.py   — candidate → intern conversion, intern edits, profile repair
  audit.py     — change detection, descriptions, best-effort audit recording
  reports.py   — dashboard and summary aggregations
  importer.py  — Google Sheets candidate / domain-preference import

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
