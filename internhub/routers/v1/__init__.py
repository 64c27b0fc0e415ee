"""v1 router package — all /api/v1/* endpoints live here.

Files:
  auth.py                — admin login / logout (public)
  respond.py             — offer response links (public)
  offers.py              — offer lifecycle administration
  candidates.py          — candidate listings
  domain_preferences.py  — domain-preference listings and summary
  interns.py             — conversion, edits, summary, profile repair
  audit_logs.py          — audit trail queries
  dashboard.py           — dashboard statistics
  sync.py                — spreadsheet imports and offer-letter reconciliation

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to internhub/services/.
"""
