"""Integrations package — clients for third-party HTTP services.

Files:
  sheets.py  — Google Sheets v4 values reader (candidate and domain-preference imports)
  mailer.py  — EmailJS offer email sender

Rule: integrations raise UpstreamError on any transport or HTTP failure and
      know nothing about the database.
"""
