"""Routers package — HTTP endpoint definitions.

Files:
  deps.py  — shared dependencies (settings, request audit metadata, HTTP clients)
  v1/      — versioned API routes (/api/v1/*)
"""
