"""Routers package — HTTP endpoint definitions.

Files:
  deps.py  — shared dependencies (acting admin header)
  v1/      — Versioned API routes (/api/v1/*)
"""
