"""Routers package — HTTP endpoint definitions.

Files:
  dependencies.py  — FastAPI dependencies shared by routers
  v1/              — Versioned API routes (/api/v1/*)
"""
