"""Pydantic schemas package.

Folder intent:
  common.py    — CamelModel base + HealthResponse (all request schemas inherit CamelModel)
  purchase.py  — purchase/workflow request DTOs and the response models that
                 are not domain models themselves
"""
