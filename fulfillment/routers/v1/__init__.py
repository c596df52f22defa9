"""v1 router package — all /api/v1/* endpoints live here.

Files:
  purchases.py  — purchase creation/lookup, payments, documents
  workflows.py  — checklist items, registration branch, stage, progress views

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to fulfillment/services/.
"""
