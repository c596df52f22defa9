"""Services package — all business logic lives here, never in routers.

Files:
  progress.py           — task/stage progress, stage completion, workflow percentage
  customer_view.py      — internal -> customer stage translation and statuses
  financials.py         — payment progress, balance, recording payments
  shipping.py           — shipment tracking updates
  document_linker.py    — document type -> checklist item linking, uploads, deletes
  purchase_workflow.py  — id-based service used by the routers

Rule: routers call the service, the service resolves ids through the repository
      and delegates to the pure modules. No FastAPI imports in services.
"""
