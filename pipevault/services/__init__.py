"""Services package — all business logic lives here, never in routers.

Files:
  aggregation.py   — company summaries and the nested project tree (read only)
  approval.py      — atomic approve / reject and manual rack adjustments
  workflow.py      — derived workflow state / progress for a project (pure functions)
  notification.py  — notification queue contract for the delivery worker
  audit.py         — audit log listing
  rack.py          — rack listing for the rack selector

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
