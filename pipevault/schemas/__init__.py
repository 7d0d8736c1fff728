"""Pydantic schemas package.

Folder intent:
  common.py        — CamelModel base + HealthResponse (all schemas inherit CamelModel)
  company.py       — company summaries and the company -> project -> load tree
  approval.py      — approve / reject / rack adjustment DTOs and results
  notification.py  — notification queue rows for the delivery worker
  audit.py         — audit log rows
"""
