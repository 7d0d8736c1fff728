"""v1 router package — all /api/v1/* endpoints live here.

Files:
  companies.py      — company summaries, project trees, company detail
  requests.py       — approve / reject storage requests
  racks.py          — rack listing and manual occupancy adjustment
  notifications.py  — notification queue for the delivery worker
  audit.py          — admin audit log

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to pipevault/services/.
"""
