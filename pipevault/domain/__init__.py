"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  company.py          — customer companies (ghost filtering flags)
  storage_request.py  — storage requests ("projects") and their status machine
  rack.py             — racks with capacity / occupied joints
  trucking.py         — inbound/outbound trucking loads and attached documents
  inventory.py        — individual pipe joints in the yard
  audit.py            — immutable admin audit log (never updated or deleted)
  notification.py     — queued notifications for the delivery worker
  admin.py            — admin principals
  mixins.py           — shared UUIDPrimaryKeyMixin, TimestampMixin
"""

from pipevault.domain.admin import AdminUser
from pipevault.domain.audit import AuditAction, AuditLogEntry
from pipevault.domain.company import Company
from pipevault.domain.inventory import InventoryItem, InventoryStatus
from pipevault.domain.notification import NotificationStatus, NotificationTask, NotificationType
from pipevault.domain.rack import Rack
from pipevault.domain.storage_request import RequestStatus, StorageRequest
from pipevault.domain.trucking import LoadDirection, LoadStatus, TruckingDocument, TruckingLoad

__all__ = [
    "AdminUser",
    "AuditAction",
    "AuditLogEntry",
    "Company",
    "InventoryItem",
    "InventoryStatus",
    "LoadDirection",
    "LoadStatus",
    "NotificationStatus",
    "NotificationTask",
    "NotificationType",
    "Rack",
    "RequestStatus",
    "StorageRequest",
    "TruckingDocument",
    "TruckingLoad",
]
