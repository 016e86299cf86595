from enum import Enum


class LogType(str, Enum):
    created = "created"
    updated = "updated"
    deleted = "deleted"
    restored = "restored"
    moved = "moved"
    # размещения
    added = "added"
    removed = "removed"
    quantity_adjusted = "quantity_adjusted"


class EntityType(str, Enum):
    warehouse = "warehouse"
    zone = "zone"
    rack = "rack"
    shelf = "shelf"
    placement = "placement"


class PutAwayState(str, Enum):
    none = "none"
    inbound = "inbound"
    outbound = "outbound"


class MovementType(str, Enum):
    transfer = "transfer"
    inbound = "inbound"
    outbound = "outbound"
    adjustment = "adjustment"


class GRNStatus(str, Enum):
    draft = "draft"
    completed = "completed"
    cancelled = "cancelled"


class MemberRole(str, Enum):
    owner = "owner"
    admin = "admin"
    staff = "staff"
    vendor = "vendor"
