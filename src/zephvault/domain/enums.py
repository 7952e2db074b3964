"""Domain enumerations for ZephVault.

All enums use the (str, Enum) pattern to ensure JSON serialization compatibility.
"""

from enum import Enum


class UnitStatus(str, Enum):
    """Occupancy of a rentable unit."""

    VACANT = "vacant"
    OCCUPIED = "occupied"


class ReminderStatus(str, Enum):
    """Whether the reminder job considers a tenant."""

    ACTIVE = "active"
    PAUSED = "paused"
    DISABLED = "disabled"


class PaymentStatus(str, Enum):
    """Derived classification of a tenant's rent timeline."""

    OVERDUE = "overdue"
    URGENT = "urgent"
    DUE_SOON = "due_soon"
    CURRENT = "current"


class NoticeType(str, Enum):
    """Which rent-due threshold triggered a notice."""

    THIRTY_DAY_REMINDER = "30_day_reminder"
    SEVEN_DAY_URGENT = "7_day_urgent"
    ONE_DAY_FINAL = "1_day_final"
    MANUAL_REMINDER = "manual_reminder"


class NotificationStatus(str, Enum):
    """Outcome recorded in the notification log."""

    SENT = "sent"
    FAILED = "failed"


class DocumentCategory(str, Enum):
    """Vault categories offered by the dashboard."""

    GENERAL = "general"
    LITIGATION = "litigation"
    CORPORATE = "corporate"
    LEASE = "lease"
    PROPERTY = "property"


class ChatRole(str, Enum):
    """Role tag on a chat message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
