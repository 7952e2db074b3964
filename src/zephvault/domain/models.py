"""SQLAlchemy ORM models for ZephVault.

All models use SQLite-compatible types:
- String(36) for UUID primary keys
- Date / DateTime for calendar values (no TIMESTAMPTZ)
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from zephvault.infra.database import Base


# ---------------------------------------------------------------------------
# Property portfolio
# ---------------------------------------------------------------------------


class Property(Base):
    """A managed building or estate."""

    __tablename__ = "properties"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    address = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=func.now())

    units = relationship("Unit", back_populates="property_ref")


class Unit(Base):
    """Rentable unit inside a property."""

    __tablename__ = "units"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=True, index=True)
    unit_number = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="vacant")  # vacant, occupied
    created_at = Column(DateTime, default=func.now())

    property_ref = relationship("Property", back_populates="units")
    tenants = relationship("Tenant", back_populates="unit_ref")


class Tenant(Base):
    """Occupant of a unit with a yearly rent due date.

    ``days_until_due`` and ``payment_status`` are derived at read time by
    ``services.tenant_service``; they are never stored.
    """

    __tablename__ = "tenants"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    unit_id = Column(String(36), ForeignKey("units.id", ondelete="SET NULL"), nullable=True, index=True)
    # Legacy rows were attached to a property directly, before units existed.
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="SET NULL"), nullable=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone_number = Column(String(50), nullable=True)
    rent_due_date = Column(Date, nullable=False)
    yearly_rent_amount = Column(Numeric(12, 2), nullable=True)
    reminder_status = Column(String(20), nullable=False, default="active")  # active, paused, disabled
    created_at = Column(DateTime, default=func.now())

    unit_ref = relationship("Unit", back_populates="tenants")
    notifications = relationship("NotificationLog", back_populates="tenant_ref")


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class Document(Base):
    """Uploaded legal document. ``ai_summary`` caches the latest analysis."""

    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    file_name = Column(String(500), nullable=False)
    file_url = Column(String(1000), nullable=False)
    category = Column(String(50), nullable=False, default="general")
    unit_id = Column(String(36), ForeignKey("units.id", ondelete="SET NULL"), nullable=True)
    ai_summary = Column(Text, nullable=True)
    uploaded_by = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=func.now())

    unit_ref = relationship("Unit")


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


class NotificationLog(Base):
    """Append-only audit row, one per rent-notice send attempt."""

    __tablename__ = "notification_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=True, index=True)
    # Local wall-clock time; reminder de-duplication compares against date.today().
    sent_at = Column(DateTime, default=datetime.now)
    notice_type = Column(String(30), nullable=True)
    status = Column(String(20), nullable=True)  # sent, failed

    tenant_ref = relationship("Tenant", back_populates="notifications")
