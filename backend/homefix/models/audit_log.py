# backend/homefix/models/audit_log.py
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, String
import ulid

from ..database import Base


class AuditLog(Base):
    """Administrative actions against bookings and reviews."""

    __tablename__ = "audit_logs"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    admin_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    action = Column(String(40), nullable=False)
    target_type = Column(String(40), nullable=False)
    target_id = Column(String(26), nullable=False)
    details = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (Index("idx_audit_logs_target", "target_type", "target_id"),)
