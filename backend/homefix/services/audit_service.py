# backend/homefix/services/audit_service.py
"""Admin audit trail. Entries are written inside the caller's transaction."""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.enums import AuditAction
from ..models.audit_log import AuditLog
from ..repositories.audit_repository import AuditRepository
from .base import BaseService


class AuditService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = AuditRepository(db)

    def record(
        self,
        *,
        admin_id: str,
        action: AuditAction,
        target_type: str,
        target_id: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> AuditLog:
        entry = self.repository.create(
            admin_id=admin_id,
            action=action.value,
            target_type=target_type,
            target_id=target_id,
            details=details or {},
        )
        self.log_operation("audit", admin_id=admin_id, action=action.value, target_id=target_id)
        return entry

    def list_for_booking(self, booking_id: str) -> List[AuditLog]:
        return self.repository.list_for_target("booking", booking_id)
