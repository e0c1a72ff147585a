# backend/homefix/repositories/audit_repository.py
from typing import List

from sqlalchemy.orm import Session

from ..models.audit_log import AuditLog
from .base_repository import BaseRepository


class AuditRepository(BaseRepository[AuditLog]):
    def __init__(self, db: Session):
        super().__init__(db, AuditLog)

    def list_for_target(self, target_type: str, target_id: str) -> List[AuditLog]:
        return (
            self.db.query(AuditLog)
            .filter(AuditLog.target_type == target_type, AuditLog.target_id == target_id)
            .order_by(AuditLog.created_at.asc())
            .all()
        )
