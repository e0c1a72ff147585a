# backend/homefix/models/user.py
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import RoleName
from ..database import Base


class User(Base):
    """Marketplace account. Credentials are managed by the auth service."""

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name = Column(String(120), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    phone = Column(String(20), nullable=True)
    role = Column(String(20), nullable=False, default=RoleName.CUSTOMER.value, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    technician_profile = relationship("TechnicianProfile", uselist=False, back_populates="user")

    @property
    def is_technician(self) -> bool:
        return self.role == RoleName.TECHNICIAN.value

    @property
    def is_admin(self) -> bool:
        return self.role == RoleName.ADMIN.value
