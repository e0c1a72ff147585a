# backend/homefix/core/actor.py
from dataclasses import dataclass

from .enums import RoleName


@dataclass(frozen=True)
class Actor:
    """The (user, role) pair performing an operation."""

    user_id: str
    role: RoleName

    @property
    def is_admin(self) -> bool:
        return self.role is RoleName.ADMIN

    @property
    def is_technician(self) -> bool:
        return self.role is RoleName.TECHNICIAN

    @property
    def is_customer(self) -> bool:
        return self.role is RoleName.CUSTOMER
