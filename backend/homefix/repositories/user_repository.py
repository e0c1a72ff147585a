# backend/homefix/repositories/user_repository.py
from typing import List

from sqlalchemy.orm import Session

from ..core.enums import RoleName
from ..models.user import User
from .base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_admin_ids(self) -> List[str]:
        rows = (
            self.db.query(User.id)
            .filter(User.role == RoleName.ADMIN.value, User.is_active.is_(True))
            .all()
        )
        return [user_id for (user_id,) in rows]
