# backend/homefix/repositories/technician_profile_repository.py
import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.technician import TechnicianProfile
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TechnicianProfileRepository(BaseRepository[TechnicianProfile]):
    def __init__(self, db: Session):
        super().__init__(db, TechnicianProfile)

    def get_by_user_id(self, user_id: str) -> Optional[TechnicianProfile]:
        try:
            return self.db.query(TechnicianProfile).filter(TechnicianProfile.user_id == user_id).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error fetching technician profile for {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to fetch technician profile: {str(e)}")

    def get_or_create(self, user_id: str) -> TechnicianProfile:
        profile = self.get_by_user_id(user_id)
        if profile is None:
            profile = self.create(user_id=user_id)
        return profile

    def increment_total_jobs(self, user_id: str) -> None:
        """Atomic ``total_jobs = total_jobs + 1`` so parallel completions never lose a count."""
        self.get_or_create(user_id)
        try:
            self.db.execute(
                update(TechnicianProfile)
                .where(TechnicianProfile.user_id == user_id)
                .values(total_jobs=TechnicianProfile.total_jobs + 1)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error incrementing total_jobs for {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to increment total jobs: {str(e)}")
