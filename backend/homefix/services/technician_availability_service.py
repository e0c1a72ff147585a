# backend/homefix/services/technician_availability_service.py
"""
Technician availability and job counters.

``record_completed_job`` is called by the booking engine inside its
completion transaction and only flushes. ``set_online`` is the technician's
own toggle and owns its transaction.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.enums import AvailabilityStatus
from ..core.exceptions import BusinessRuleException, NotFoundException
from ..events.realtime_events import TECHNICIAN_OFFLINE, TECHNICIAN_ONLINE
from ..models.booking import BookingStatus
from ..models.technician import TechnicianProfile
from ..repositories.booking_repository import BookingRepository
from ..repositories.technician_profile_repository import TechnicianProfileRepository
from .base import BaseService
from .side_effects import SideEffects

logger = logging.getLogger(__name__)


class TechnicianAvailabilityService(BaseService):
    def __init__(self, db: Session, side_effects: Optional[SideEffects] = None):
        super().__init__(db)
        self.side_effects = side_effects
        self.profile_repository = TechnicianProfileRepository(db)
        self.booking_repository = BookingRepository(db)

    def record_completed_job(self, technician_id: str) -> TechnicianProfile:
        """Count the job and put the technician back in the pool. Flushes only."""
        self.profile_repository.increment_total_jobs(technician_id)
        profile = self.profile_repository.get_or_create(technician_id)
        self.db.refresh(profile)
        profile.is_online = True
        profile.availability_status = AvailabilityStatus.ONLINE.value
        self.db.flush()
        return profile

    @BaseService.measure_operation("set_online")
    def set_online(self, technician_id: str, is_online: bool) -> TechnicianProfile:
        with self.transaction():
            if not is_online:
                active = self.booking_repository.count_for_technician(
                    technician_id, BookingStatus.IN_PROGRESS
                )
                if active:
                    raise BusinessRuleException(
                        "Cannot go offline while a job is in progress",
                        code="JOB_IN_PROGRESS",
                        details={"in_progress": active},
                    )
            profile = self.profile_repository.get_or_create(technician_id)
            profile.is_online = is_online
            profile.availability_status = (
                AvailabilityStatus.ONLINE.value if is_online else AvailabilityStatus.OFFLINE.value
            )
            self.db.flush()

        logger.info("Technician %s is now %s", technician_id, profile.availability_status)
        if self.side_effects is not None:
            self.side_effects.publish_to_admins(
                TECHNICIAN_ONLINE if is_online else TECHNICIAN_OFFLINE,
                {"technician_id": technician_id, "is_online": is_online},
            )
        return profile

    def get_profile(self, technician_id: str) -> TechnicianProfile:
        profile = self.profile_repository.get_by_user_id(technician_id)
        if profile is None:
            raise NotFoundException(
                "Technician profile not found", details={"technician_id": technician_id}
            )
        return profile
