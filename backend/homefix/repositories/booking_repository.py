# backend/homefix/repositories/booking_repository.py
"""
Booking data access.

The lifecycle engine writes bookings only through ``apply_fields``: a single
field-level UPDATE guarded by the version column. It does not load and
re-validate the whole row, so legacy rows with incomplete data can still be
transitioned.
"""

from decimal import Decimal
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.booking import Booking, BookingStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

# Technicians triaging open work see the earliest job first
_EARLIEST_FIRST_STATUSES = {BookingStatus.PENDING.value, BookingStatus.ASSIGNED.value}


class BookingRepository(BaseRepository[Booking]):
    """Data access for `Booking`."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def apply_fields(self, booking_id: str, expected_version: int, fields: Dict[str, Any]) -> bool:
        """
        Write ``fields`` if the row still carries ``expected_version``.

        Returns False when another writer bumped the version first.
        """
        values = dict(fields)
        values["version"] = expected_version + 1
        try:
            result = self.db.execute(
                update(Booking)
                .where(Booking.id == booking_id, Booking.version == expected_version)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error applying fields to booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to update booking: {str(e)}")
        return result.rowcount == 1

    def reload(self, booking_id: str) -> Optional[Booking]:
        """Re-read a booking from the database, discarding any cached state."""
        booking = self.get_by_id(booking_id)
        if booking is not None:
            self.db.refresh(booking)
        return booking

    def list_bookings(
        self,
        *,
        customer_id: Optional[str] = None,
        technician_id: Optional[str] = None,
        status: Optional[str] = None,
        earliest_first: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Booking]:
        try:
            query = self.db.query(Booking).filter_by(
                **self._filters(customer_id=customer_id, technician_id=technician_id, status=status)
            )
            if earliest_first:
                query = query.order_by(Booking.scheduled_at.asc())
            else:
                query = query.order_by(Booking.created_at.desc())
            return query.offset(skip).limit(limit).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing bookings: {str(e)}")
            raise RepositoryException(f"Failed to list bookings: {str(e)}")

    @staticmethod
    def sorts_earliest_first(status: Optional[str]) -> bool:
        return status in _EARLIEST_FIRST_STATUSES

    def count_for_technician(self, technician_id: str, status: BookingStatus) -> int:
        return self.count(technician_id=technician_id, status=status.value)

    def get_technician_completed_stats(self, technician_id: str) -> Tuple[int, Decimal]:
        """Return (completed job count, earnings) for a technician."""
        try:
            row = (
                self.db.query(
                    func.count(Booking.id),
                    func.coalesce(func.sum(func.coalesce(Booking.final_amount, Booking.price)), 0),
                )
                .filter(
                    Booking.technician_id == technician_id,
                    Booking.status == BookingStatus.COMPLETED.value,
                )
                .one()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error aggregating technician stats: {str(e)}")
            raise RepositoryException(f"Failed to aggregate technician stats: {str(e)}")
        count, earnings = row
        return int(count or 0), Decimal(str(earnings or 0))
