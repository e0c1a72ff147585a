# backend/homefix/services/booking_service.py
"""
Booking Lifecycle Engine.

Every status change goes through ``transition``:

1. take the per-booking Redis mutex (fail-open)
2. load the booking and check the actor is a party to it
3. look up the transition cell and check role and precondition
4. write the complete field set with one version-checked UPDATE
5. commit, re-read, then notify and publish

Notification and realtime delivery run after the commit. A failure there is
logged and never undoes the transition.
"""

from datetime import datetime, timezone
from decimal import Decimal
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.actor import Actor
from ..core.enums import AuditAction, NotificationType, RoleName
from ..core.exceptions import (
    DomainException,
    ForbiddenException,
    InvalidTransitionException,
    NotFoundException,
    RepositoryException,
    StaleStateException,
    ValidationException,
)
from ..core.locks import booking_lock_sync
from ..events.realtime_events import BOOKING_CREATED, BOOKING_REJECTED, BOOKING_UPDATED
from ..models.booking import Booking, BookingStatus
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.booking_repository import BookingRepository
from ..repositories.catalog_repository import CatalogRepository
from ..repositories.technician_profile_repository import TechnicianProfileRepository
from ..repositories.user_repository import UserRepository
from ..schemas.booking import BookingCreate, BookingResponse, TechnicianStatsResponse
from .audit_service import AuditService
from .base import BaseService
from .booking_transitions import (
    TransitionContext,
    TransitionPayload,
    TransitionRule,
    TransitionTarget,
    get_rule,
)
from .side_effects import SideEffects
from .technician_availability_service import TechnicianAvailabilityService

logger = logging.getLogger(__name__)


class BookingService(BaseService):
    """Creates bookings and drives them through their lifecycle."""

    def __init__(self, db: Session, side_effects: SideEffects):
        super().__init__(db)
        self.side_effects = side_effects
        self.repository = BookingRepository(db)
        self.catalog_repository = CatalogRepository(db)
        self.user_repository = UserRepository(db)
        self.profile_repository = TechnicianProfileRepository(db)
        self.availability = TechnicianAvailabilityService(db)
        self.audit = AuditService(db)

    # Creation

    @BaseService.measure_operation("create_booking")
    def create_booking(self, actor: Actor, data: BookingCreate) -> Booking:
        """
        Create a PENDING booking with no technician.

        The price comes from the catalog service when one is given, else
        from the category.
        """
        with self.transaction():
            category_id, price = self._resolve_catalog(actor, data)
            booking = self.repository.create(
                customer_id=actor.user_id,
                category_id=category_id,
                service_id=data.service_id,
                status=BookingStatus.PENDING.value,
                price=price,
                scheduled_at=data.scheduled_at,
                notes=data.notes,
                address=data.address,
                latitude=data.latitude,
                longitude=data.longitude,
                part_images=[],
            )
            booking_id = booking.id

        booking = self.repository.reload(booking_id)
        self.log_operation("create_booking", booking_id=booking_id, customer_id=actor.user_id)

        self.side_effects.notify_many(
            self._admin_ids(),
            NotificationType.BOOKING_REQUEST.value,
            "New Booking Request",
            f"Booking {booking_id} is waiting for a technician",
            {"booking_id": booking_id},
        )
        payload = BookingResponse.for_viewer(booking, RoleName.ADMIN).model_dump(mode="json")
        self.side_effects.publish_to_admins(BOOKING_CREATED, payload)
        self.side_effects.publish_to_user(booking.customer_id, BOOKING_CREATED, payload)
        return booking

    def _resolve_catalog(self, actor: Actor, data: BookingCreate) -> tuple[str, Decimal]:
        if data.service_id:
            service = self.catalog_repository.get_service(data.service_id)
            if service is None or not service.is_active:
                raise NotFoundException(
                    "Service not found or inactive", details={"service_id": data.service_id}
                )
            if data.category_id and data.category_id != service.category_id:
                raise ValidationException("Service does not belong to the given category")
            if service.technician_id and service.technician_id == actor.user_id:
                raise ValidationException("You cannot book your own service")
            return service.category_id, Decimal(service.price)

        category = self.catalog_repository.get_category(data.category_id)
        if category is None or not category.is_active:
            raise NotFoundException(
                "Category not found or inactive", details={"category_id": data.category_id}
            )
        return category.id, Decimal(category.price)

    # Reads

    def get_booking(self, booking_id: str, actor: Actor) -> Booking:
        """Load a booking the actor may see. Render it with BookingResponse.for_viewer."""
        booking = self._load(booking_id)
        self._ensure_party(actor, booking)
        return booking

    def list_bookings(
        self,
        actor: Actor,
        status: Optional[BookingStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Booking]:
        status_value = status.value if status else None
        if actor.is_admin:
            return self.repository.list_bookings(status=status_value, skip=skip, limit=limit)
        if actor.is_technician:
            return self.repository.list_bookings(
                technician_id=actor.user_id,
                status=status_value,
                earliest_first=self.repository.sorts_earliest_first(status_value),
                skip=skip,
                limit=limit,
            )
        return self.repository.list_bookings(
            customer_id=actor.user_id, status=status_value, skip=skip, limit=limit
        )

    def get_technician_stats(self, technician_id: str) -> TechnicianStatsResponse:
        completed, earnings = self.repository.get_technician_completed_stats(technician_id)
        profile = self.profile_repository.get_by_user_id(technician_id)
        return TechnicianStatsResponse(
            technician_id=technician_id,
            completed_jobs=completed,
            total_earnings=earnings,
            total_jobs=profile.total_jobs if profile else 0,
            avg_rating=profile.avg_rating if profile else 0.0,
            review_count=profile.review_count if profile else 0,
        )

    # Lifecycle

    @BaseService.measure_operation("transition")
    def transition(
        self,
        actor: Actor,
        booking_id: str,
        target: TransitionTarget,
        payload: Optional[TransitionPayload] = None,
    ) -> Booking:
        payload = payload or TransitionPayload()
        try:
            booking, rule, previous_technician_id = self._apply_transition(
                actor, booking_id, target, payload
            )
        except DomainException as e:
            prometheus_metrics.record_transition(target.value, e.code)
            raise
        prometheus_metrics.record_transition(target.value, "success")

        self.logger.info(
            f"Booking {booking_id} {target.value} by {actor.role.value} {actor.user_id}; "
            f"stored status {booking.status}"
        )
        self._announce(rule, actor, booking, previous_technician_id)
        return booking

    def _apply_transition(
        self,
        actor: Actor,
        booking_id: str,
        target: TransitionTarget,
        payload: TransitionPayload,
    ) -> tuple[Booking, TransitionRule, Optional[str]]:
        with booking_lock_sync(booking_id) as acquired:
            if not acquired:
                raise StaleStateException(booking_id)

            with self.transaction():
                booking = self._load(booking_id)
                self._ensure_party(actor, booking)

                rule = get_rule(booking.status, target)
                if not rule.allows(actor):
                    raise ForbiddenException(
                        f"A {actor.role.value.lower()} cannot move a {booking.status} booking to {target.value}",
                        details={"current_status": booking.status, "target_status": target.value},
                    )

                ctx = TransitionContext(actor=actor, booking=booking, payload=payload)
                rule.check(ctx)
                if target is TransitionTarget.ASSIGNED:
                    self._require_technician(payload.technician_id)

                fields = rule.build_fields(ctx)
                previous_technician_id = booking.technician_id
                self._write(booking, fields)

                if target is TransitionTarget.COMPLETED and previous_technician_id:
                    self.availability.record_completed_job(previous_technician_id)
                if target is TransitionTarget.ASSIGNED:
                    self.profile_repository.get_or_create(payload.technician_id)
                if target is TransitionTarget.CANCELLED and actor.is_admin:
                    self.audit.record(
                        admin_id=actor.user_id,
                        action=AuditAction.BOOKING_CANCEL,
                        target_type="booking",
                        target_id=booking_id,
                        details={
                            "previous_status": rule.current.value,
                            "reason": fields.get("cancellation_reason"),
                        },
                    )

        return self.repository.reload(booking_id), rule, previous_technician_id

    @BaseService.measure_operation("reassign_technician")
    def reassign_technician(
        self, actor: Actor, booking_id: str, technician_id: Optional[str]
    ) -> Booking:
        """
        Admin override: move an open booking to another technician, or back
        to the pool when ``technician_id`` is None.
        """
        if not actor.is_admin:
            raise ForbiddenException("Only administrators can reassign bookings")

        with booking_lock_sync(booking_id) as acquired:
            if not acquired:
                raise StaleStateException(booking_id)

            with self.transaction():
                booking = self._load(booking_id)
                if booking.status_enum.is_terminal:
                    raise InvalidTransitionException(
                        booking.status,
                        TransitionTarget.ASSIGNED.value if technician_id else BookingStatus.PENDING.value,
                    )
                previous_technician_id = booking.technician_id
                if technician_id and technician_id == previous_technician_id:
                    raise ValidationException("Booking is already assigned to this technician")
                if not technician_id and previous_technician_id is None:
                    raise ValidationException("Booking has no technician to remove")

                if technician_id:
                    self._require_technician(technician_id)
                    self.profile_repository.get_or_create(technician_id)
                    fields: Dict[str, Any] = {
                        "status": BookingStatus.ASSIGNED.value,
                        "technician_id": technician_id,
                        "security_pin": None,
                    }
                    action = AuditAction.BOOKING_ASSIGN
                else:
                    fields = {
                        "status": BookingStatus.PENDING.value,
                        "technician_id": None,
                        "security_pin": None,
                    }
                    action = AuditAction.BOOKING_UNASSIGN

                previous_status = booking.status
                self._write(booking, fields)
                self.audit.record(
                    admin_id=actor.user_id,
                    action=action,
                    target_type="booking",
                    target_id=booking_id,
                    details={
                        "previous_status": previous_status,
                        "previous_technician_id": previous_technician_id,
                        "technician_id": technician_id,
                    },
                )

        booking = self.repository.reload(booking_id)
        self.logger.info(
            f"Booking {booking_id} technician {previous_technician_id} -> {technician_id} by admin {actor.user_id}"
        )

        data = {"booking_id": booking_id, "status": booking.status}
        if previous_technician_id:
            self.side_effects.notify(
                previous_technician_id,
                NotificationType.BOOKING_REMOVED.value,
                "Job Removed",
                f"You have been removed from booking {booking_id}",
                data,
            )
        if technician_id:
            self.side_effects.notify(
                technician_id,
                NotificationType.BOOKING_ASSIGNED.value,
                "New Job Assigned",
                f"Booking {booking_id} has been assigned to you",
                data,
            )
        self._publish(BOOKING_UPDATED, booking, previous_technician_id)
        return booking

    # Helpers

    def _load(self, booking_id: str) -> Booking:
        booking = self.repository.get_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found", details={"booking_id": booking_id})
        return booking

    def _write(self, booking: Booking, fields: Dict[str, Any]) -> None:
        if not self.repository.apply_fields(booking.id, booking.version, fields):
            raise StaleStateException(booking.id)

    @staticmethod
    def _ensure_party(actor: Actor, booking: Booking) -> None:
        if actor.is_admin:
            return
        owner = booking.technician_id if actor.is_technician else booking.customer_id
        if owner != actor.user_id:
            raise ForbiddenException(
                "You do not have access to this booking", details={"booking_id": booking.id}
            )

    def _require_technician(self, technician_id: Optional[str]) -> User:
        if not technician_id:
            raise ValidationException("technician_id is required")
        user = self.user_repository.get_by_id(technician_id)
        if user is None:
            raise NotFoundException("Technician not found", details={"technician_id": technician_id})
        if not user.is_technician or not user.is_active:
            raise ValidationException(
                "User is not an active technician", details={"technician_id": technician_id}
            )
        return user

    def _admin_ids(self) -> List[str]:
        try:
            return self.user_repository.get_admin_ids()
        except RepositoryException as e:
            prometheus_metrics.record_side_effect_failure("notification")
            logger.error(f"Could not load admin recipients: {str(e)}")
            return []

    def _announce(
        self,
        rule: TransitionRule,
        actor: Actor,
        booking: Booking,
        previous_technician_id: Optional[str],
    ) -> None:
        technician_id = booking.technician_id or previous_technician_id
        parties = [
            party_id
            for party_id in (booking.customer_id, technician_id)
            if party_id and party_id != actor.user_id
        ]
        self.side_effects.notify_many(
            parties + self._admin_ids(),
            rule.notification.value,
            rule.title,
            rule.render_message(booking),
            {
                "booking_id": booking.id,
                "status": booking.status,
                "transition": rule.target.value,
                "at": datetime.now(timezone.utc).isoformat(),
            },
        )

        self._publish(BOOKING_UPDATED, booking, previous_technician_id)
        if rule.target is TransitionTarget.REJECTED:
            self._publish(BOOKING_REJECTED, booking, previous_technician_id)

    def _publish(self, event_name: str, booking: Booking, previous_technician_id: Optional[str]) -> None:
        full = BookingResponse.for_viewer(booking, RoleName.ADMIN).model_dump(mode="json")
        redacted = BookingResponse.for_viewer(booking, RoleName.TECHNICIAN).model_dump(mode="json")
        self.side_effects.publish_to_admins(event_name, full)
        self.side_effects.publish_to_user(booking.customer_id, event_name, full)
        technician_ids = {booking.technician_id, previous_technician_id} - {None}
        for technician_id in sorted(technician_ids):
            self.side_effects.publish_to_user(technician_id, event_name, redacted)
