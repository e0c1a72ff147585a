# backend/homefix/services/booking_transitions.py
"""
Booking transition table.

Each legal move is one cell keyed by ``(current status, target)`` naming the
roles allowed to make it, the precondition checked before anything is
written, and the function that computes the complete set of fields to
persist. Pairs missing from the table are invalid transitions.

REJECTED is a target, not a status: the rejection cell writes PENDING and
clears the technician and pin.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
import secrets
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple

from ..core.actor import Actor
from ..core.config import settings
from ..core.enums import NotificationType, RoleName
from ..core.exceptions import (
    InvalidPinException,
    InvalidTransitionException,
    MissingExtraReasonException,
    MissingProofException,
    ValidationException,
)
from ..models.booking import Booking, BookingStatus


class TransitionTarget(str, Enum):
    ASSIGNED = "ASSIGNED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


@dataclass
class TransitionPayload:
    technician_id: Optional[str] = None
    security_pin: Optional[str] = None
    final_amount: Optional[Decimal] = None
    extra_reason: Optional[str] = None
    technician_note: Optional[str] = None
    part_images: List[str] = field(default_factory=list)
    cancellation_reason: Optional[str] = None


@dataclass
class TransitionContext:
    actor: Actor
    booking: Booking
    payload: TransitionPayload
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


Precondition = Callable[[TransitionContext], None]
FieldBuilder = Callable[[TransitionContext], Dict[str, Any]]


@dataclass(frozen=True)
class TransitionRule:
    current: BookingStatus
    target: TransitionTarget
    allowed_roles: FrozenSet[RoleName]
    build_fields: FieldBuilder
    notification: NotificationType
    title: str
    message: str
    precondition: Optional[Precondition] = None

    def allows(self, actor: Actor) -> bool:
        return actor.role in self.allowed_roles

    def check(self, ctx: TransitionContext) -> None:
        if self.precondition is not None:
            self.precondition(ctx)

    def render_message(self, booking: Booking) -> str:
        return self.message.format(booking_id=booking.id)


def generate_security_pin(length: Optional[int] = None) -> str:
    """Uniformly random numeric pin, zero-padded to ``length`` digits."""
    length = length or settings.security_pin_length
    return str(secrets.randbelow(10**length)).zfill(length)


def round_whole_units(amount: Decimal) -> Decimal:
    return amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def to_money(value: Any) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationException("Amount must be a number", details={"value": str(value)})
    if not amount.is_finite():
        raise ValidationException("Amount must be a number", details={"value": str(value)})
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _clean_images(images: List[str]) -> List[str]:
    return [image.strip() for image in images if image and image.strip()]


# Preconditions


def _require_assignable(ctx: TransitionContext) -> None:
    if not ctx.payload.technician_id:
        raise ValidationException("technician_id is required to assign a booking")
    if ctx.booking.technician_id is not None:
        raise InvalidTransitionException(ctx.booking.status, TransitionTarget.ASSIGNED.value)


def _resolve_final_amount(ctx: TransitionContext) -> Decimal:
    price = to_money(ctx.booking.price if ctx.booking.price is not None else 0)
    if ctx.payload.final_amount is None:
        return price
    amount = to_money(ctx.payload.final_amount)
    if amount < 0:
        raise ValidationException(
            "final_amount cannot be negative", details={"final_amount": str(amount)}
        )
    return amount


def _exceeds_quote(ctx: TransitionContext, final_amount: Decimal) -> bool:
    price = to_money(ctx.booking.price if ctx.booking.price is not None else 0)
    return round_whole_units(final_amount) > round_whole_units(price)


def _check_completion(ctx: TransitionContext) -> None:
    actor, booking, payload = ctx.actor, ctx.booking, ctx.payload

    # Pin: always for technicians, for admins only when one was supplied
    supplied_pin = payload.security_pin.strip() if payload.security_pin is not None else None
    if not actor.is_admin or supplied_pin:
        if not supplied_pin:
            raise InvalidPinException("Happy Pin is required to complete the job")
        if booking.security_pin is None or supplied_pin != booking.security_pin.strip():
            raise InvalidPinException()

    # Proof of work
    if not actor.is_admin and not _clean_images(payload.part_images) and not booking.part_images:
        raise MissingProofException()

    final_amount = _resolve_final_amount(ctx)
    if _exceeds_quote(ctx, final_amount) and not (payload.extra_reason or "").strip():
        raise MissingExtraReasonException(booking.price, final_amount)


# Field builders


def _assign_fields(ctx: TransitionContext) -> Dict[str, Any]:
    return {
        "status": BookingStatus.ASSIGNED.value,
        "technician_id": ctx.payload.technician_id,
        "security_pin": None,
    }


def _accept_fields(ctx: TransitionContext) -> Dict[str, Any]:
    return {
        "status": BookingStatus.ACCEPTED.value,
        "security_pin": ctx.booking.security_pin or generate_security_pin(),
    }


def _reject_fields(ctx: TransitionContext) -> Dict[str, Any]:
    return {
        "status": BookingStatus.PENDING.value,
        "technician_id": None,
        "security_pin": None,
    }


def _start_fields(ctx: TransitionContext) -> Dict[str, Any]:
    return {"status": BookingStatus.IN_PROGRESS.value}


def _complete_fields(ctx: TransitionContext) -> Dict[str, Any]:
    booking, payload = ctx.booking, ctx.payload
    final_amount = _resolve_final_amount(ctx)
    extra_reason = payload.extra_reason.strip() if _exceeds_quote(ctx, final_amount) else None
    note = payload.technician_note.strip() if payload.technician_note else booking.technician_note
    return {
        "status": BookingStatus.COMPLETED.value,
        "final_amount": final_amount,
        "extra_reason": extra_reason,
        "technician_note": note,
        "part_images": list(booking.part_images or []) + _clean_images(payload.part_images),
        "completed_at": ctx.now,
        "security_pin": None,
    }


def _cancel_fields(ctx: TransitionContext) -> Dict[str, Any]:
    reason = ctx.payload.cancellation_reason
    return {
        "status": BookingStatus.CANCELLED.value,
        "security_pin": None,
        "cancelled_at": ctx.now,
        "cancelled_by_id": ctx.actor.user_id,
        "cancellation_reason": reason.strip() if reason and reason.strip() else None,
    }


_ADMIN = frozenset({RoleName.ADMIN})
_TECHNICIAN_OR_ADMIN = frozenset({RoleName.TECHNICIAN, RoleName.ADMIN})
_ANY_PARTY = frozenset({RoleName.CUSTOMER, RoleName.TECHNICIAN, RoleName.ADMIN})
# Once the job is accepted the technician can no longer walk away from it
_CUSTOMER_OR_ADMIN = frozenset({RoleName.CUSTOMER, RoleName.ADMIN})


def _cancel_rule(current: BookingStatus, roles: FrozenSet[RoleName]) -> TransitionRule:
    return TransitionRule(
        current=current,
        target=TransitionTarget.CANCELLED,
        allowed_roles=roles,
        build_fields=_cancel_fields,
        notification=NotificationType.BOOKING_CANCELLED,
        title="Booking Cancelled",
        message="Booking {booking_id} has been cancelled",
    )


_RULES = [
    TransitionRule(
        current=BookingStatus.PENDING,
        target=TransitionTarget.ASSIGNED,
        allowed_roles=_ADMIN,
        precondition=_require_assignable,
        build_fields=_assign_fields,
        notification=NotificationType.BOOKING_ASSIGNED,
        title="New Job Assigned",
        message="Booking {booking_id} has been assigned",
    ),
    TransitionRule(
        current=BookingStatus.ASSIGNED,
        target=TransitionTarget.ACCEPTED,
        allowed_roles=_TECHNICIAN_OR_ADMIN,
        build_fields=_accept_fields,
        notification=NotificationType.BOOKING_ACCEPTED,
        title="Booking Accepted",
        message="Your technician accepted booking {booking_id}",
    ),
    TransitionRule(
        current=BookingStatus.ASSIGNED,
        target=TransitionTarget.REJECTED,
        allowed_roles=_TECHNICIAN_OR_ADMIN,
        build_fields=_reject_fields,
        notification=NotificationType.BOOKING_REJECTED,
        title="Booking Rejected",
        message="The technician declined booking {booking_id}; it is waiting for a new assignment",
    ),
    TransitionRule(
        current=BookingStatus.ACCEPTED,
        target=TransitionTarget.IN_PROGRESS,
        allowed_roles=_TECHNICIAN_OR_ADMIN,
        build_fields=_start_fields,
        notification=NotificationType.BOOKING_IN_PROGRESS,
        title="Job Started",
        message="Work on booking {booking_id} has started",
    ),
    TransitionRule(
        current=BookingStatus.IN_PROGRESS,
        target=TransitionTarget.COMPLETED,
        allowed_roles=_TECHNICIAN_OR_ADMIN,
        precondition=_check_completion,
        build_fields=_complete_fields,
        notification=NotificationType.BOOKING_COMPLETED,
        title="Job Completed",
        message="Booking {booking_id} has been completed",
    ),
    _cancel_rule(BookingStatus.PENDING, _ANY_PARTY),
    _cancel_rule(BookingStatus.ASSIGNED, _ANY_PARTY),
    _cancel_rule(BookingStatus.ACCEPTED, _CUSTOMER_OR_ADMIN),
    _cancel_rule(BookingStatus.IN_PROGRESS, _CUSTOMER_OR_ADMIN),
]

TRANSITIONS: Dict[Tuple[BookingStatus, TransitionTarget], TransitionRule] = {
    (rule.current, rule.target): rule for rule in _RULES
}


def get_rule(current: str, target: TransitionTarget) -> TransitionRule:
    """Look up the cell for ``(current, target)`` or raise InvalidTransition."""
    try:
        rule = TRANSITIONS.get((BookingStatus(current), target))
    except ValueError:
        rule = None
    if rule is None:
        raise InvalidTransitionException(str(current), target.value)
    return rule
