# backend/homefix/routes/bookings.py
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status

from ..api.dependencies.auth import get_current_actor, require_admin, require_technician
from ..api.dependencies.services import get_booking_service
from ..core.actor import Actor
from ..models.booking import BookingStatus
from ..schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingTransitionRequest,
    TechnicianAssignmentRequest,
    TechnicianStatsResponse,
)
from ..services.booking_service import BookingService

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreate = Body(...),
    actor: Actor = Depends(get_current_actor),
    service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    booking = service.create_booking(actor, payload)
    return BookingResponse.for_viewer(booking, actor.role)


@router.get("", response_model=BookingListResponse)
def list_bookings(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    actor: Actor = Depends(get_current_actor),
    service: BookingService = Depends(get_booking_service),
) -> BookingListResponse:
    bookings = service.list_bookings(actor, status=status_filter, skip=skip, limit=limit)
    return BookingListResponse(
        bookings=[BookingResponse.for_viewer(b, actor.role) for b in bookings],
        count=len(bookings),
    )


# Registered before /{booking_id} so "technician" is not read as an id
@router.get("/technician/stats", response_model=TechnicianStatsResponse)
def get_technician_stats(
    actor: Actor = Depends(require_technician),
    service: BookingService = Depends(get_booking_service),
) -> TechnicianStatsResponse:
    return service.get_technician_stats(actor.user_id)


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: str,
    actor: Actor = Depends(get_current_actor),
    service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    booking = service.get_booking(booking_id, actor)
    return BookingResponse.for_viewer(booking, actor.role)


@router.post("/{booking_id}/transitions", response_model=BookingResponse)
def transition_booking(
    booking_id: str,
    payload: BookingTransitionRequest = Body(...),
    actor: Actor = Depends(get_current_actor),
    service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """
    Move a booking to ``status``.

    ``REJECTED`` is accepted as a target, but the booking comes back as
    ``PENDING`` with no technician.
    """
    booking = service.transition(actor, booking_id, payload.status, payload.to_payload())
    return BookingResponse.for_viewer(booking, actor.role)


@router.put("/{booking_id}/technician", response_model=BookingResponse)
def reassign_technician(
    booking_id: str,
    payload: TechnicianAssignmentRequest = Body(...),
    actor: Actor = Depends(require_admin),
    service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    booking = service.reassign_technician(actor, booking_id, payload.technician_id)
    return BookingResponse.for_viewer(booking, actor.role)
