# backend/homefix/routes/technicians.py
from fastapi import APIRouter, Body, Depends

from ..api.dependencies.auth import get_current_actor, require_technician
from ..api.dependencies.services import get_availability_service
from ..core.actor import Actor
from ..schemas.technician import (
    AvailabilityResponse,
    AvailabilityUpdateRequest,
    TechnicianRatingsResponse,
)
from ..services.technician_availability_service import TechnicianAvailabilityService

router = APIRouter(prefix="/api/technicians", tags=["technicians"])


@router.put("/me/status", response_model=AvailabilityResponse)
def update_my_status(
    payload: AvailabilityUpdateRequest = Body(...),
    actor: Actor = Depends(require_technician),
    service: TechnicianAvailabilityService = Depends(get_availability_service),
) -> AvailabilityResponse:
    profile = service.set_online(actor.user_id, payload.is_online)
    return AvailabilityResponse.model_validate(profile)


@router.get("/{technician_id}/ratings", response_model=TechnicianRatingsResponse)
def get_technician_ratings(
    technician_id: str,
    actor: Actor = Depends(get_current_actor),
    service: TechnicianAvailabilityService = Depends(get_availability_service),
) -> TechnicianRatingsResponse:
    return TechnicianRatingsResponse.model_validate(service.get_profile(technician_id))
