# backend/homefix/routes/reviews.py
from fastapi import APIRouter, Body, Depends, Query, Response, status

from ..api.dependencies.auth import get_current_actor, require_admin, require_customer
from ..api.dependencies.services import get_review_service
from ..core.actor import Actor
from ..schemas.review import (
    ReviewCreateRequest,
    ReviewListResponse,
    ReviewResponse,
    ReviewUpdateRequest,
)
from ..services.review_service import ReviewService

router = APIRouter(prefix="/api/reviews", tags=["reviews"])


@router.post(
    "/bookings/{booking_id}", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED
)
def create_review(
    booking_id: str,
    payload: ReviewCreateRequest = Body(...),
    actor: Actor = Depends(require_customer),
    service: ReviewService = Depends(get_review_service),
) -> ReviewResponse:
    review = service.create_review(actor.user_id, booking_id, payload)
    return ReviewResponse.model_validate(review)


@router.patch("/bookings/{booking_id}", response_model=ReviewResponse)
def update_review(
    booking_id: str,
    payload: ReviewUpdateRequest = Body(...),
    actor: Actor = Depends(require_customer),
    service: ReviewService = Depends(get_review_service),
) -> ReviewResponse:
    review = service.update_review(actor.user_id, booking_id, payload)
    return ReviewResponse.model_validate(review)


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_review(
    review_id: str,
    actor: Actor = Depends(require_admin),
    service: ReviewService = Depends(get_review_service),
) -> Response:
    service.delete_review(actor, review_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("", response_model=ReviewListResponse)
def list_reviews(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    actor: Actor = Depends(require_admin),
    service: ReviewService = Depends(get_review_service),
) -> ReviewListResponse:
    reviews = service.list_all(actor, skip=skip, limit=limit)
    return ReviewListResponse(
        reviews=[ReviewResponse.model_validate(r) for r in reviews], count=len(reviews)
    )


@router.get("/technicians/{technician_id}", response_model=ReviewListResponse)
def list_technician_reviews(
    technician_id: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    actor: Actor = Depends(get_current_actor),
    service: ReviewService = Depends(get_review_service),
) -> ReviewListResponse:
    reviews = service.list_for_technician(technician_id, skip=skip, limit=limit)
    return ReviewListResponse(
        reviews=[ReviewResponse.model_validate(r) for r in reviews], count=len(reviews)
    )
