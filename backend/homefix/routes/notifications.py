# backend/homefix/routes/notifications.py
from fastapi import APIRouter, Depends, Query

from ..api.dependencies.auth import get_current_actor
from ..api.dependencies.services import get_notification_service
from ..core.actor import Actor
from ..schemas.notification import NotificationListResponse, NotificationResponse
from ..services.notification_service import NotificationService

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    actor: Actor = Depends(get_current_actor),
    service: NotificationService = Depends(get_notification_service),
) -> NotificationListResponse:
    notifications = service.list_for_user(actor.user_id, limit=limit)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        unread_count=sum(1 for n in notifications if not n.is_read),
    )
