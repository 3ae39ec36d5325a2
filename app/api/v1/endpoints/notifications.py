from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.db.dependencies import get_db, get_tenant_id
from app.schemas.notifications import NotificationResponse, NotificationListResponse
from app.services.notifications import NotificationService

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    status: Optional[str] = None,
    notification_type: Optional[str] = None,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """List notifications with filters."""
    service = NotificationService(db)

    notifications = service.get_notifications(
        tenant_id,
        status=status,
        notification_type=notification_type,
        limit=limit,
        offset=offset,
    )

    return NotificationListResponse(
        items=[NotificationResponse.model_validate(n) for n in notifications],
        total=service.count(tenant_id, status=status, notification_type=notification_type),
        unread_count=service.get_unread_count(tenant_id),
    )


@router.post("/{notification_id}/read", response_model=NotificationResponse)
def mark_notification_read(
    notification_id: int,
    tenant_id: int = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """Mark a notification as read."""
    service = NotificationService(db)
    notification = service.mark_as_read(tenant_id, notification_id)

    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    return NotificationResponse.model_validate(notification)
