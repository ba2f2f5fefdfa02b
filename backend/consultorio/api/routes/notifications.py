from fastapi import APIRouter, Depends, Query

from ...schemas import MessageOut, NotificationList, UnreadCount
from ..dependencies import Services, get_current_user, get_services

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationList)
def list_notifications(
    unread: bool = Query(default=False),
    limit: int = Query(default=50, ge=1, le=200),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    return {
        "notifications": services.notifications.list(user["id"], unread_only=unread, limit=limit),
        "unreadCount": services.notifications.unread_count(user["id"]),
    }


@router.get("/unread-count", response_model=UnreadCount)
def unread_count(user=Depends(get_current_user), services: Services = Depends(get_services)):
    return {"count": services.notifications.unread_count(user["id"])}


@router.put("/read-all", response_model=MessageOut)
def mark_all_read(user=Depends(get_current_user), services: Services = Depends(get_services)):
    updated = services.notifications.mark_all_read(user["id"])
    return {"message": f"{updated} notificaciones marcadas como leídas"}


@router.put("/{notification_id}/read", response_model=MessageOut)
def mark_read(notification_id: int, user=Depends(get_current_user), services: Services = Depends(get_services)):
    services.notifications.mark_read(notification_id, user["id"])
    return {"message": "Notificación marcada como leída"}
