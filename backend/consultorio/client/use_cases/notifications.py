from typing import Any, Dict, Optional

from ..adapter import HttpAdapter
from .base import use_case_errors


async def get_notifications_use_case(fetcher: HttpAdapter, unread_only: bool = False) -> Dict[str, Any]:
    params = {"unread": "true"} if unread_only else None
    with use_case_errors("Error al obtener las notificaciones"):
        return await fetcher.get("/notifications", params)


async def get_unread_count_use_case(fetcher: HttpAdapter) -> int:
    with use_case_errors("Error al obtener las notificaciones"):
        response = await fetcher.get("/notifications/unread-count")
        return response["count"]


async def mark_notifications_read_use_case(fetcher: HttpAdapter, notification_id: Optional[int] = None) -> str:
    """Marca una notificación, o todas si no se indica id."""
    path = f"/notifications/{notification_id}/read" if notification_id else "/notifications/read-all"
    with use_case_errors("Error al marcar las notificaciones"):
        response = await fetcher.put(path)
        return response["message"]
