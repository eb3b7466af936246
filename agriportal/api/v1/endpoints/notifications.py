import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status

from agriportal.core.deps import DBSessionDep, CurrentUser, BrokerDep, require_admin, user_from_token
from agriportal.repositories.user_repository import UserRepository
from agriportal.schemas.notification import NotificationOut, SystemNotificationCreate, UnreadCount
from agriportal.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter()

NOTIFICATION_NOT_FOUND = "Không tìm thấy thông báo"


@router.get("", response_model=list[NotificationOut])
async def list_notifications(
    db: DBSessionDep,
    user: CurrentUser,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    unread_only: bool = Query(False),
):
    return await NotificationService(db).get_notifications(user, limit=limit, offset=offset, unread_only=unread_only)


@router.get("/unread-count", response_model=UnreadCount)
async def unread_count(db: DBSessionDep, user: CurrentUser):
    return UnreadCount(count=await NotificationService(db).get_unread_count(user))


@router.post("", response_model=NotificationOut, status_code=status.HTTP_201_CREATED)
async def send_system_notification(
    db: DBSessionDep,
    broker: BrokerDep,
    data: SystemNotificationCreate,
    admin=Depends(require_admin()),
):
    """Admin only - send a notification to one user"""
    if not await UserRepository(db).get_by_id(data.user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Không tìm thấy người dùng")
    return await NotificationService(db, broker).create_notification(
        user_id=data.user_id,
        type=data.type,
        title=data.title,
        message=data.message,
        link=data.link,
        actor_id=admin.id,
    )


@router.post("/read-all")
async def mark_all_read(db: DBSessionDep, user: CurrentUser):
    updated = await NotificationService(db).mark_all_as_read(user)
    return {"updated": updated}


@router.delete("/read")
async def delete_read(db: DBSessionDep, user: CurrentUser):
    deleted = await NotificationService(db).delete_all_read(user)
    return {"deleted": deleted}


@router.patch("/{notification_id}/read", response_model=NotificationOut)
async def mark_read(db: DBSessionDep, notification_id: int, user: CurrentUser):
    notification = await NotificationService(db).mark_as_read(user, notification_id)
    if not notification:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOTIFICATION_NOT_FOUND)
    return notification


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(db: DBSessionDep, notification_id: int, user: CurrentUser):
    if not await NotificationService(db).delete_notification(user, notification_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOTIFICATION_NOT_FOUND)


@router.websocket("/ws")
async def notifications_ws(websocket: WebSocket, db: DBSessionDep, broker: BrokerDep, token: str = Query("")):
    """Push each new notification of the authenticated user as a JSON message"""
    user = await user_from_token(db, token)
    if user is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    # Subscribe before accepting so nothing published after the handshake is missed
    subscription = broker.subscribe(user.id)

    async def pump():
        async for payload in subscription:
            await websocket.send_json(payload)

    sender = None
    try:
        await websocket.accept()
        sender = asyncio.create_task(pump())
        while True:
            # Client messages are ignored; receiving detects the disconnect
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("Notification socket closed for user %s", user.id)
    finally:
        subscription.unsubscribe()
        if sender is not None:
            sender.cancel()
