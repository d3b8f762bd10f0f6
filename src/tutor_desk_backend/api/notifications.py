'''
API endpoints for lesson reminders, including the live websocket feed.
'''
import json
from typing import Annotated
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Query, Response, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..database import models as db_models
from ..database.engine import get_session_factory
from ..models import notifications as notification_models
from ..services.security import get_current_teacher, resolve_user_from_token
from ..services.notification_service import NotificationService, NotificationPoller
from ..services.profile_service import ProfileService
from ..services.settings_service import SettingsService
from ..services.storage_service import StorageService
from ..services.user_service import UserService
from ..common.logger import log


class NotificationsAPI:
    """
    A class to encapsulate the reminder endpoints.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/notifications",
            tags=["Notifications"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.list_notifications,
                methods=["GET"],
                response_model=notification_models.NotificationSnapshot)

        self.router.add_api_route(
                "/{notification_id}/read",
                self.mark_read,
                methods=["POST"],
                status_code=status.HTTP_204_NO_CONTENT)

        self.router.add_api_websocket_route("/ws", self.notifications_socket)

    async def list_notifications(
        self,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        notification_service: Annotated[NotificationService, Depends(NotificationService)],
        settings_service: Annotated[SettingsService, Depends(SettingsService)]
    ):
        """
        The ten newest sent reminders and the unread count.
        """
        user_settings = await settings_service.get_settings_internal(teacher.user_id)
        return await notification_service.list_recent_for_api(teacher, user_settings.language)

    async def mark_read(
        self,
        notification_id: UUID,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        notification_service: Annotated[NotificationService, Depends(NotificationService)]
    ):
        await notification_service.mark_read_for_api(notification_id, teacher)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    async def notifications_socket(
        self,
        websocket: WebSocket,
        session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
        token: Annotated[str, Query()] = ""
    ):
        """
        Pushes a snapshot after every poll. Accepts
        {"action": "mark_read", "id": "<uuid>"} from the client.
        The poller lives exactly as long as the connection.
        """
        async with session_factory() as session:
            try:
                user = await resolve_user_from_token(token, UserService(session))
            except HTTPException:
                await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
                return
            teacher = await ProfileService(session, StorageService()).get_or_create_profile(user)
            language = (await SettingsService(session).get_settings_internal(user.id)).language
            await session.commit()
        teacher_id = teacher.id

        await websocket.accept()
        log.info(f"Teacher {teacher_id} opened the reminder feed.")

        async def fetch():
            async with session_factory() as poll_session:
                return await NotificationService(poll_session).fetch_recent_internal(teacher_id, language)

        async def push(snapshot: notification_models.NotificationSnapshot):
            await websocket.send_json(snapshot.model_dump(mode="json"))

        async with NotificationPoller(fetch, push) as poller:
            try:
                while True:
                    frame = await websocket.receive_text()
                    try:
                        message = json.loads(frame)
                    except ValueError:
                        log.warning(f"Teacher {teacher_id} sent a malformed reminder frame.")
                        await websocket.send_json({"error": "Invalid message."})
                        continue
                    if not isinstance(message, dict) or message.get("action") != "mark_read":
                        await websocket.send_json({"error": "Unknown action."})
                        continue
                    try:
                        notification_id = UUID(str(message.get("id")))
                        async with session_factory() as write_session:
                            await NotificationService(write_session).mark_read_internal(notification_id, teacher_id)
                            await write_session.commit()
                    except ValueError:
                        await websocket.send_json({"error": "Invalid notification id."})
                        continue
                    except HTTPException as http_exc:
                        await websocket.send_json({"error": http_exc.detail})
                        continue
                    poller.feed.mark_read(notification_id)
                    await push(poller.feed.snapshot())
            except WebSocketDisconnect:
                log.info(f"Teacher {teacher_id} closed the reminder feed.")

# Instantiate the class and export its router
notifications_api = NotificationsAPI()
router = notifications_api.router
