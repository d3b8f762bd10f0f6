'''
Lesson reminders: reading the recent feed, acknowledging items and the
periodic poller that keeps a connected view up to date.

Reminder rows are created by an external job; nothing here inserts them.
'''
import asyncio
from typing import Annotated, Awaitable, Callable, Optional
from uuid import UUID
from fastapi import Depends, HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.notifications import NotificationFeed, build_message
from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import NotificationType
from ..models import notifications as notification_models
from ..common.config import settings
from ..common.logger import log


class NotificationService:
    """
    Service for the reminder feed of a teacher.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    def _to_read_model(self, notification: db_models.Notifications, language: str) -> notification_models.NotificationRead:
        student_name = notification.student.full_name if notification.student else ""
        lesson = notification.lesson
        subject = lesson.subject if lesson else ""
        return notification_models.NotificationRead(
            id=notification.id,
            type=NotificationType(notification.type),
            read=notification.read,
            created_at=notification.created_at,
            student_id=notification.student_id,
            lesson_id=notification.lesson_id,
            student_name=student_name,
            lesson_subject=subject,
            lesson_day=lesson.day_of_week if lesson else None,
            lesson_start_time=lesson.start_time if lesson else None,
            message=build_message(notification.type, student_name, subject, language),
        )

    async def fetch_recent_internal(self, teacher_id: UUID, language: str = "tr") -> list[notification_models.NotificationRead]:
        """The newest sent reminders of the teacher, newest first, capped at the fetch limit."""
        stmt = select(db_models.Notifications).options(
            selectinload(db_models.Notifications.student),
            selectinload(db_models.Notifications.lesson)
        ).filter(
            db_models.Notifications.teacher_id == teacher_id,
            db_models.Notifications.sent.is_(True)
        ).order_by(
            db_models.Notifications.created_at.desc()
        ).limit(settings.NOTIFICATION_FETCH_LIMIT)
        result = await self.db.execute(stmt)
        known_types = {t.value for t in NotificationType}
        items = []
        for notification in result.scalars().all():
            if notification.type not in known_types:
                log.warning(f"Skipping reminder {notification.id} with unknown type {notification.type!r}.")
                continue
            items.append(self._to_read_model(notification, language))
        return items

    async def list_recent_for_api(
        self,
        teacher: db_models.TeacherProfiles,
        language: str = "tr"
    ) -> notification_models.NotificationSnapshot:
        log.info(f"Teacher {teacher.id} fetching reminders.")
        try:
            items = await self.fetch_recent_internal(teacher.id, language)
            return notification_models.NotificationSnapshot(
                notifications=items,
                unread_count=sum(1 for item in items if not item.read),
            )
        except Exception as e:
            log.error(f"Error in list_recent_for_api for teacher {teacher.id}: {e}", exc_info=True)
            raise

    async def mark_read_internal(self, notification_id: UUID, teacher_id: UUID) -> None:
        """Single-row update. Raises 404 when the reminder is not the teacher's."""
        stmt = update(db_models.Notifications).where(
            db_models.Notifications.id == notification_id,
            db_models.Notifications.teacher_id == teacher_id
        ).values(read=True)
        result = await self.db.execute(stmt)
        if result.rowcount == 0:
            log.warning(f"Teacher {teacher_id} tried to mark missing or foreign reminder {notification_id} as read")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found.")

    async def mark_read_for_api(self, notification_id: UUID, teacher: db_models.TeacherProfiles) -> None:
        log.info(f"Teacher {teacher.id} marking reminder {notification_id} as read.")
        try:
            await self.mark_read_internal(notification_id, teacher.id)
        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error in mark_read_for_api for reminder {notification_id}: {e}", exc_info=True)
            raise


class NotificationPoller:
    """
    Periodic fetch bound to the lifetime of one view.

    Every `interval` seconds the poller fetches the feed, applies it to its
    NotificationFeed and hands the resulting snapshot to `on_update`. Use it
    as an async context manager; leaving the block cancels the task, and a
    fetch that completes after that is discarded.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[list[notification_models.NotificationRead]]],
        on_update: Callable[[notification_models.NotificationSnapshot], Awaitable[None]],
        interval: Optional[float] = None,
        feed: Optional[NotificationFeed] = None
    ):
        self._fetch = fetch
        self._on_update = on_update
        self.interval = settings.NOTIFICATION_POLL_SECONDS if interval is None else interval
        self.feed = feed or NotificationFeed()
        self._task: asyncio.Task | None = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def poll_once(self) -> notification_models.NotificationSnapshot | None:
        items = await self._fetch()
        if not self._running:
            log.info("Discarding reminder poll result that arrived after the poller stopped.")
            return None
        play_sound = self.feed.apply_poll(items)
        snapshot = self.feed.snapshot(play_sound)
        await self._on_update(snapshot)
        return snapshot

    async def _run(self):
        while self._running:
            try:
                await self.poll_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                # The next tick is the retry
                log.error(f"Reminder poll failed: {e}", exc_info=True)
            await asyncio.sleep(self.interval)

    def start(self):
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._run())
        log.info(f"Reminder poller started (every {self.interval}s).")

    async def stop(self):
        self._running = False
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        log.info("Reminder poller stopped.")

    async def __aenter__(self) -> "NotificationPoller":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()
