'''
Unit tests for the client-side reminder feed and the message text.
'''
import pytest
from datetime import datetime, time, timezone
from uuid import uuid4

from src.tutor_desk_backend.core.notifications import NotificationFeed, build_message
from src.tutor_desk_backend.database.db_enums import NotificationType
from src.tutor_desk_backend.models.notifications import NotificationRead


def make_item(read=False, notification_id=None) -> NotificationRead:
    return NotificationRead(
        id=notification_id or uuid4(),
        type=NotificationType.ONE_HOUR,
        read=read,
        created_at=datetime(2025, 3, 15, 9, 0, tzinfo=timezone.utc),
        student_id=uuid4(),
        lesson_id=uuid4(),
        student_name="Ayşe Demir",
        lesson_subject="Fizik",
        lesson_day="Monday",
        lesson_start_time=time(10, 0),
        message="...",
    )


class TestNotificationFeed:

    def test_sound_cue_fires_once_per_new_unread(self):
        print("\n--- Testing the reminder sound cue ---")
        feed = NotificationFeed()
        first, second = make_item(), make_item()

        assert feed.apply_poll([first, second]) is True
        assert feed.unread_count == 2

        # Same unread ids again: nothing new
        assert feed.apply_poll([first, second]) is False

        third = make_item()
        assert feed.apply_poll([first, second, third]) is True
        assert feed.unread_count == 3

    def test_seen_ids_are_forgotten_once_they_leave_the_feed(self):
        feed = NotificationFeed()
        for _ in range(50):
            feed.apply_poll([make_item(), make_item()])
        assert len(feed._seen_unread_ids) == 2

        # An id still in the feed, now read, stays remembered
        kept = make_item()
        feed.apply_poll([kept])
        kept_read = make_item(read=True, notification_id=kept.id)
        feed.apply_poll([kept_read])
        assert feed._seen_unread_ids == {kept.id}
        assert feed.apply_poll([make_item(notification_id=kept.id)]) is False

    def test_read_items_never_trigger_sound(self):
        feed = NotificationFeed()
        assert feed.apply_poll([make_item(read=True)]) is False
        assert feed.unread_count == 0

    def test_mark_read_never_goes_negative(self):
        feed = NotificationFeed()
        item = make_item()
        feed.apply_poll([item])

        assert feed.mark_read(item.id) is True
        assert feed.unread_count == 0
        assert feed.mark_read(item.id) is False
        assert feed.mark_read(uuid4()) is False
        assert feed.unread_count == 0

    def test_snapshot(self):
        feed = NotificationFeed()
        feed.apply_poll([make_item(), make_item(read=True)])
        snapshot = feed.snapshot(play_sound=True)
        assert snapshot.unread_count == 1
        assert len(snapshot.notifications) == 2
        assert snapshot.play_sound is True


class TestBuildMessage:

    def test_turkish_message(self):
        message = build_message(NotificationType.TEN_MINUTES, "Ayşe Demir", "Fizik", "tr")
        assert message == "Ayşe Demir ile Fizik dersiniz 10 dakika sonra başlayacak."

    def test_english_message(self):
        message = build_message(NotificationType.ONE_DAY, "Ayşe Demir", "Physics", "en")
        assert message == "Your Physics lesson with Ayşe Demir starts in 1 day."

    def test_accepts_raw_type_values(self):
        assert "3 saat" in build_message("3_hours", "A", "B", "xx")
