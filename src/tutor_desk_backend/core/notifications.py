'''
Client-side view of the reminder feed and the reminder message text.
'''
from ..database.db_enums import NotificationType
from ..models.notifications import NotificationRead, NotificationSnapshot

LEAD_TIME_LABELS = {
    "tr": {
        NotificationType.ONE_DAY: "1 gün",
        NotificationType.THREE_HOURS: "3 saat",
        NotificationType.ONE_HOUR: "1 saat",
        NotificationType.TEN_MINUTES: "10 dakika",
    },
    "en": {
        NotificationType.ONE_DAY: "1 day",
        NotificationType.THREE_HOURS: "3 hours",
        NotificationType.ONE_HOUR: "1 hour",
        NotificationType.TEN_MINUTES: "10 minutes",
    },
}


def build_message(notification_type: NotificationType, student_name: str, subject: str, language: str = "tr") -> str:
    labels = LEAD_TIME_LABELS.get(language, LEAD_TIME_LABELS["tr"])
    lead = labels[NotificationType(notification_type)]
    if language == "en":
        return f"Your {subject} lesson with {student_name} starts in {lead}."
    return f"{student_name} ile {subject} dersiniz {lead} sonra başlayacak."


class NotificationFeed:
    """
    Holds the latest poll result and the unread counter.

    `apply_poll` replaces the items and reports whether the audio cue should
    play: at most once per poll, and only when some unread id was not seen
    in an earlier poll. Ids are remembered while they stay in the feed.
    `mark_read` updates the local copy optimistically.
    """

    def __init__(self):
        self.items: list[NotificationRead] = []
        self.unread_count = 0
        self._seen_unread_ids: set = set()

    def apply_poll(self, items: list[NotificationRead]) -> bool:
        self.items = list(items)
        self.unread_count = sum(1 for item in self.items if not item.read)

        current_ids = {item.id for item in self.items}
        unread_ids = {item.id for item in self.items if not item.read}
        has_new = bool(unread_ids - self._seen_unread_ids)
        # Forget ids that dropped out of the feed
        self._seen_unread_ids = (self._seen_unread_ids & current_ids) | unread_ids
        return has_new

    def mark_read(self, notification_id) -> bool:
        """Returns True when an unread item flipped to read."""
        for item in self.items:
            if item.id == notification_id:
                if item.read:
                    return False
                item.read = True
                self.unread_count = max(0, self.unread_count - 1)
                return True
        return False

    def snapshot(self, play_sound: bool = False) -> NotificationSnapshot:
        return NotificationSnapshot(
            notifications=self.items,
            unread_count=self.unread_count,
            play_sound=play_sound,
        )
