'''
Lesson status transitions.

    scheduled (NULL) --> completed
    scheduled (NULL) --> postponed --> completed

Completed is terminal. Completing a postponed lesson keeps the postponement
date and reason it was given.
'''
from datetime import datetime

from ..common.exceptions import InvalidLessonTransitionError
from ..database.db_enums import LessonStatus

ALLOWED_TRANSITIONS: dict[str | None, frozenset[str]] = {
    None: frozenset({LessonStatus.COMPLETED.value, LessonStatus.POSTPONED.value}),
    LessonStatus.POSTPONED.value: frozenset({LessonStatus.COMPLETED.value}),
    LessonStatus.COMPLETED.value: frozenset(),
}


def _value(status) -> str | None:
    return getattr(status, "value", status)


def can_transition(current, requested) -> bool:
    return _value(requested) in ALLOWED_TRANSITIONS.get(_value(current), frozenset())


def ensure_transition(current, requested):
    if not can_transition(current, requested):
        raise InvalidLessonTransitionError(_value(current), _value(requested))


def complete(lesson):
    """Marks the lesson completed. postponed_to/postpone_reason are left as they are."""
    ensure_transition(lesson.status, LessonStatus.COMPLETED)
    lesson.status = LessonStatus.COMPLETED.value
    return lesson


def postpone(lesson, postponed_to: datetime, reason: str):
    """Marks the lesson postponed. Date and a non-blank reason are both required."""
    if postponed_to is None:
        raise ValueError("A postponed lesson needs the date it moves to.")
    if reason is None or not reason.strip():
        raise ValueError("A postponed lesson needs a reason.")
    ensure_transition(lesson.status, LessonStatus.POSTPONED)
    lesson.status = LessonStatus.POSTPONED.value
    lesson.postponed_to = postponed_to
    lesson.postpone_reason = reason.strip()
    return lesson


def postponement_consistent(status, postponed_to, reason) -> bool:
    """
    Scheduled lessons carry no postponement, postponed lessons carry both
    fields, and completed lessons carry both or neither.
    """
    has_date = postponed_to is not None
    has_reason = bool(reason and reason.strip())
    status = _value(status)
    if status is None:
        return not has_date and not has_reason
    if status == LessonStatus.POSTPONED.value:
        return has_date and has_reason
    return has_date == has_reason
