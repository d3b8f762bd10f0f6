'''
Enumerations shared by the ORM layer, the pydantic models and the core logic.
Values are the strings persisted in the database.
'''
import enum


class DayOfWeek(str, enum.Enum):
    """Weekday names in calendar order, Monday first."""
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @classmethod
    def ordered(cls) -> list["DayOfWeek"]:
        return list(cls)

    @classmethod
    def parse(cls, value) -> "DayOfWeek | None":
        """Returns the matching member, or None for anything unrecognised."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class LessonStatus(str, enum.Enum):
    """Persisted lesson statuses. A NULL status means the lesson is scheduled."""
    COMPLETED = "completed"
    POSTPONED = "postponed"


class LessonState(str, enum.Enum):
    """The three lifecycle states, in the order reports list them."""
    COMPLETED = "completed"
    POSTPONED = "postponed"
    SCHEDULED = "scheduled"

    @classmethod
    def from_status(cls, status: str | None) -> "LessonState":
        if status is None:
            return cls.SCHEDULED
        return cls(status)


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CREDIT_CARD = "credit_card"
    BANK_TRANSFER = "bank_transfer"
    OTHER = "other"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentSortField(str, enum.Enum):
    PAYMENT_DATE = "payment_date"
    AMOUNT = "amount"
    STATUS = "status"


class SortDirection(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


class NotificationType(str, enum.Enum):
    """Lead time before a lesson at which a reminder is created."""
    ONE_DAY = "1_day"
    THREE_HOURS = "3_hours"
    ONE_HOUR = "1_hour"
    TEN_MINUTES = "10_minutes"


class ReportRange(str, enum.Enum):
    MONTH = "month"
    YEAR = "year"


class ExportFormat(str, enum.Enum):
    JSON = "json"
    DOCX = "docx"


class ThemeMode(str, enum.Enum):
    LIGHT = "light"
    DARK = "dark"


class MenuStyle(str, enum.Enum):
    FLOATING = "floating"
    FIXED = "fixed"


class TimeFormat(str, enum.Enum):
    H24 = "24h"
    H12 = "12h"


class Section(str, enum.Enum):
    """Navigable sections of the client application."""
    DASHBOARD = "dashboard"
    STUDENTS = "students"
    SCHEDULE = "schedule"
    LESSONS = "lessons"
    PAYMENTS = "payments"
    REPORTS = "reports"
    PROFILE = "profile"
    SETTINGS = "settings"
