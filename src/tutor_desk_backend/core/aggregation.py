'''
Derived views over lesson, payment and schedule rows.

Everything here is a pure function over plain objects (ORM rows or pydantic
models exposing the same attribute names). "Today" is always passed in so
the results are deterministic. An empty input yields empty series and zero
sums, never an error.
'''
import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Sequence
from zoneinfo import ZoneInfo

from ..database.db_enums import DayOfWeek, LessonStatus, LessonState, PaymentStatus, ReportRange
from ..models import finance as finance_models
from ..models.documents import InvoiceData, InvoiceLine, StudentReportData, StudentReportLesson
from ..models.schedule import ScheduleGrid, ScheduleGridRow

ZERO = Decimal("0")


# --- Small helpers ---

def to_decimal(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def percentage(part: int, whole: int) -> int:
    """round(100 * part / whole) with halves rounded up; 0 when whole is 0."""
    if whole <= 0:
        return 0
    value = (Decimal(100) * Decimal(part) / Decimal(whole)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return max(0, min(100, int(value)))


def local_date(moment: datetime, tz: ZoneInfo) -> date:
    """Calendar date of a timestamp in `tz`. Naive timestamps are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz).date()


def month_bounds(today: date) -> tuple[date, date]:
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


def year_bounds(today: date) -> tuple[date, date]:
    return date(today.year, 1, 1), date(today.year, 12, 31)


def range_bounds(report_range: ReportRange, today: date) -> tuple[date, date]:
    if report_range == ReportRange.MONTH:
        return month_bounds(today)
    return year_bounds(today)


def _within(day: date, bounds: tuple[date, date]) -> bool:
    return bounds[0] <= day <= bounds[1]


def _is_completed_payment(payment) -> bool:
    return payment.status == PaymentStatus.COMPLETED


def _lesson_state(lesson) -> LessonState:
    status = lesson.status
    if isinstance(status, LessonStatus):
        status = status.value
    return LessonState.from_status(status)


def sum_completed(payments: Iterable, bounds: tuple[date, date] | None = None) -> Decimal:
    total = ZERO
    for payment in payments:
        if not _is_completed_payment(payment):
            continue
        if bounds is not None and not _within(payment.payment_date, bounds):
            continue
        total += to_decimal(payment.amount)
    return total


def count_states(lessons: Iterable) -> dict[LessonState, int]:
    counts = {state: 0 for state in LessonState}
    for lesson in lessons:
        counts[_lesson_state(lesson)] += 1
    return counts


# --- Dashboard ---

def build_dashboard_stats(
    student_count: int,
    lessons: Sequence,
    payments: Sequence,
    today: date
) -> finance_models.DashboardStats:
    """
    Headline counters for the dashboard.
    Only completed payments dated inside the current month (both ends
    inclusive) make up the monthly income.
    """
    counts = count_states(lessons)
    active = counts[LessonState.SCHEDULED]
    completed = counts[LessonState.COMPLETED]

    estimated_income = sum(
        (to_decimal(lesson.price_per_hour) for lesson in lessons if _lesson_state(lesson) == LessonState.COMPLETED),
        ZERO
    )

    return finance_models.DashboardStats(
        total_students=student_count,
        active_classes=active,
        completed_lessons=completed,
        estimated_income=estimated_income,
        monthly_income=sum_completed(payments, month_bounds(today)),
        success_rate=percentage(completed, completed + active),
    )


# --- Weekly grouping ---

@dataclass
class WeeklyGrouping:
    buckets: dict[DayOfWeek, list] = field(default_factory=lambda: {day: [] for day in DayOfWeek})
    dropped: int = 0

    @property
    def bucketed(self) -> int:
        return sum(len(items) for items in self.buckets.values())


def group_lessons_by_day(lessons: Iterable) -> WeeklyGrouping:
    """
    Partitions lessons into the seven weekday buckets, keeping the incoming
    order inside each bucket. Lessons whose day is not a known weekday are
    counted in `dropped` and left out.
    """
    grouping = WeeklyGrouping()
    for lesson in lessons:
        day = DayOfWeek.parse(lesson.day_of_week)
        if day is None:
            grouping.dropped += 1
            continue
        grouping.buckets[day].append(lesson)
    return grouping


# --- Financial report ---

def build_payment_method_breakdown(payments: Iterable) -> list[finance_models.PaymentMethodBreakdown]:
    """Count and total per payment method, over every payment given, whatever its status."""
    grouped: dict[str, list[Decimal]] = {}
    for payment in payments:
        method = payment.payment_method
        method = getattr(method, "value", method)
        grouped.setdefault(method, []).append(to_decimal(payment.amount))
    return [
        finance_models.PaymentMethodBreakdown(method=method, count=len(amounts), total=sum(amounts, ZERO))
        for method, amounts in grouped.items()
    ]


def build_daily_series(payments: Iterable, start: date, end: date) -> list[finance_models.DailyIncomePoint]:
    per_day: dict[date, Decimal] = {}
    for payment in payments:
        if _is_completed_payment(payment) and start <= payment.payment_date <= end:
            per_day[payment.payment_date] = per_day.get(payment.payment_date, ZERO) + to_decimal(payment.amount)

    series = []
    day = start
    while day <= end:
        series.append(finance_models.DailyIncomePoint(day=day, amount=per_day.get(day, ZERO)))
        day += timedelta(days=1)
    return series


def build_monthly_series(payments: Iterable, year: int) -> list[finance_models.MonthlyIncomePoint]:
    per_month = {month: ZERO for month in range(1, 13)}
    for payment in payments:
        if _is_completed_payment(payment) and payment.payment_date.year == year:
            per_month[payment.payment_date.month] += to_decimal(payment.amount)
    return [finance_models.MonthlyIncomePoint(month=month, amount=amount) for month, amount in per_month.items()]


def build_lesson_status_series(lessons: Iterable) -> list[finance_models.LessonStatusPoint]:
    counts = count_states(lessons)
    return [finance_models.LessonStatusPoint(status=state, count=counts[state]) for state in LessonState]


def build_financial_report(
    payments: Sequence,
    lessons: Sequence,
    student_count: int,
    report_range: ReportRange,
    today: date
) -> finance_models.FinancialReport:
    """
    Assembles the report for the month or year containing `today`.
    `payments` may hold the teacher's whole history; range filtering
    happens here.
    """
    bounds = range_bounds(report_range, today)
    in_range = [p for p in payments if _within(p.payment_date, bounds)]
    month = month_bounds(today)
    year = year_bounds(today)

    counts = count_states(lessons)

    return finance_models.FinancialReport(
        range=report_range,
        start_date=bounds[0],
        end_date=bounds[1],
        total_income=sum_completed(in_range),
        monthly_income=sum_completed(in_range, month),
        yearly_income=sum_completed(in_range, year),
        payment_methods=build_payment_method_breakdown(in_range),
        daily_series=build_daily_series(in_range, *bounds),
        monthly_series=build_monthly_series(payments, today.year),
        lesson_status_series=build_lesson_status_series(lessons),
        total_lessons=len(lessons),
        completed_lessons=counts[LessonState.COMPLETED],
        total_students=student_count,
    )


# --- Student progress ---

def build_student_report(
    student,
    lessons: Sequence,
    teacher_name: str,
    signature: str,
    tz: ZoneInfo,
    evaluation: str = ""
) -> StudentReportData:
    """
    Progress summary for one student. Lessons are listed newest first by
    their creation date.
    """
    counts = count_states(lessons)
    completed = counts[LessonState.COMPLETED]
    total = len(lessons)

    prices = [to_decimal(lesson.price_per_hour) for lesson in lessons]
    average_price = (sum(prices, ZERO) / len(prices)).quantize(Decimal("0.01")) if prices else ZERO

    ordered = sorted(lessons, key=lambda lesson: lesson.created_at, reverse=True)

    return StudentReportData(
        student_name=student.full_name,
        grade=student.grade,
        teacher_name=teacher_name,
        total_lessons=total,
        completed_lessons=completed,
        progress_percent=percentage(completed, total),
        total_hours=total,
        average_price=average_price,
        lessons=[
            StudentReportLesson(
                date=local_date(lesson.created_at, tz),
                subject=lesson.subject,
                state=_lesson_state(lesson),
            )
            for lesson in ordered
        ],
        evaluation=evaluation,
        signature=signature,
    )


# --- Invoice ---

def build_invoice_draft(
    student_name: str,
    teacher_name: str,
    lessons: Sequence,
    tz: ZoneInfo,
    signature: str = ""
) -> InvoiceData | None:
    """
    One invoice line per completed lesson, one hour each at the lesson's
    hourly price. Returns None when there is nothing to invoice.
    """
    completed = [lesson for lesson in lessons if _lesson_state(lesson) == LessonState.COMPLETED]
    if not completed:
        return None
    completed.sort(key=lambda lesson: lesson.created_at)
    return InvoiceData(
        student_name=student_name,
        teacher_name=teacher_name,
        signature=signature,
        lines=[
            InvoiceLine(
                date=local_date(lesson.created_at, tz),
                time=lesson.start_time.strftime("%H:%M"),
                subject=lesson.subject,
                duration=Decimal("1"),
                price=to_decimal(lesson.price_per_hour),
            )
            for lesson in completed
        ],
    )


# --- Schedule grid ---

def build_schedule_grid(time_slots: Sequence[str], entries: Iterable) -> ScheduleGrid:
    """
    One row per configured slot, one cell per weekday. A cell shows the
    first entry booked at that (day, slot) as "student name\\nsubject".
    Entries on unknown days or slots are ignored.
    """
    first_entry: dict[tuple[DayOfWeek, str], Any] = {}
    for entry in entries:
        day = DayOfWeek.parse(entry.day_of_week)
        if day is None:
            continue
        first_entry.setdefault((day, entry.time_slot), entry)

    rows = []
    for slot in time_slots:
        cells = []
        for day in DayOfWeek:
            entry = first_entry.get((day, slot))
            cells.append(f"{entry.student.full_name}\n{entry.subject}" if entry else "")
        rows.append(ScheduleGridRow(time_slot=slot, cells=cells))
    return ScheduleGrid(rows=rows)
