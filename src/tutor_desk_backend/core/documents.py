'''
Word documents built from in-memory report structures with python-docx.

Builders take fully prepared data and return a `docx.Document`; nothing here
touches the database or the clock. Filenames come from the entity name and a
date passed in by the caller.
'''
import json
import re
from datetime import date
from decimal import Decimal
from io import BytesIO
from typing import Any
from urllib.parse import quote

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt

from ..database.db_enums import DayOfWeek, LessonState
from ..models.documents import InvoiceData, StudentReportData
from ..models.schedule import ScheduleGrid

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

LABELS = {
    "tr": {
        "invoice_title": "ÖZEL DERS FATURASI",
        "student": "Öğrenci",
        "teacher": "Öğretmen",
        "invoice_columns": ["Tarih", "Saat", "Ders", "Süre (Saat)", "Saat Ücreti (₺)", "Toplam (₺)"],
        "total": "Toplam Tutar",
        "signature": "İmza",
        "report_title": "ÖĞRENCİ GELİŞİM RAPORU",
        "identity": "Öğrenci Bilgileri",
        "name": "Ad Soyad",
        "grade": "Sınıf",
        "summary": "Ders Özeti",
        "total_lessons": "Toplam Ders",
        "completed_lessons": "Tamamlanan Ders",
        "progress": "İlerleme",
        "total_hours": "Toplam Saat",
        "lesson_history": "Ders Geçmişi",
        "report_columns": ["Tarih", "Konu", "Durum"],
        "evaluation": "Öğretmen Değerlendirmesi",
        "schedule_title": "Haftalık Ders Programı",
        "time": "Saat",
        "export_title": "Özel Ders Verileri",
        "date_format": "%d.%m.%Y",
        "states": {
            LessonState.COMPLETED: "Tamamlandı",
            LessonState.POSTPONED: "Ertelendi",
            LessonState.SCHEDULED: "Planlandı",
        },
        "days": {
            DayOfWeek.MONDAY: "Pazartesi",
            DayOfWeek.TUESDAY: "Salı",
            DayOfWeek.WEDNESDAY: "Çarşamba",
            DayOfWeek.THURSDAY: "Perşembe",
            DayOfWeek.FRIDAY: "Cuma",
            DayOfWeek.SATURDAY: "Cumartesi",
            DayOfWeek.SUNDAY: "Pazar",
        },
    },
    "en": {
        "invoice_title": "PRIVATE LESSON INVOICE",
        "student": "Student",
        "teacher": "Teacher",
        "invoice_columns": ["Date", "Time", "Subject", "Duration (h)", "Hourly Price", "Total"],
        "total": "Total Amount",
        "signature": "Signature",
        "report_title": "STUDENT PROGRESS REPORT",
        "identity": "Student Details",
        "name": "Full Name",
        "grade": "Grade",
        "summary": "Lesson Summary",
        "total_lessons": "Total Lessons",
        "completed_lessons": "Completed Lessons",
        "progress": "Progress",
        "total_hours": "Total Hours",
        "lesson_history": "Lesson History",
        "report_columns": ["Date", "Subject", "Status"],
        "evaluation": "Teacher Evaluation",
        "schedule_title": "Weekly Lesson Schedule",
        "time": "Time",
        "export_title": "Tutoring Data",
        "date_format": "%Y-%m-%d",
        "states": {
            LessonState.COMPLETED: "Completed",
            LessonState.POSTPONED: "Postponed",
            LessonState.SCHEDULED: "Scheduled",
        },
        "days": {day: day.value for day in DayOfWeek},
    },
}


def labels_for(language: str) -> dict:
    return LABELS.get(language, LABELS["tr"])


def format_amount(value: Decimal) -> str:
    return f"{Decimal(value):.2f}"


def format_quantity(value: Decimal) -> str:
    """0.50 -> '0.5', 2.00 -> '2'"""
    return format(Decimal(value).normalize(), "f")


def format_percent(value: int, language: str) -> str:
    # Turkish puts the sign first
    return f"%{value}" if language == "tr" else f"{value}%"


def _title(doc, text: str):
    paragraph = doc.add_paragraph()
    paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = paragraph.add_run(text)
    run.bold = True
    run.font.size = Pt(16)
    return paragraph


def _labelled_line(doc, label: str, value: str):
    paragraph = doc.add_paragraph()
    paragraph.add_run(f"{label}: ").bold = True
    paragraph.add_run(value)
    return paragraph


def _table(doc, header: list[str], rows: list[list[str]]):
    table = doc.add_table(rows=1, cols=len(header))
    table.style = "Table Grid"
    for idx, text in enumerate(header):
        cell = table.rows[0].cells[idx]
        cell.text = ""
        cell.paragraphs[0].add_run(text).bold = True
    for row in rows:
        cells = table.add_row().cells
        for idx, text in enumerate(row):
            cells[idx].text = text
    return table


# --- Invoice ---

def build_invoice_document(data: InvoiceData, language: str = "tr"):
    labels = labels_for(language)
    doc = Document()
    doc.core_properties.title = labels["invoice_title"]

    _title(doc, labels["invoice_title"])
    _labelled_line(doc, labels["student"], data.student_name)
    _labelled_line(doc, labels["teacher"], data.teacher_name)

    rows = [
        [
            line.date.strftime(labels["date_format"]),
            line.time or "",
            line.subject,
            format_quantity(line.duration),
            format_amount(line.price),
            format_amount(line.line_total),
        ]
        for line in data.lines
    ]
    _table(doc, labels["invoice_columns"], rows)

    total = doc.add_paragraph()
    total.alignment = WD_ALIGN_PARAGRAPH.RIGHT
    total.add_run(f"{labels['total']}: {format_amount(data.total)}").bold = True

    _labelled_line(doc, labels["signature"], data.signature)
    return doc


# --- Student report ---

def build_student_report_document(data: StudentReportData, language: str = "tr"):
    labels = labels_for(language)
    doc = Document()
    doc.core_properties.title = labels["report_title"]

    _title(doc, labels["report_title"])

    doc.add_heading(labels["identity"], level=1)
    _table(doc, [labels["name"], labels["grade"]], [[data.student_name, data.grade or "-"]])

    doc.add_heading(labels["summary"], level=1)
    _table(
        doc,
        [labels["total_lessons"], labels["completed_lessons"], labels["progress"], labels["total_hours"]],
        [[str(data.total_lessons), str(data.completed_lessons), format_percent(data.progress_percent, language), str(data.total_hours)]],
    )

    doc.add_heading(labels["lesson_history"], level=1)
    _table(
        doc,
        labels["report_columns"],
        [
            [lesson.date.strftime(labels["date_format"]), lesson.subject, labels["states"][lesson.state]]
            for lesson in data.lessons
        ],
    )

    doc.add_heading(labels["evaluation"], level=1)
    doc.add_paragraph(data.evaluation)
    _labelled_line(doc, labels["teacher"], data.teacher_name)
    _labelled_line(doc, labels["signature"], data.signature)
    return doc


# --- Schedule ---

def build_schedule_document(grid: ScheduleGrid, language: str = "tr"):
    labels = labels_for(language)
    doc = Document()
    doc.core_properties.title = labels["schedule_title"]

    _title(doc, labels["schedule_title"])
    header = [labels["time"]] + [labels["days"][day] for day in grid.days]
    _table(doc, header, [[row.time_slot] + row.cells for row in grid.rows])
    return doc


# --- Full data export ---

def build_data_export_document(sections: dict[str, Any], language: str = "tr"):
    """One heading plus a pretty-printed JSON block per section."""
    labels = labels_for(language)
    doc = Document()
    doc.core_properties.title = labels["export_title"]

    _title(doc, labels["export_title"])
    for key, value in sections.items():
        doc.add_heading(key.upper(), level=1)
        block = doc.add_paragraph()
        run = block.add_run(json.dumps(value, indent=2, ensure_ascii=False, default=str))
        run.font.name = "Courier New"
        run.font.size = Pt(9)
    return doc


def document_to_bytes(doc) -> bytes:
    buffer = BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


# --- Filenames ---

def _slug(name: str) -> str:
    name = re.sub(r"[\\/:*?\"<>|]", "", name.strip())
    return re.sub(r"\s+", "_", name) or "unnamed"


def invoice_filename(student_name: str, on: date) -> str:
    return f"invoice_{_slug(student_name)}_{on.isoformat()}.docx"


def student_report_filename(student_name: str, on: date) -> str:
    return f"{_slug(student_name)}_report_{on.isoformat()}.docx"


def schedule_filename(on: date) -> str:
    return f"schedule_{on.isoformat()}.docx"


def export_filename(extension: str, on: date) -> str:
    return f"tutor-data_{on.isoformat()}.{extension}"


def attachment_headers(filename: str) -> dict[str, str]:
    # Headers are latin-1; non-ASCII names go in the RFC 5987 form
    ascii_name = filename.encode("ascii", "ignore").decode() or "download"
    return {"Content-Disposition": f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"}
