"""CSV helpers for teacher rosters, class timetables and substitution reports.

``parse_csv`` is deliberately naive: it splits lines on newlines and cells on
commas, then strips every double quote. Quoted fields that contain commas or
newlines are split like any other text.
"""

import re
from pathlib import Path
from typing import Any, Sequence

from bizdesk.domain.entities import PeriodEntry, SubstitutionRecord, Teacher, TeacherStats
from bizdesk.domain.errors import ValidationError
from bizdesk.domain.substitution_state import DAYS

SUBJECT_TEACHER_PATTERN = re.compile(r"^([^(]+)\(([^)]+)\)$")

TEACHER_HEADERS = ["Name", "Subject", "Post", "Contact Number"]
TIMETABLE_HEADERS = ["Class Name"] + [f"Period {n}" for n in range(1, 9)]
TEACHER_STATS_HEADERS = ["S.No", "Teacher Name", "Total Periods", "Total Hours", "Days Worked"]
DAILY_SUBSTITUTION_HEADERS = [
    "S.No",
    "Date",
    "Absent Teacher",
    "Period",
    "Original Class",
    "Original Subject",
    "Substitute Teacher",
]

SAMPLE_TEACHERS = [
    ["John Doe", "Mathematics", "Head Teacher", "9876543210"],
    ["Jane Smith", "English", "Senior Teacher", "9876543211"],
    ["Bob Wilson", "Science", "Assistant Teacher", "9876543212"],
]

SAMPLE_TIMETABLE = [
    [
        "XI-A",
        "ENGLISH(PRIYA RATHORE)",
        "HINDI(POOJA)",
        "MATHS(PRIYA)",
        "SST(NEHA TIWARI)",
        "SCIENCE(SHILPA NEGI)",
        "MUSIC",
        "SANSKRIT(C.B.)",
        "COMPUTER(JUNAID RAFIQ)",
    ],
    [
        "XI-B",
        "HINDI(ARCHANA)",
        "ENGLISH(NEHA)",
        "ART(SUFIYA PARVEEN)",
        "SCIENCE(SHILPA NEGI)",
        "MATHS(PRIYA MISHRA)",
        "SANSKRIT(NEHA TIWARI)",
        "SANSKRIT(C.B.)",
        "COMPUTER(JUNAID RAFIQ)",
    ],
    [
        "XII-A",
        "SANSKRIT(SOBIT SHARMA)",
        "SST(AYUSHI)",
        "ENGLISH(PRIYA RATHORE)",
        "SCIENCE(SUKHDEV SINGH)",
        "MATHS(LALITA)",
        "HINDI(POOJA)",
        "COMPUTER(JUNAID RAFIQ)",
        "SST(NEHA TIWARI)",
    ],
]


def parse_csv(text: str) -> list[list[str]]:
    """Split CSV text into rows of trimmed cells, skipping blank lines."""
    rows = []
    for line in text.split("\n"):
        if line.strip():
            rows.append([cell.strip().replace('"', "") for cell in line.split(",")])
    return rows


def parse_subject_teacher(cell: str) -> dict[str, str]:
    """Split a ``SUBJECT(TEACHER)`` cell.

    A cell without that shape is all subject and no teacher.
    """
    match = SUBJECT_TEACHER_PATTERN.match(cell)
    if match:
        return {"subject": match.group(1).strip(), "teacher": match.group(2).strip()}
    return {"subject": cell.strip(), "teacher": ""}


def teachers_from_rows(rows: Sequence[Sequence[str]]) -> list[dict[str, str]]:
    """Turn roster rows (header first) into new-teacher fields.

    Rows with fewer than four cells or no name are skipped.
    """
    teachers = []
    for row in rows[1:]:
        if len(row) < 4 or not row[0].strip():
            continue
        teachers.append(
            {
                "name": row[0].strip(),
                "subject": row[1].strip(),
                "post": row[2].strip(),
                "contact_number": row[3].strip(),
            }
        )
    return teachers


def classes_from_rows(
    rows: Sequence[Sequence[str]],
    periods: Sequence[str],
    time_slots: Sequence[str],
) -> list[tuple[str, dict[str, dict[str, PeriodEntry]]]]:
    """Turn timetable rows (header first) into ``(class name, timetable)`` pairs.

    The header must have a column containing "class". Each following column
    is one period, in order; the row applies to every day Monday-Saturday.

    Raises:
        ValidationError: If there are no data rows or no class column
    """
    if len(rows) < 2:
        raise ValidationError("CSV file must have headers and data rows")

    headers = rows[0]
    class_index = next(
        (index for index, header in enumerate(headers) if "class" in header.lower()), None
    )
    if class_index is None:
        raise ValidationError("CSV must have a class column")

    period_count = len([h for h in headers[1:] if "class" not in h.lower()])
    labels = [
        periods[index] if index < len(periods) else str(index + 1) for index in range(period_count)
    ]

    classes = []
    for row in rows[1:]:
        class_name = row[class_index].strip() if class_index < len(row) else ""
        if not class_name:
            continue
        cells = {}
        for index, label in enumerate(labels):
            value = row[index + 1] if index + 1 < len(row) else ""
            parsed = parse_subject_teacher(value)
            cells[label] = PeriodEntry(
                subject=parsed["subject"],
                teacher=parsed["teacher"],
                time=time_slots[index] if index < len(time_slots) else "",
            )
        classes.append((class_name, {day: dict(cells) for day in DAYS}))
    return classes


def _join(rows: Sequence[Sequence[Any]]) -> str:
    return "\n".join(",".join(str(cell) for cell in row) for row in rows)


def sample_teacher_csv() -> str:
    """Sample teacher roster."""
    return _join([TEACHER_HEADERS] + SAMPLE_TEACHERS)


def sample_timetable_csv() -> str:
    """Sample class timetable with eight periods."""
    return _join([TIMETABLE_HEADERS] + SAMPLE_TIMETABLE)


def teachers_to_csv(teachers: Sequence[Teacher]) -> str:
    """Export teachers as a roster, each value in double quotes."""
    rows = [",".join(TEACHER_HEADERS)]
    for teacher in teachers:
        values = (teacher.name, teacher.subject, teacher.post, teacher.contact_number)
        rows.append(",".join(f'"{value}"' for value in values))
    return "\n".join(rows)


def teacher_stats_to_csv(stats: Sequence[TeacherStats]) -> str:
    """Export substitute statistics, numbered from 1, with the name quoted."""
    rows = [",".join(TEACHER_STATS_HEADERS)]
    for number, stat in enumerate(stats, start=1):
        rows.append(f'{number},"{stat.teacher}",{stat.periods},{stat.hours.normalize():f},{stat.days}')
    return "\n".join(rows)


def daily_substitutions_to_csv(records: Sequence[SubstitutionRecord]) -> str:
    """Export one day's substitutions, numbered from 1, with text values quoted."""
    rows = [",".join(DAILY_SUBSTITUTION_HEADERS)]
    for number, r in enumerate(records, start=1):
        rows.append(
            f'{number},{r.date.isoformat()},"{r.absent_teacher}",{r.period},'
            f'"{r.original_class}","{r.original_subject}","{r.substitute_teacher}"'
        )
    return "\n".join(rows)


def write_csv(path: str | Path, content: str) -> Path:
    """Write CSV content to ``path`` and return the path."""
    path = Path(path)
    path.write_text(content, encoding="utf-8")
    return path
