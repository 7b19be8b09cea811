"""Substitution domain service.

``SubstitutionService`` wires the substitution reducer to the database. Every
operation makes one database round trip and dispatches the mirroring action
with the stored row only after the round trip succeeds, so a failure leaves
the state untouched.
"""

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

from bizdesk.database.base import Database
from bizdesk.domain.entities import (
    FREE,
    AdditionalEntry,
    ClassSchedule,
    PeriodEntry,
    SchoolSettings,
    SubstitutionRecord,
    Teacher,
)
from bizdesk.domain.errors import (
    AuthenticationError,
    ConflictError,
    ValidationError,
    duplicate_name,
    log_failure,
    user_not_authenticated,
)
from bizdesk.domain.store import Store
from bizdesk.domain.substitution_state import (
    DAYS,
    Action,
    ActionType,
    SubstitutionState,
    empty_teacher_schedule,
    generate_teacher_schedule_from_timetable,
    initial_state,
    substitution_reducer,
    teacher_names_match,
)

logger = logging.getLogger(__name__)


def empty_class_schedule(
    periods: Sequence[str], time_slots: Sequence[str]
) -> dict[str, dict[str, PeriodEntry]]:
    """Build an empty timetable; each period takes the time slot at its position."""
    times = {
        period: time_slots[index] if index < len(time_slots) else ""
        for index, period in enumerate(periods)
    }
    return {day: {period: PeriodEntry(time=times[period]) for period in periods} for day in DAYS}


def weekday_name(on_date: date) -> str:
    """Return the timetable day for a date. Sundays have no timetable."""
    name = on_date.strftime("%A")
    if name not in DAYS:
        raise ValidationError(f"No timetable on {name} ({on_date.isoformat()})")
    return name


class SubstitutionService:
    """Service for teachers, class timetables, substitutions and settings."""

    def __init__(
        self,
        db: Database,
        user_id: Optional[str],
        store: Optional[Store[SubstitutionState, Action]] = None,
    ):
        """Initialize substitution service.

        Args:
            db: Database instance
            user_id: Authenticated user, or None when nobody is signed in
            store: Store to dispatch into. A fresh one is created if omitted.
        """
        self.db = db
        self.user_id = user_id
        self.store = store if store is not None else Store(substitution_reducer, initial_state())

    @property
    def state(self) -> SubstitutionState:
        """Current substitution state."""
        return self.store.state

    def _dispatch(self, kind: ActionType, payload: Any = None) -> None:
        self.store.dispatch(Action(kind, payload))

    def _require_user(self) -> str:
        if not self.user_id:
            raise AuthenticationError(user_not_authenticated())
        return self.user_id

    @staticmethod
    def _require_name(value: str, label: str) -> str:
        if not value or not value.strip():
            raise ValidationError(f"{label} cannot be empty")
        return value.strip()

    # Teachers
    def load_teachers(self) -> list[Teacher]:
        """Load teachers into state, toggling ``loading`` around the round trip."""
        if not self.user_id:
            self._dispatch(ActionType.SET_TEACHERS, [])
            return []

        self._dispatch(ActionType.SET_LOADING, True)
        try:
            with log_failure(logger, "loading teachers"):
                teachers = self.db.load_teachers(self.user_id)
        finally:
            self._dispatch(ActionType.SET_LOADING, False)
        self._dispatch(ActionType.SET_TEACHERS, teachers)
        return teachers

    def save_teacher(
        self,
        name: str,
        subject: str = "",
        post: str = "",
        contact_number: str = "",
        photo_url: Optional[str] = None,
    ) -> Teacher:
        """Create a teacher with an all-``FREE`` schedule.

        Raises:
            ValidationError: If the name is blank
            AuthenticationError: If no user is signed in
        """
        name = self._require_name(name, "Teacher name")
        user_id = self._require_user()
        with log_failure(logger, "saving teacher"):
            teacher = self.db.save_teacher(
                user_id,
                name=name,
                subject=subject.strip(),
                post=post.strip(),
                contact_number=contact_number.strip(),
                schedule=empty_teacher_schedule(self.state.periods),
                photo_url=photo_url,
            )
        self._dispatch(ActionType.ADD_TEACHER, teacher)
        return teacher

    def update_teacher(self, teacher: Teacher) -> Teacher:
        """Update a teacher's details."""
        self._require_name(teacher.name, "Teacher name")
        user_id = self._require_user()
        with log_failure(logger, "updating teacher"):
            stored = self.db.update_teacher(user_id, teacher)
        self._dispatch(ActionType.UPDATE_TEACHER, stored)
        return stored

    def delete_teacher(self, teacher_id: int) -> None:
        """Delete a teacher. Classes and substitution records are kept."""
        user_id = self._require_user()
        with log_failure(logger, "deleting teacher"):
            self.db.delete_teacher(user_id, teacher_id)
        self._dispatch(ActionType.DELETE_TEACHER, teacher_id)

    # Classes
    def load_classes(self) -> list[ClassSchedule]:
        """Load class timetables into state."""
        if not self.user_id:
            self._dispatch(ActionType.SET_CLASSES, [])
            return []
        with log_failure(logger, "loading classes"):
            classes = self.db.load_classes(self.user_id)
        self._dispatch(ActionType.SET_CLASSES, classes)
        return classes

    def new_class_schedule(self) -> dict[str, dict[str, PeriodEntry]]:
        """Empty timetable for the configured periods and time slots."""
        return empty_class_schedule(self.state.periods, self.state.time_slots)

    def save_class(
        self,
        class_name: str,
        schedule: Optional[dict[str, dict[str, PeriodEntry]]] = None,
    ) -> ClassSchedule:
        """Create a class timetable, empty unless ``schedule`` is given.

        Raises:
            ValidationError: If the class name is blank
            ConflictError: If a class with the same name is already loaded
        """
        class_name = self._require_name(class_name, "Class name")
        user_id = self._require_user()
        for existing in self.state.classes:
            if existing.class_name.lower() == class_name.lower():
                raise ConflictError(duplicate_name("Class", class_name))

        if schedule is None:
            schedule = self.new_class_schedule()
        with log_failure(logger, "saving class"):
            stored = self.db.save_class(user_id, class_name, schedule)
        self._dispatch(ActionType.ADD_CLASS, stored)
        return stored

    def update_class(self, class_schedule: ClassSchedule) -> ClassSchedule:
        """Store an edited class timetable."""
        self._require_name(class_schedule.class_name, "Class name")
        user_id = self._require_user()
        with log_failure(logger, "updating class"):
            stored = self.db.update_class(user_id, class_schedule)
        self._dispatch(ActionType.UPDATE_CLASS, stored)
        return stored

    def delete_class(self, class_id: int) -> None:
        """Delete a class timetable."""
        user_id = self._require_user()
        with log_failure(logger, "deleting class"):
            self.db.delete_class(user_id, class_id)
        self._dispatch(ActionType.DELETE_CLASS, class_id)

    def set_period_entry(
        self,
        class_schedule: ClassSchedule,
        day: str,
        period: str,
        subject: str,
        teacher: str,
        additional_entries: Sequence[AdditionalEntry] = (),
    ) -> ClassSchedule:
        """Return a copy of ``class_schedule`` with one cell replaced.

        The cell keeps its time; a new cell takes the configured time slot.
        Nothing is stored until ``update_class`` is called.
        """
        if day not in DAYS:
            raise ValidationError(f"Unknown day '{day}'")
        if period not in self.state.periods:
            raise ValidationError(f"Unknown period '{period}'")

        schedule = {d: dict(cells) for d, cells in class_schedule.schedule.items()}
        day_cells = schedule.setdefault(day, {})
        current = day_cells.get(period)
        if current is not None:
            time = current.time
        else:
            time = empty_class_schedule(self.state.periods, self.state.time_slots)[day][period].time
        day_cells[period] = PeriodEntry(
            subject=subject.strip(),
            teacher=teacher.strip(),
            time=time,
            additional_entries=tuple(additional_entries),
        )
        return replace(class_schedule, schedule=schedule)

    def copy_day_to_all_days(self, class_schedule: ClassSchedule, source_day: str) -> ClassSchedule:
        """Return a copy of ``class_schedule`` with every day set to ``source_day``."""
        if source_day not in DAYS:
            raise ValidationError(f"Unknown day '{source_day}'")
        cells = dict(class_schedule.schedule.get(source_day) or {})
        return replace(class_schedule, schedule={day: dict(cells) for day in DAYS})

    # Substitutions
    def load_substitutions(self) -> list[SubstitutionRecord]:
        """Load substitution records into state."""
        if not self.user_id:
            self._dispatch(ActionType.SET_SUBSTITUTIONS, [])
            return []
        with log_failure(logger, "loading substitutions"):
            records = self.db.load_substitutions(self.user_id)
        self._dispatch(ActionType.SET_SUBSTITUTIONS, records)
        return records

    def save_substitutions(
        self, records: Sequence[SubstitutionRecord]
    ) -> list[SubstitutionRecord]:
        """Replace every substitution on the batch's date.

        Records for other dates stay in state.

        Raises:
            ValidationError: If the batch is empty or spans several dates
        """
        if not records:
            raise ValidationError("No substitutions to save")
        on_date = records[0].date
        if any(record.date != on_date for record in records):
            raise ValidationError("All substitutions in a batch must share one date")
        for record in records:
            self._require_name(record.substitute_teacher, "Substitute teacher")
        user_id = self._require_user()

        with log_failure(logger, "saving substitutions"):
            stored = self.db.save_substitutions(user_id, records)

        kept = [record for record in self.state.substitutions if record.date != on_date]
        merged = sorted(kept + stored, key=lambda record: record.date, reverse=True)
        self._dispatch(ActionType.SET_SUBSTITUTIONS, merged)
        return stored

    def substitutions_on(self, on_date: date) -> list[SubstitutionRecord]:
        """Substitutions in state for one date."""
        return [record for record in self.state.substitutions if record.date == on_date]

    # Settings
    def load_settings(self) -> SchoolSettings:
        """Load periods and time slots into state."""
        if not self.user_id:
            return SchoolSettings(periods=self.state.periods, time_slots=self.state.time_slots)
        with log_failure(logger, "loading settings"):
            settings = self.db.load_settings(self.user_id)
        self._dispatch(ActionType.SET_PERIODS, settings.periods)
        self._dispatch(ActionType.SET_TIME_SLOTS, settings.time_slots)
        return settings

    def save_settings(self, periods: Sequence[str], time_slots: Sequence[str]) -> SchoolSettings:
        """Store periods and time slots.

        Raises:
            ValidationError: If there are no periods or a period label is blank
            ConflictError: If a period label repeats
        """
        if not periods:
            raise ValidationError("At least one period is required")
        labels = [self._require_name(period, "Period label") for period in periods]
        seen = set()
        for label in labels:
            if label in seen:
                raise ConflictError(duplicate_name("Period", label))
            seen.add(label)
        user_id = self._require_user()

        with log_failure(logger, "saving settings"):
            settings = self.db.save_settings(user_id, labels, [slot.strip() for slot in time_slots])
        self._dispatch(ActionType.SET_PERIODS, settings.periods)
        self._dispatch(ActionType.SET_TIME_SLOTS, settings.time_slots)
        return settings

    def add_period(self, label: str, time_slot: str = "") -> SchoolSettings:
        """Append a period, with its time slot at the matching position."""
        label = self._require_name(label, "Period label")
        if label in self.state.periods:
            raise ConflictError(duplicate_name("Period", label))
        user_id = self._require_user()

        periods = self.state.periods + (label,)
        time_slots = list(self.state.time_slots[: len(periods) - 1])
        time_slots.extend([""] * (len(periods) - 1 - len(time_slots)))
        time_slots.append(time_slot.strip())

        with log_failure(logger, "adding period"):
            settings = self.db.save_settings(user_id, periods, time_slots)
        self._dispatch(ActionType.ADD_PERIOD, label)
        self._dispatch(ActionType.SET_TIME_SLOTS, settings.time_slots)
        return settings

    def update_time_slot(self, index: int, time: str) -> SchoolSettings:
        """Change the time slot at ``index``, padding with blanks if needed."""
        if index < 0:
            raise ValidationError("Time slot index must not be negative")
        user_id = self._require_user()

        time_slots = list(self.state.time_slots)
        while len(time_slots) <= index:
            time_slots.append("")
        time_slots[index] = time.strip()

        with log_failure(logger, "updating time slot"):
            settings = self.db.save_settings(user_id, self.state.periods, time_slots)
        self._dispatch(ActionType.UPDATE_TIME_SLOT, (index, time.strip()))
        return settings

    # Derived schedules
    def sync_teacher_schedules(self, persist: bool = True) -> tuple[Teacher, ...]:
        """Recompute every teacher's schedule from the class timetables.

        Args:
            persist: Also store the derived schedules (one round trip)

        Returns:
            Teachers with their derived schedules
        """
        derived = generate_teacher_schedule_from_timetable(
            self.state.teachers, self.state.classes, self.state.periods
        )
        if persist and derived:
            user_id = self._require_user()
            with log_failure(logger, "storing teacher schedules"):
                self.db.update_teacher_schedules(user_id, derived)
        self._dispatch(ActionType.SYNC_TEACHER_SCHEDULES)
        return self.state.teachers

    def load_all(self) -> SubstitutionState:
        """Load settings, teachers, classes and substitutions, in that order."""
        self.load_settings()
        self.load_teachers()
        self.load_classes()
        self.load_substitutions()
        return self.state

    # Substitution planning
    def find_teacher(self, name: str) -> Optional[Teacher]:
        """Find a loaded teacher by name, ignoring case and extra whitespace."""
        for teacher in self.state.teachers:
            if teacher_names_match(teacher.name, name):
                return teacher
        return None

    @staticmethod
    def teacher_busy_periods(teacher: Teacher, day: str) -> list[tuple[str, str]]:
        """Return ``(period, class)`` pairs where the teacher is assigned on ``day``."""
        return [
            (period, assigned)
            for period, assigned in (teacher.schedule.get(day) or {}).items()
            if assigned != FREE
        ]

    def available_substitutes(
        self,
        day: str,
        period: str,
        absent_names: Iterable[str] = (),
        assignments: Iterable[SubstitutionRecord] = (),
    ) -> list[Teacher]:
        """Teachers who can cover ``period`` on ``day``.

        A teacher qualifies when their derived schedule is ``FREE`` in that
        slot, they are not absent, and they are not already covering another
        class in the same period.
        """
        absent = list(absent_names)
        covering = [
            record.substitute_teacher for record in assignments if record.period == period
        ]
        available = []
        for teacher in self.state.teachers:
            if (teacher.schedule.get(day) or {}).get(period, FREE) != FREE:
                continue
            if any(teacher_names_match(teacher.name, name) for name in absent):
                continue
            if any(teacher_names_match(teacher.name, name) for name in covering):
                continue
            available.append(teacher)
        return available

    def _original_subject(self, class_info: str, day: str, period: str, absent: str) -> str:
        class_name = class_info.split("+")[0]
        for class_schedule in self.state.classes:
            if class_schedule.class_name != class_name:
                continue
            cell = (class_schedule.schedule.get(day) or {}).get(period)
            if cell is None:
                return ""
            if teacher_names_match(absent, cell.teacher):
                return cell.subject
            for extra in cell.additional_entries:
                if teacher_names_match(absent, extra.teacher):
                    return extra.subject
            return cell.subject
        return ""

    def build_substitution_records(
        self, on_date: date, assignments: Iterable[Mapping[str, str]]
    ) -> list[SubstitutionRecord]:
        """Turn planned assignments into unsaved substitution records.

        Each assignment maps ``absent_teacher``, ``period`` and
        ``substitute_teacher`` (and optionally ``remarks``). The original class
        comes from the absent teacher's derived schedule and the original
        subject from that class's timetable.
        """
        day = weekday_name(on_date)
        records = []
        for assignment in assignments:
            absent_name = self._require_name(assignment.get("absent_teacher", ""), "Absent teacher")
            substitute = self._require_name(
                assignment.get("substitute_teacher", ""), "Substitute teacher"
            )
            period = assignment.get("period", "")
            if period not in self.state.periods:
                raise ValidationError(f"Unknown period '{period}'")

            absent = self.find_teacher(absent_name)
            class_info = ""
            if absent is not None:
                class_info = (absent.schedule.get(day) or {}).get(period, FREE)
                if class_info == FREE:
                    class_info = ""
            subject = self._original_subject(class_info, day, period, absent_name) if class_info else ""

            records.append(
                SubstitutionRecord(
                    id=None,
                    date=on_date,
                    absent_teacher=absent.name if absent is not None else absent_name,
                    period=period,
                    original_class=class_info,
                    original_subject=subject,
                    substitute_teacher=substitute,
                    remarks=(assignment.get("remarks") or "").strip(),
                )
            )
        return records
