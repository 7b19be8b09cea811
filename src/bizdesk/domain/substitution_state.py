"""Substitution state tree, actions and reducer.

The reducer is pure: every action returns a new ``SubstitutionState`` and no
action can fail. Teacher schedules are derived from the class timetables by
``generate_teacher_schedule_from_timetable``.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Optional, Sequence

from bizdesk.domain.entities import (
    COMBINED,
    FREE,
    ClassSchedule,
    SubstitutionRecord,
    Teacher,
)

logger = logging.getLogger(__name__)

DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

DEFAULT_PERIODS = ("1", "2", "3", "4", "5", "6", "7", "8")
DEFAULT_TIME_SLOTS = (
    "8:15-9:00",
    "9:00-9:25",
    "9:25-10:00",
    "10:00-10:15",
    "10:15-10:45",
    "10:45-11:30",
    "11:30-12:30",
    "1:05-1:40",
)


@dataclass(frozen=True)
class SubstitutionState:
    """Normalized in-memory state for the substitution module."""

    teachers: tuple[Teacher, ...] = ()
    classes: tuple[ClassSchedule, ...] = ()
    substitutions: tuple[SubstitutionRecord, ...] = ()
    periods: tuple[str, ...] = DEFAULT_PERIODS
    time_slots: tuple[str, ...] = DEFAULT_TIME_SLOTS
    loading: bool = False


def initial_state() -> SubstitutionState:
    """Return the empty starting state with default periods and time slots."""
    return SubstitutionState()


class ActionType(str, Enum):
    """Actions understood by ``substitution_reducer``."""

    SET_LOADING = "SET_LOADING"
    SET_TEACHERS = "SET_TEACHERS"
    ADD_TEACHER = "ADD_TEACHER"
    UPDATE_TEACHER = "UPDATE_TEACHER"
    DELETE_TEACHER = "DELETE_TEACHER"
    SET_CLASSES = "SET_CLASSES"
    ADD_CLASS = "ADD_CLASS"
    UPDATE_CLASS = "UPDATE_CLASS"
    DELETE_CLASS = "DELETE_CLASS"
    SET_SUBSTITUTIONS = "SET_SUBSTITUTIONS"
    ADD_SUBSTITUTION = "ADD_SUBSTITUTION"
    SET_PERIODS = "SET_PERIODS"
    ADD_PERIOD = "ADD_PERIOD"
    SET_TIME_SLOTS = "SET_TIME_SLOTS"
    UPDATE_TIME_SLOT = "UPDATE_TIME_SLOT"
    SYNC_TEACHER_SCHEDULES = "SYNC_TEACHER_SCHEDULES"


@dataclass(frozen=True)
class Action:
    """A dispatched action. ``payload`` depends on ``type``."""

    type: ActionType
    payload: Any = None


def normalize_teacher_name(name: str) -> str:
    """Lowercase a name and collapse surrounding and inner whitespace."""
    return " ".join(name.split()).lower()


def teacher_names_match(teacher_name: str, timetable_name: str) -> bool:
    """Case-insensitive comparison of a teacher's name with a timetable cell."""
    if not timetable_name or not timetable_name.strip():
        return False
    return normalize_teacher_name(teacher_name) == normalize_teacher_name(timetable_name)


def empty_teacher_schedule(periods: Sequence[str]) -> dict[str, dict[str, str]]:
    """Build a schedule with every (day, period) cell set to ``FREE``."""
    return {day: {period: FREE for period in periods} for day in DAYS}


def generate_teacher_schedule_from_timetable(
    teachers: Sequence[Teacher],
    classes: Sequence[ClassSchedule],
    periods: Sequence[str],
) -> tuple[Teacher, ...]:
    """Derive every teacher's weekly schedule from the class timetables.

    Each cell starts as ``FREE``. A class cell whose primary teacher matches a
    teacher overwrites that teacher's cell with the class name, so when a
    teacher is double-booked the class later in ``classes`` wins. Additional
    entries append to an occupied cell with ``+``; combined entries contribute
    every class they cover.

    Args:
        teachers: Teachers to derive schedules for
        classes: Class timetables, in iteration order
        periods: Configured period labels

    Returns:
        Teachers with fresh schedules, in the same order
    """
    schedules = [empty_teacher_schedule(periods) for _ in teachers]

    def find_teacher(timetable_name: str) -> Optional[int]:
        for index, teacher in enumerate(teachers):
            if teacher_names_match(teacher.name, timetable_name):
                return index
        return None

    assignments = 0
    for class_schedule in classes:
        for day in DAYS:
            day_schedule = class_schedule.schedule.get(day) or {}
            for period in periods:
                entry = day_schedule.get(period)
                if entry is None:
                    continue

                index = find_teacher(entry.teacher)
                if index is not None:
                    schedules[index][day][period] = class_schedule.class_name
                    assignments += 1

                for extra in entry.additional_entries:
                    index = find_teacher(extra.teacher)
                    if index is None:
                        continue
                    class_info = class_schedule.class_name
                    if extra.type == COMBINED and extra.combined_classes:
                        class_info = "+".join((class_schedule.class_name, *extra.combined_classes))
                    current = schedules[index][day][period]
                    if current != FREE:
                        schedules[index][day][period] = f"{current}+{class_info}"
                    else:
                        schedules[index][day][period] = class_info
                    assignments += 1

    logger.debug(
        "Derived schedules for %d teachers from %d classes (%d assignments)",
        len(teachers),
        len(classes),
        assignments,
    )
    return tuple(
        replace(teacher, schedule=schedule) for teacher, schedule in zip(teachers, schedules)
    )


def substitution_reducer(state: SubstitutionState, action: Action) -> SubstitutionState:
    """Apply ``action`` to ``state`` and return the new state."""
    kind = action.type
    payload = action.payload

    if kind == ActionType.SET_LOADING:
        return replace(state, loading=bool(payload))
    if kind == ActionType.SET_TEACHERS:
        return replace(state, teachers=tuple(payload))
    if kind == ActionType.ADD_TEACHER:
        return replace(state, teachers=state.teachers + (payload,))
    if kind == ActionType.UPDATE_TEACHER:
        return replace(
            state,
            teachers=tuple(payload if t.id == payload.id else t for t in state.teachers),
        )
    if kind == ActionType.DELETE_TEACHER:
        return replace(state, teachers=tuple(t for t in state.teachers if t.id != payload))
    if kind == ActionType.SET_CLASSES:
        return replace(state, classes=tuple(payload))
    if kind == ActionType.ADD_CLASS:
        return replace(state, classes=state.classes + (payload,))
    if kind == ActionType.UPDATE_CLASS:
        return replace(
            state,
            classes=tuple(payload if c.id == payload.id else c for c in state.classes),
        )
    if kind == ActionType.DELETE_CLASS:
        return replace(state, classes=tuple(c for c in state.classes if c.id != payload))
    if kind == ActionType.SET_SUBSTITUTIONS:
        return replace(state, substitutions=tuple(payload))
    if kind == ActionType.ADD_SUBSTITUTION:
        return replace(state, substitutions=state.substitutions + (payload,))
    if kind == ActionType.SET_PERIODS:
        return replace(state, periods=tuple(payload))
    if kind == ActionType.ADD_PERIOD:
        return replace(state, periods=state.periods + (payload,))
    if kind == ActionType.SET_TIME_SLOTS:
        return replace(state, time_slots=tuple(payload))
    if kind == ActionType.UPDATE_TIME_SLOT:
        index, time = payload
        time_slots = list(state.time_slots)
        # Writing past the end pads with empty slots
        while len(time_slots) <= index:
            time_slots.append("")
        time_slots[index] = time
        return replace(state, time_slots=tuple(time_slots))
    if kind == ActionType.SYNC_TEACHER_SCHEDULES:
        return replace(
            state,
            teachers=generate_teacher_schedule_from_timetable(
                state.teachers, state.classes, state.periods
            ),
        )
    return state
