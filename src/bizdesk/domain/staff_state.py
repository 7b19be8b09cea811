"""Staff and attendance state tree and reducer."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from bizdesk.domain.entities import AttendanceRecord, Staff


@dataclass(frozen=True)
class StaffState:
    """In-memory state for the staff module."""

    staff: tuple[Staff, ...] = ()
    attendance: tuple[AttendanceRecord, ...] = ()
    loading: bool = False


class StaffActionType(str, Enum):
    """Actions understood by ``staff_reducer``."""

    SET_LOADING = "SET_LOADING"
    SET_STAFF = "SET_STAFF"
    SET_ATTENDANCE = "SET_ATTENDANCE"
    ADD_STAFF = "ADD_STAFF"
    UPDATE_STAFF = "UPDATE_STAFF"
    DELETE_STAFF = "DELETE_STAFF"
    MARK_ATTENDANCE = "MARK_ATTENDANCE"


@dataclass(frozen=True)
class StaffAction:
    """A dispatched staff action."""

    type: StaffActionType
    payload: Any = None


def staff_reducer(state: StaffState, action: StaffAction) -> StaffState:
    """Apply ``action`` to ``state`` and return the new state."""
    kind = action.type
    payload = action.payload

    if kind == StaffActionType.SET_LOADING:
        return replace(state, loading=bool(payload))
    if kind == StaffActionType.SET_STAFF:
        return replace(state, staff=tuple(payload))
    if kind == StaffActionType.SET_ATTENDANCE:
        return replace(state, attendance=tuple(payload))
    if kind == StaffActionType.ADD_STAFF:
        return replace(state, staff=state.staff + (payload,))
    if kind == StaffActionType.UPDATE_STAFF:
        return replace(
            state, staff=tuple(payload if s.id == payload.id else s for s in state.staff)
        )
    if kind == StaffActionType.DELETE_STAFF:
        return replace(
            state,
            staff=tuple(s for s in state.staff if s.id != payload),
            attendance=tuple(a for a in state.attendance if a.staff_id != payload),
        )
    if kind == StaffActionType.MARK_ATTENDANCE:
        attendance = list(state.attendance)
        for index, record in enumerate(attendance):
            if record.staff_id == payload.staff_id and record.date == payload.date:
                attendance[index] = payload
                break
        else:
            attendance.append(payload)
        return replace(state, attendance=tuple(attendance))
    return state
