"""Staff and attendance domain service."""

import logging
from decimal import Decimal
from datetime import date
from typing import Any, Optional

from bizdesk.database.base import Database
from bizdesk.domain.entities import ATTENDANCE_STATUSES, AttendanceRecord, Staff
from bizdesk.domain.errors import (
    AuthenticationError,
    ValidationError,
    log_failure,
    user_not_authenticated,
)
from bizdesk.domain.staff_state import StaffAction, StaffActionType, StaffState, staff_reducer
from bizdesk.domain.store import Store

logger = logging.getLogger(__name__)


class StaffService:
    """Service for staff members and their daily attendance."""

    def __init__(
        self,
        db: Database,
        user_id: Optional[str],
        store: Optional[Store[StaffState, StaffAction]] = None,
    ):
        """Initialize staff service.

        Args:
            db: Database instance
            user_id: Authenticated user, or None when nobody is signed in
            store: Store to dispatch into. A fresh one is created if omitted.
        """
        self.db = db
        self.user_id = user_id
        self.store = store if store is not None else Store(staff_reducer, StaffState())

    @property
    def state(self) -> StaffState:
        """Current staff state."""
        return self.store.state

    def _dispatch(self, kind: StaffActionType, payload: Any = None) -> None:
        self.store.dispatch(StaffAction(kind, payload))

    def _require_user(self) -> str:
        if not self.user_id:
            raise AuthenticationError(user_not_authenticated())
        return self.user_id

    @staticmethod
    def _validate(name: str, mobile_number: str, post: str, workplace: str, daily_wage: Decimal):
        for label, value in (
            ("Name", name),
            ("Mobile number", mobile_number),
            ("Post", post),
            ("Workplace", workplace),
        ):
            if not value or not value.strip():
                raise ValidationError(f"{label} cannot be empty")
        if daily_wage < 0:
            raise ValidationError("Daily wage cannot be negative")

    def load_staff(self) -> list[Staff]:
        """Load staff into state. Without a user the list is empty."""
        if not self.user_id:
            self._dispatch(StaffActionType.SET_STAFF, [])
            return []

        self._dispatch(StaffActionType.SET_LOADING, True)
        try:
            with log_failure(logger, "loading staff"):
                staff = self.db.load_staff(self.user_id)
        finally:
            self._dispatch(StaffActionType.SET_LOADING, False)
        self._dispatch(StaffActionType.SET_STAFF, staff)
        return staff

    def load_attendance(self) -> list[AttendanceRecord]:
        """Load attendance into state. Without a user the list is empty."""
        if not self.user_id:
            self._dispatch(StaffActionType.SET_ATTENDANCE, [])
            return []
        with log_failure(logger, "loading attendance"):
            attendance = self.db.load_attendance(self.user_id)
        self._dispatch(StaffActionType.SET_ATTENDANCE, attendance)
        return attendance

    def add_staff(
        self,
        name: str,
        mobile_number: str,
        post: str,
        workplace: str,
        daily_wage: Decimal,
        address: Optional[str] = None,
        photo_url: Optional[str] = None,
    ) -> Staff:
        """Add a staff member.

        Raises:
            AuthenticationError: If no user is signed in
            ValidationError: If a required field is blank or the wage is negative
        """
        user_id = self._require_user()
        self._validate(name, mobile_number, post, workplace, daily_wage)
        with log_failure(logger, "adding staff"):
            staff = self.db.add_staff(
                user_id,
                name=name.strip(),
                mobile_number=mobile_number.strip(),
                post=post.strip(),
                workplace=workplace.strip(),
                daily_wage=daily_wage,
                address=address,
                photo_url=photo_url,
            )
        self._dispatch(StaffActionType.ADD_STAFF, staff)
        return staff

    def update_staff(self, staff: Staff) -> Staff:
        """Store edited staff details."""
        user_id = self._require_user()
        self._validate(staff.name, staff.mobile_number, staff.post, staff.workplace, staff.daily_wage)
        with log_failure(logger, "updating staff"):
            stored = self.db.update_staff(user_id, staff)
        self._dispatch(StaffActionType.UPDATE_STAFF, stored)
        return stored

    def delete_staff(self, staff_id: int) -> None:
        """Delete a staff member together with their attendance."""
        user_id = self._require_user()
        with log_failure(logger, "deleting staff"):
            self.db.delete_staff(user_id, staff_id)
        self._dispatch(StaffActionType.DELETE_STAFF, staff_id)

    def mark_attendance(self, staff_id: int, on_date: date, status: str) -> AttendanceRecord:
        """Record attendance, replacing any earlier mark for the same day.

        Raises:
            ValidationError: If ``status`` is not present, absent or half-day
        """
        user_id = self._require_user()
        if status not in ATTENDANCE_STATUSES:
            raise ValidationError(
                f"Invalid attendance status '{status}'. Use one of: {', '.join(ATTENDANCE_STATUSES)}"
            )
        with log_failure(logger, "marking attendance"):
            record = self.db.mark_attendance(user_id, staff_id, on_date, status)
        self._dispatch(StaffActionType.MARK_ATTENDANCE, record)
        return record

    def attendance_for(self, staff_id: int) -> list[AttendanceRecord]:
        """Attendance in state for one staff member."""
        return [record for record in self.state.attendance if record.staff_id == staff_id]
