"""Utilities for resolving names or IDs given on the command line."""

from typing import Callable, Optional, Sequence, TypeVar

from bizdesk.domain.entities import Staff, Teacher
from bizdesk.domain.errors import NotFoundError, staff_not_found, teacher_not_found
from bizdesk.domain.substitution_state import teacher_names_match

T = TypeVar("T", Teacher, Staff)


def _resolve(
    items: Sequence[T],
    ref: str | int,
    matches: Callable[[str, str], bool],
    not_found: Callable[[int | str], str],
) -> T:
    # An integer (or a string of digits) is an ID, anything else a name
    item_id: Optional[int] = None
    if isinstance(ref, int):
        item_id = ref
    elif ref.strip().isdigit():
        item_id = int(ref.strip())

    if item_id is not None:
        for item in items:
            if item.id == item_id:
                return item
        raise NotFoundError(not_found(item_id))

    for item in items:
        if matches(item.name, ref):
            return item
    raise NotFoundError(not_found(ref))


def resolve_teacher(teachers: Sequence[Teacher], teacher: str | int) -> Teacher:
    """Resolve a teacher ID or name (case-insensitive) to a teacher.

    Args:
        teachers: Loaded teachers
        teacher: Teacher name, or ID (int or string representation of int)

    Returns:
        Matching teacher

    Raises:
        NotFoundError: If no teacher matches
    """
    return _resolve(teachers, teacher, teacher_names_match, teacher_not_found)


def resolve_staff(staff: Sequence[Staff], member: str | int) -> Staff:
    """Resolve a staff ID or exact name to a staff member.

    Raises:
        NotFoundError: If no staff member matches
    """
    return _resolve(staff, member, lambda name, ref: name == ref.strip(), staff_not_found)
