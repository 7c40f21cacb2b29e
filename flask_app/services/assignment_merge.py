# flask_app/services/assignment_merge.py
"""
Merge rules for the multi-valued staff assignment field.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from flask_app.models.contact.assignment import AssignmentList
from flask_app.services.errors import ValidationError


class MergeMode(str, Enum):
    """How requested staff combine with a contact's existing assignment."""

    REPLACE = "replace"
    ADD = "add"

    @classmethod
    def parse(cls, value: "MergeMode | str | None") -> "MergeMode":
        if value is None or value == "":
            return cls.REPLACE
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(
                f"Unknown merge mode '{value}'. Expected one of: {', '.join(m.value for m in cls)}."
            ) from None


def merge_assignments(
    current: Iterable[str] | None,
    requested: Iterable[str],
    mode: MergeMode | str = MergeMode.REPLACE,
) -> AssignmentList:
    """
    Compute the new assignment for one contact.

    ``replace`` returns exactly ``requested`` in the caller's order.
    ``add`` keeps ``current`` as-is and appends requested staff not already
    present, so repeating the same add is a no-op.

    Raises:
        ValidationError: ``requested`` is empty.
    """
    mode = MergeMode.parse(mode)
    requested_list = AssignmentList(requested)
    if not requested_list:
        raise ValidationError("At least one staff member must be selected.")

    if mode is MergeMode.REPLACE:
        return requested_list

    existing = current if isinstance(current, AssignmentList) else AssignmentList(current or [])
    return existing.union(requested_list)
