# flask_app/models/contact/assignment.py
"""
Staff assignment list stored on contacts.

An AssignmentList is an ordered, duplicate-free sequence of staff usernames.
Order matters: the first entry owns the contact when a campaign is
distributed.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from sqlalchemy import JSON
from sqlalchemy.types import TypeDecorator


class AssignmentList:
    """Immutable ordered set of staff identifiers."""

    __slots__ = ("_items",)

    def __init__(self, staff_ids: Iterable[str] | None = None):
        items: list[str] = []
        seen: set[str] = set()
        for raw in staff_ids or ():
            if raw is None:
                continue
            staff_id = str(raw).strip()
            if not staff_id or staff_id in seen:
                continue
            seen.add(staff_id)
            items.append(staff_id)
        self._items = tuple(items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __contains__(self, staff_id: object) -> bool:
        return staff_id in self._items

    def __getitem__(self, index: int) -> str:
        return self._items[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, AssignmentList):
            return self._items == other._items
        if isinstance(other, (list, tuple)):
            return self._items == tuple(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        return f"AssignmentList({list(self._items)!r})"

    @property
    def owner(self) -> str | None:
        """First assignee, or None when unassigned."""
        return self._items[0] if self._items else None

    def union(self, other: Iterable[str]) -> "AssignmentList":
        """Keep current order and append ids from ``other`` not already present."""
        return AssignmentList((*self._items, *other))

    def issuperset(self, other: Iterable[str]) -> bool:
        return set(other).issubset(self._items)

    def to_list(self) -> list[str]:
        return list(self._items)


class AssignmentListType(TypeDecorator):
    """Persist an AssignmentList as a JSON array."""

    impl = JSON
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return []
        if not isinstance(value, AssignmentList):
            value = AssignmentList(value)
        return value.to_list()

    def process_result_value(self, value, dialect):
        return AssignmentList(value or [])
