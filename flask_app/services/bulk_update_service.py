# flask_app/services/bulk_update_service.py
"""
Bulk Update Service - apply one field change across many selected contacts.

Contacts are processed independently: a failure on one id is recorded against
that id and the batch carries on. Every contact is re-read from the database
right before its write so assignment merges never work from a stale copy.
"""

from __future__ import annotations

import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from flask_app.models import (
    Contact,
    ContactCategory,
    ContactPriority,
    ContactStatus,
    Occupation,
    Sex,
    Team,
    User,
    db,
)
from flask_app.services.assignment_merge import MergeMode, merge_assignments
from flask_app.services.errors import ErrorKind, NotFoundError, ValidationError
from flask_app.utils.metrics import record_bulk_update

ASSIGNMENT_FIELD = "assignedTo"
FREE_TEXT_FIELDS = {"city": "city"}
ENUM_FIELDS = {
    "category": ContactCategory,
    "priority": ContactPriority,
    "status": ContactStatus,
    "team": Team,
    "occupation": Occupation,
    "sex": Sex,
}
FIELD_ALIASES = {"assigned_to": ASSIGNMENT_FIELD}
BULK_FIELDS = (*ENUM_FIELDS, *FREE_TEXT_FIELDS, ASSIGNMENT_FIELD)


@dataclass(frozen=True)
class BulkUpdateRequest:
    """Validated bulk update request."""

    contact_ids: frozenset[int]
    field: str
    value: str | tuple[str, ...]
    mode: MergeMode | None = None


@dataclass
class BulkUpdateResult:
    """Per-contact classification of a bulk update."""

    field: str
    succeeded: set[int] = field(default_factory=set)
    failed: dict[int, ErrorKind] = field(default_factory=dict)

    @property
    def attempted(self) -> set[int]:
        return self.succeeded | set(self.failed)

    def failure_counts(self) -> dict[str, int]:
        return dict(Counter(kind.value for kind in self.failed.values()))

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "succeeded": sorted(self.succeeded),
            "failed": {str(contact_id): kind.value for contact_id, kind in sorted(self.failed.items())},
            "succeeded_count": len(self.succeeded),
            "failed_count": len(self.failed),
        }


def _coerce_contact_ids(contact_ids: Iterable[Any] | None) -> frozenset[int]:
    if contact_ids is None or isinstance(contact_ids, (str, bytes)):
        raise ValidationError("contact_ids must be a list of contact ids.")
    ids = set()
    for raw in contact_ids:
        if isinstance(raw, bool):
            raise ValidationError(f"Invalid contact id: {raw!r}")
        try:
            ids.add(int(raw))
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid contact id: {raw!r}") from None
    if not ids:
        raise ValidationError("Select at least one contact to update.")
    return frozenset(ids)


def _coerce_staff_ids(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise ValidationError("assignedTo value must be a list of staff usernames.")
    staff_ids: list[str] = []
    for raw in value:
        if not isinstance(raw, str):
            raise ValidationError(f"Invalid staff username: {raw!r}")
        staff_id = raw.strip()
        if staff_id and staff_id not in staff_ids:
            staff_ids.append(staff_id)
    if not staff_ids:
        raise ValidationError("At least one staff member must be selected.")
    return tuple(staff_ids)


class BulkUpdateService:
    """Apply a single field mutation across a set of contacts."""

    def __init__(
        self,
        session: Session | None = None,
        *,
        staff_lookup: Callable[[Iterable[str]], set[str]] | None = None,
        max_contacts: int | None = None,
    ):
        self.session = session or db.session
        self.staff_lookup = staff_lookup or User.existing_usernames
        self.max_contacts = max_contacts

    def build_request(
        self,
        contact_ids: Iterable[Any] | None,
        field_name: str | None,
        value: Any,
        mode: MergeMode | str | None = None,
    ) -> BulkUpdateRequest:
        """
        Validate request-level input before any contact is touched.

        Raises:
            ValidationError: unknown field, no contacts, empty value, bad mode
            NotFoundError: assignedTo names staff that do not exist
        """
        field_name = FIELD_ALIASES.get(field_name, field_name)
        if field_name not in BULK_FIELDS:
            raise ValidationError(
                f"Field '{field_name}' cannot be bulk updated. Allowed fields: {', '.join(BULK_FIELDS)}."
            )

        ids = _coerce_contact_ids(contact_ids)
        if self.max_contacts and len(ids) > self.max_contacts:
            raise ValidationError(f"Bulk updates are limited to {self.max_contacts} contacts per request.")

        if field_name == ASSIGNMENT_FIELD:
            staff_ids = _coerce_staff_ids(value)
            known = self.staff_lookup(staff_ids)
            missing = [staff_id for staff_id in staff_ids if staff_id not in known]
            if missing:
                raise NotFoundError(
                    f"Unknown staff member(s): {', '.join(missing)}",
                    details={"staff": missing},
                )
            return BulkUpdateRequest(ids, field_name, staff_ids, MergeMode.parse(mode))

        if not isinstance(value, str):
            raise ValidationError(f"Value for '{field_name}' must be a single text value.")
        value = value.strip()
        if not value:
            raise ValidationError(f"A value for '{field_name}' is required.")
        return BulkUpdateRequest(ids, field_name, value, None)

    def bulk_update(
        self,
        contact_ids: Iterable[Any] | None,
        field_name: str | None,
        value: Any,
        mode: MergeMode | str | None = None,
    ) -> BulkUpdateResult:
        """
        Apply the change to every contact id and classify each outcome.

        The returned result covers each requested id exactly once, either in
        ``succeeded`` or in ``failed``.
        """
        request = self.build_request(contact_ids, field_name, value, mode)
        started = time.perf_counter()
        result = BulkUpdateResult(field=request.field)

        enum_value = None
        enum_cls = ENUM_FIELDS.get(request.field)
        if enum_cls is not None:
            try:
                enum_value = enum_cls(request.value)
            except ValueError:
                current_app.logger.warning(
                    f"Bulk update rejected: '{request.value}' is not a valid {request.field}"
                )
                result.failed = {contact_id: ErrorKind.INVALID_VALUE for contact_id in request.contact_ids}
                self._finish(result, started)
                return result

        for contact_id in sorted(request.contact_ids):
            outcome = self._apply_one(contact_id, request, enum_value)
            if outcome is None:
                result.succeeded.add(contact_id)
            else:
                result.failed[contact_id] = outcome

        self._finish(result, started)
        return result

    def _apply_one(self, contact_id: int, request: BulkUpdateRequest, enum_value) -> ErrorKind | None:
        try:
            # Live read: never merge against an identity-map copy
            contact = self.session.get(Contact, contact_id, populate_existing=True)
            if contact is None:
                current_app.logger.warning(f"Bulk update skipped missing contact {contact_id}")
                return ErrorKind.NOT_FOUND

            if request.field == ASSIGNMENT_FIELD:
                contact.assigned_to = merge_assignments(contact.assigned_to, request.value, request.mode)
            elif request.field in FREE_TEXT_FIELDS:
                setattr(contact, FREE_TEXT_FIELDS[request.field], request.value)
            else:
                setattr(contact, request.field, enum_value)

            self.session.commit()
            return None
        except SQLAlchemyError as e:
            self.session.rollback()
            current_app.logger.error(f"Bulk update of {request.field} failed for contact {contact_id}: {str(e)}")
            return ErrorKind.PERSISTENCE_FAILURE

    def _finish(self, result: BulkUpdateResult, started: float) -> None:
        duration = time.perf_counter() - started
        current_app.logger.info(
            f"Bulk update of {result.field}: {len(result.succeeded)} succeeded, "
            f"{len(result.failed)} failed in {duration:.3f}s"
        )
        record_bulk_update(
            field=result.field,
            succeeded=len(result.succeeded),
            failures=result.failure_counts(),
            duration_seconds=duration,
        )
