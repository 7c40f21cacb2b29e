# flask_app/services/attendance_service.py
"""
Attendance check-in.

A check-in attempt moves through these states::

    AWAITING_INPUT -> SEARCHING -> FOUND ---------------------> RECORDING_ATTENDANCE -> DONE
                               \-> NOT_FOUND -> CREATING_CONTACT -> FOUND -/

Any failure sends the attempt back to AWAITING_INPUT and the error is raised
to the caller. Attendance is recorded at most once per (contact, event); a
repeat check-in is reported as ``already_recorded`` and is not an error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from flask_app.models import Attendance, Contact, Event, db
from flask_app.services.errors import (
    AmbiguousContactError,
    ContactServiceError,
    NotFoundError,
    PersistenceFailure,
    ValidationError,
)
from flask_app.utils.metrics import record_check_in
from flask_app.utils.phone import digits_only, is_valid_lookup_phone, normalize_phone, phone_settings


class CheckInState(str, Enum):
    AWAITING_INPUT = "awaiting_input"
    SEARCHING = "searching"
    FOUND = "found"
    NOT_FOUND = "not_found"
    CREATING_CONTACT = "creating_contact"
    RECORDING_ATTENDANCE = "recording_attendance"
    DONE = "done"


class AttendanceOutcome(str, Enum):
    RECORDED = "recorded"
    ALREADY_RECORDED = "already_recorded"


_TRANSITIONS = {
    CheckInState.AWAITING_INPUT: {CheckInState.SEARCHING},
    CheckInState.SEARCHING: {CheckInState.FOUND, CheckInState.NOT_FOUND},
    CheckInState.NOT_FOUND: {CheckInState.CREATING_CONTACT},
    CheckInState.CREATING_CONTACT: {CheckInState.FOUND},
    CheckInState.FOUND: {CheckInState.RECORDING_ATTENDANCE},
    CheckInState.RECORDING_ATTENDANCE: {CheckInState.DONE},
    CheckInState.DONE: set(),
}


@dataclass
class AttendanceRecordResult:
    attendance: Attendance
    outcome: AttendanceOutcome

    @property
    def created(self) -> bool:
        return self.outcome is AttendanceOutcome.RECORDED


@dataclass
class CheckInResult:
    """What the caller needs after a check-in step."""

    state: CheckInState
    normalized_phone: str
    contact: Contact | None = None
    attendance: Attendance | None = None
    outcome: AttendanceOutcome | None = None
    contact_created: bool = False
    path: list[CheckInState] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.contact is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "found": self.found,
            "mobile": self.normalized_phone,
            "contact": self.contact.to_dict() if self.contact is not None else None,
            "attendance": self.attendance.to_dict() if self.attendance is not None else None,
            "outcome": self.outcome.value if self.outcome else None,
            "contact_created": self.contact_created,
        }


def normalize_lookup_phone(raw_phone: Any) -> str:
    """
    Normalize check-in input to the lookup key.

    Raises:
        ValidationError: input is not exactly PHONE_NUMBER_LENGTH digits once formatting is removed
    """
    length = phone_settings()[1]
    if not is_valid_lookup_phone(raw_phone, length=length):
        raise ValidationError(f"Please enter a valid {length}-digit mobile number.")
    return digits_only(raw_phone)


def find_contact_by_phone(normalized_phone: str) -> Contact | None:
    """
    Single contact for a normalized phone number, or None.

    Raises:
        AmbiguousContactError: more than one contact carries the number
    """
    matches = Contact.find_all_by_phone(normalized_phone)
    if not matches:
        return None
    if len(matches) > 1:
        raise AmbiguousContactError(normalized_phone, [c.id for c in matches])
    return matches[0]


def record_attendance(contact_id: int, event_id: int, session: Session | None = None) -> AttendanceRecordResult:
    """
    Create the attendance record for (contact, event) unless one exists.

    A unique-constraint violation on insert means a concurrent check-in won
    the race; that is treated the same as an existing record.
    """
    session = session or db.session
    if session.get(Event, event_id) is None:
        raise NotFoundError(f"Event {event_id} not found")
    if session.get(Contact, contact_id) is None:
        raise NotFoundError(f"Contact {contact_id} not found")

    existing = Attendance.find_for(contact_id, event_id)
    if existing is not None:
        return AttendanceRecordResult(existing, AttendanceOutcome.ALREADY_RECORDED)

    attendance = Attendance(contact_id=contact_id, event_id=event_id)
    try:
        session.add(attendance)
        session.commit()
    except IntegrityError as e:
        session.rollback()
        existing = Attendance.find_for(contact_id, event_id)
        if existing is None:
            current_app.logger.error(f"Attendance insert failed for contact {contact_id}, event {event_id}: {e}")
            raise PersistenceFailure("Could not record attendance.") from e
        return AttendanceRecordResult(existing, AttendanceOutcome.ALREADY_RECORDED)
    except SQLAlchemyError as e:
        session.rollback()
        current_app.logger.error(f"Attendance insert failed for contact {contact_id}, event {event_id}: {e}")
        raise PersistenceFailure("Could not record attendance.") from e
    return AttendanceRecordResult(attendance, AttendanceOutcome.RECORDED)


def _default_contact_factory(session: Session) -> Callable[[Mapping[str, Any]], Contact]:
    def create(data: Mapping[str, Any]) -> Contact:
        contact = Contact(**data)
        session.add(contact)
        session.commit()
        return contact

    return create


class AttendanceCheckInResolver:
    """One check-in attempt for one event."""

    def __init__(
        self,
        event_id: int,
        *,
        session: Session | None = None,
        contact_factory: Callable[[Mapping[str, Any]], Contact] | None = None,
    ):
        self.event_id = event_id
        self.session = session or db.session
        self.contact_factory = contact_factory or _default_contact_factory(self.session)
        self.state = CheckInState.AWAITING_INPUT
        self.history: list[CheckInState] = [CheckInState.AWAITING_INPUT]
        self.normalized_phone: str | None = None

    def _transition(self, new_state: CheckInState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise ValidationError(f"Cannot move check-in from {self.state.value} to {new_state.value}.")
        self.state = new_state
        self.history.append(new_state)

    def _reset(self) -> None:
        self.state = CheckInState.AWAITING_INPUT
        self.history.append(CheckInState.AWAITING_INPUT)

    def _path(self) -> list[CheckInState]:
        return list(self.history)

    def _search(self, raw_phone: Any) -> Contact | None:
        self._transition(CheckInState.SEARCHING)
        normalized = normalize_lookup_phone(raw_phone)
        self.normalized_phone = normalized
        if self.session.get(Event, self.event_id) is None:
            raise NotFoundError(f"Event {self.event_id} not found")
        contact = find_contact_by_phone(normalized)
        self._transition(CheckInState.FOUND if contact is not None else CheckInState.NOT_FOUND)
        return contact

    def _record(self, contact: Contact, *, contact_created: bool = False) -> CheckInResult:
        self._transition(CheckInState.RECORDING_ATTENDANCE)
        recorded = record_attendance(contact.id, self.event_id, self.session)
        self._transition(CheckInState.DONE)
        record_check_in(recorded.outcome.value)
        current_app.logger.info(
            f"Check-in for event {self.event_id}: contact {contact.id} {recorded.outcome.value}"
        )
        return CheckInResult(
            state=self.state,
            normalized_phone=self.normalized_phone or "",
            contact=contact,
            attendance=recorded.attendance,
            outcome=recorded.outcome,
            contact_created=contact_created,
            path=self._path(),
        )

    def _fail(self, error: Exception) -> None:
        self._reset()
        if isinstance(error, ValidationError):
            record_check_in("rejected")
        else:
            record_check_in("error")

    def check_in(self, raw_phone: Any) -> CheckInResult:
        """
        Look the phone number up and record attendance when a contact matches.

        Returns a NOT_FOUND result carrying the normalized number when no
        contact matches; the caller then collects contact details and calls
        :meth:`register_new_contact`.
        """
        try:
            contact = self._search(raw_phone)
            if contact is None:
                record_check_in("not_found")
                return CheckInResult(
                    state=self.state,
                    normalized_phone=self.normalized_phone,
                    path=self._path(),
                )
            return self._record(contact)
        except ContactServiceError as e:
            self._fail(e)
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            self._fail(e)
            current_app.logger.error(f"Check-in lookup failed for event {self.event_id}: {str(e)}")
            raise PersistenceFailure("Check-in failed, please try again.") from e

    def register_new_contact(self, contact_data: Mapping[str, Any]) -> CheckInResult:
        """
        Create the contact for a number that was not found, then record attendance.

        On a fresh resolver the number in ``contact_data['mobile']`` is searched
        first; if a contact has appeared meanwhile, attendance is recorded for
        it instead of creating a duplicate.
        """
        try:
            if self.state is CheckInState.AWAITING_INPUT:
                raw_mobile = contact_data.get("mobile")
                existing = self._search(normalize_phone(raw_mobile) or raw_mobile)
                if existing is not None:
                    return self._record(existing)
            elif self.state is not CheckInState.NOT_FOUND:
                raise ValidationError("Contact creation is only possible after an unmatched search.")

            self._transition(CheckInState.CREATING_CONTACT)
            data = dict(contact_data)
            if normalize_phone(data.get("mobile")) != self.normalized_phone:
                data["mobile"] = self.normalized_phone
            contact = self.contact_factory(data)
            current_app.logger.info(f"Check-in created contact {contact.id} for mobile {self.normalized_phone}")
            self._transition(CheckInState.FOUND)
            return self._record(contact, contact_created=True)
        except ContactServiceError as e:
            self._fail(e)
            raise
        except (SQLAlchemyError, ValueError) as e:
            self.session.rollback()
            self._fail(e)
            current_app.logger.error(f"Check-in contact creation failed for event {self.event_id}: {str(e)}")
            if isinstance(e, ValueError):
                raise ValidationError(str(e)) from e
            raise PersistenceFailure("Could not create the contact, please try again.") from e
