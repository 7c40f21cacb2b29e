from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from flask_app.models import Attendance, Contact, ContactCategory, ContactPriority, db
from flask_app.services.attendance_service import (
    AttendanceCheckInResolver,
    AttendanceOutcome,
    CheckInState,
    find_contact_by_phone,
    normalize_lookup_phone,
    record_attendance,
)
from flask_app.services.errors import (
    AmbiguousContactError,
    NotFoundError,
    PersistenceFailure,
    ValidationError,
)

S = CheckInState


def _new_contact_data(**overrides):
    data = {
        "name": "Walk In",
        "mobile": "9123456789",
        "category": ContactCategory.ATTENDEE,
        "priority": ContactPriority.LOW,
        "area": "Aundh",
        "city": "Pune",
        "state": "Maharashtra",
    }
    data.update(overrides)
    return data


class TestLookupPhone:
    """Test lookup normalization"""

    @pytest.mark.parametrize("raw", ["9876543210", "98765-43210", " (98765) 43210 "])
    def test_valid_inputs(self, raw):
        assert normalize_lookup_phone(raw) == "9876543210"

    @pytest.mark.parametrize("raw", ["987654321", "+91 98765 43210", "", None, "abcdefghij"])
    def test_invalid_inputs(self, raw):
        with pytest.raises(ValidationError):
            normalize_lookup_phone(raw)

    def test_configured_length(self, app, monkeypatch):
        monkeypatch.setitem(app.config, "PHONE_NUMBER_LENGTH", 11)
        assert normalize_lookup_phone("98765-432101") == "98765432101"
        with pytest.raises(ValidationError) as exc_info:
            normalize_lookup_phone("9876543210")
        assert exc_info.value.message == "Please enter a valid 11-digit mobile number."

    def test_find_contact_by_phone(self, make_contact):
        contact = make_contact(mobile="9876543210")
        assert find_contact_by_phone("9876543210").id == contact.id
        assert find_contact_by_phone("9000000000") is None

    def test_ambiguous_phone(self, make_contact):
        first = make_contact(mobile="9876543210")
        second = make_contact(mobile="+91 98765 43210")
        with pytest.raises(AmbiguousContactError) as exc_info:
            find_contact_by_phone("9876543210")
        assert exc_info.value.status_code == 409
        assert exc_info.value.details["contact_ids"] == [first.id, second.id]


class TestRecordAttendance:
    """Test record_attendance"""

    def test_records_once(self, make_contact, test_event):
        contact = make_contact()

        first = record_attendance(contact.id, test_event.id)
        second = record_attendance(contact.id, test_event.id)

        assert first.outcome is AttendanceOutcome.RECORDED
        assert first.created is True
        assert second.outcome is AttendanceOutcome.ALREADY_RECORDED
        assert second.attendance.id == first.attendance.id
        assert Attendance.query.count() == 1

    def test_missing_event(self, make_contact):
        contact = make_contact()
        with pytest.raises(NotFoundError):
            record_attendance(contact.id, 999)

    def test_missing_contact(self, test_event):
        with pytest.raises(NotFoundError):
            record_attendance(999, test_event.id)

    def test_lost_insert_race_is_already_recorded(self, make_contact, test_event):
        contact = make_contact()
        winner = record_attendance(contact.id, test_event.id).attendance

        # Simulate the pre-check missing the concurrent insert
        with patch.object(Attendance, "find_for", side_effect=[None, winner]):
            result = record_attendance(contact.id, test_event.id)

        assert result.outcome is AttendanceOutcome.ALREADY_RECORDED
        assert result.attendance is winner
        assert Attendance.query.count() == 1

    def test_database_error(self, make_contact, test_event):
        contact = make_contact()
        with patch.object(db.session, "commit", side_effect=OperationalError("INSERT", {}, Exception("locked"))):
            with pytest.raises(PersistenceFailure):
                record_attendance(contact.id, test_event.id)
        assert Attendance.query.count() == 0


class TestCheckInResolver:
    """Test the check-in state machine"""

    def test_found_contact_path(self, make_contact, test_event):
        contact = make_contact(mobile="9876543210")
        resolver = AttendanceCheckInResolver(test_event.id)

        result = resolver.check_in("9876543210")

        assert result.state is S.DONE
        assert result.contact.id == contact.id
        assert result.outcome is AttendanceOutcome.RECORDED
        assert result.path == [S.AWAITING_INPUT, S.SEARCHING, S.FOUND, S.RECORDING_ATTENDANCE, S.DONE]
        assert Attendance.find_for(contact.id, test_event.id) is not None

    def test_repeat_check_in_is_already_recorded(self, make_contact, test_event):
        make_contact(mobile="9876543210")
        AttendanceCheckInResolver(test_event.id).check_in("9876543210")

        result = AttendanceCheckInResolver(test_event.id).check_in("98765 43210")

        assert result.state is S.DONE
        assert result.outcome is AttendanceOutcome.ALREADY_RECORDED
        assert Attendance.query.count() == 1

    def test_short_number_is_rejected_without_lookup(self, make_contact, test_event):
        make_contact(mobile="9876543210")
        resolver = AttendanceCheckInResolver(test_event.id)

        with patch.object(Contact, "find_all_by_phone") as lookup:
            with pytest.raises(ValidationError):
                resolver.check_in("987654321")
            lookup.assert_not_called()

        assert resolver.state is S.AWAITING_INPUT
        assert Attendance.query.count() == 0

    def test_country_code_input_is_rejected(self, make_contact, test_event):
        make_contact(mobile="+91 98765 43210")
        resolver = AttendanceCheckInResolver(test_event.id)
        with pytest.raises(ValidationError):
            resolver.check_in("+91 98765 43210")

    def test_stored_number_with_country_code_is_found(self, make_contact, test_event):
        contact = make_contact(mobile="+91 98765 43210")
        result = AttendanceCheckInResolver(test_event.id).check_in("9876543210")
        assert result.contact.id == contact.id

    def test_ambiguous_number_resets_state(self, make_contact, test_event):
        make_contact(mobile="9876543210")
        make_contact(mobile="+91 98765 43210")
        resolver = AttendanceCheckInResolver(test_event.id)

        with pytest.raises(AmbiguousContactError):
            resolver.check_in("9876543210")

        assert resolver.state is S.AWAITING_INPUT
        assert Attendance.query.count() == 0

    def test_missing_event(self, make_contact):
        make_contact(mobile="9876543210")
        with pytest.raises(NotFoundError):
            AttendanceCheckInResolver(999).check_in("9876543210")

    def test_not_found_then_create(self, test_event):
        resolver = AttendanceCheckInResolver(test_event.id)

        missing = resolver.check_in("9123456789")
        assert missing.state is S.NOT_FOUND
        assert missing.found is False
        assert missing.to_dict()["mobile"] == "9123456789"

        result = resolver.register_new_contact(_new_contact_data())

        assert result.state is S.DONE
        assert result.contact_created is True
        assert result.outcome is AttendanceOutcome.RECORDED
        assert result.path == [
            S.AWAITING_INPUT,
            S.SEARCHING,
            S.NOT_FOUND,
            S.CREATING_CONTACT,
            S.FOUND,
            S.RECORDING_ATTENDANCE,
            S.DONE,
        ]
        created = Contact.query.filter_by(mobile_normalized="9123456789").one()
        assert Attendance.find_for(created.id, test_event.id) is not None

    def test_created_contact_uses_searched_number(self, test_event):
        resolver = AttendanceCheckInResolver(test_event.id)
        resolver.check_in("9123456789")

        result = resolver.register_new_contact(_new_contact_data(mobile="9000000000"))

        assert result.contact.mobile == "9123456789"

    def test_new_contact_with_configured_country_code(self, app, monkeypatch, test_event):
        monkeypatch.setitem(app.config, "DEFAULT_COUNTRY_CODE", "1")

        result = AttendanceCheckInResolver(test_event.id).register_new_contact(
            _new_contact_data(mobile="+1 (555) 123-4567")
        )

        assert result.contact_created is True
        assert result.contact.mobile == "+1 (555) 123-4567"
        assert result.contact.mobile_normalized == "5551234567"
        assert AttendanceCheckInResolver(test_event.id).check_in("555 123 4567").contact.id == result.contact.id

    def test_fresh_resolver_reuses_existing_contact(self, make_contact, test_event):
        contact = make_contact(mobile="9123456789")

        result = AttendanceCheckInResolver(test_event.id).register_new_contact(_new_contact_data())

        assert result.contact.id == contact.id
        assert result.contact_created is False
        assert Contact.query.count() == 1

    def test_create_after_done_is_rejected(self, make_contact, test_event):
        make_contact(mobile="9876543210")
        resolver = AttendanceCheckInResolver(test_event.id)
        resolver.check_in("9876543210")

        with pytest.raises(ValidationError):
            resolver.register_new_contact(_new_contact_data())
        assert resolver.state is S.AWAITING_INPUT

    def test_invalid_contact_data(self, test_event):
        resolver = AttendanceCheckInResolver(test_event.id)
        resolver.check_in("9123456789")

        def failing_factory(data):
            raise ValueError("Mobile number is required")

        resolver.contact_factory = failing_factory
        with pytest.raises(ValidationError):
            resolver.register_new_contact(_new_contact_data())
        assert resolver.state is S.AWAITING_INPUT
        assert Attendance.query.count() == 0

    def test_lookup_database_error(self, test_event):
        resolver = AttendanceCheckInResolver(test_event.id)
        with patch.object(Contact, "find_all_by_phone", side_effect=OperationalError("SELECT", {}, Exception("gone"))):
            with pytest.raises(PersistenceFailure):
                resolver.check_in("9876543210")
        assert resolver.state is S.AWAITING_INPUT
