from datetime import date

from flask_app.forms import ActivityForm, ContactForm, EventForm, FollowUpForm, json_formdata
from flask_app.models import ContactCategory, ContactStatus, Occupation


class TestJsonFormdata:
    """Test JSON to form data conversion"""

    def test_aliases_lists_and_nulls(self):
        formdata = json_formdata(
            {"assignedTo": ["alice", None, "bob"], "email": None, "name": "Asha", "active": True},
            {"assignedTo": "assigned_to"},
        )
        assert formdata.getlist("assigned_to") == ["alice", "bob"]
        assert "email" not in formdata
        assert formdata["name"] == "Asha"
        assert formdata["active"] == "y"

    def test_non_object_payload(self):
        assert not json_formdata(["a", "b"])


class TestContactForm:
    """Test ContactForm"""

    def _form(self, current_assignees=None, **overrides):
        payload = {
            "name": " Asha ",
            "mobile": "+91 98765 43210",
            "category": "volunteer",
            "priority": "medium",
            "area": "Kothrud",
            "city": "Pune",
            "state": "Maharashtra",
        }
        payload.update(overrides)
        return ContactForm.from_json(payload, current_assignees=current_assignees)

    def test_valid_defaults(self, app, staff_users):
        with app.test_request_context():
            form = self._form(assignedTo=["bob"])
            assert form.validate(), form.errors
            values = form.contact_values()

        assert values["name"] == "Asha"
        assert values["category"] is ContactCategory.VOLUNTEER
        assert values["status"] is ContactStatus.ACTIVE
        assert values["occupation"] is Occupation.OTHER
        assert values["team"] is None
        assert values["assigned_to"] == ["bob"]
        assert values["email"] is None

    def test_assignee_must_be_active_staff(self, app, staff_users, inactive_user):
        with app.test_request_context():
            form = self._form(assignedTo=["inactiveuser"])
            assert not form.validate()
            assert "assigned_to" in form.errors

    def test_current_assignees_stay_valid(self, app, staff_users, inactive_user):
        with app.test_request_context():
            form = self._form(current_assignees=["inactiveuser"], assignedTo=["inactiveuser", "alice"])
            assert form.validate(), form.errors
            assert form.contact_values()["assigned_to"] == ["inactiveuser", "alice"]

    def test_mobile_follows_configured_country_code(self, app, monkeypatch):
        monkeypatch.setitem(app.config, "DEFAULT_COUNTRY_CODE", "44")
        with app.test_request_context():
            form = self._form(mobile="+44 7700 900123")
            form.validate()
            assert "mobile" not in form.errors

            form = self._form(mobile="+91 98765 43210")
            assert not form.validate()
            assert form.errors["mobile"] == ["Mobile number must have 10 digits."]

    def test_bad_mobile_and_email(self, app):
        with app.test_request_context():
            form = self._form(mobile="98765", email="not-an-email")
            assert not form.validate()
            assert {"mobile", "email"} <= set(form.errors)


class TestEventFollowUpAndActivityForms:
    """Test EventForm, FollowUpForm and ActivityForm"""

    def test_event_values(self, app):
        with app.test_request_context():
            form = EventForm.from_json({"name": "Rally ", "date": "2025-05-01", "location": "Pune", "description": " "})
            assert form.validate(), form.errors
            assert form.event_values() == {
                "name": "Rally",
                "date": date(2025, 5, 1),
                "location": "Pune",
                "description": None,
            }

    def test_follow_up_status_choices(self, app):
        with app.test_request_context():
            form = FollowUpForm.from_json({"notes": "Call", "status": "someday"})
            assert not form.validate()
            assert "status" in form.errors

    def test_activity_values(self, app):
        with app.test_request_context():
            form = ActivityForm.from_json({"title": "Visit", "notes": "Met at home", "activityDate": "2025-02-14"})
            assert form.validate(), form.errors
            assert form.activity_date.data.isoformat() == "2025-02-14T00:00:00"

            form = ActivityForm.from_json({"title": "", "notes": ""})
            assert not form.validate()
            assert {"title", "notes"} <= set(form.errors)
