# flask_app/forms/contact.py
"""
Forms for contact management
"""

from wtforms import DateTimeField, SelectField, SelectMultipleField, StringField, TextAreaField
from wtforms.validators import DataRequired, Email, Length, Optional, ValidationError

from flask_app.utils.phone import normalize_phone, phone_settings

from .base import ApiForm


class ContactForm(ApiForm):
    """
    Create or update a contact.

    ``current_assignees`` are the usernames already on the contact being edited;
    they stay valid choices after their accounts are deactivated.
    """

    json_aliases = {
        "assignedTo": "assigned_to",
        "countryCode": "country_code",
        "maritalStatus": "marital_status",
    }

    name = StringField(
        "Name",
        validators=[
            DataRequired(message="Name is required."),
            Length(max=200, message="Name must be less than 200 characters."),
        ],
    )
    mobile = StringField("Mobile", validators=[DataRequired(message="Mobile number is required.")])
    country_code = StringField("Country Code", validators=[Optional(), Length(max=5)], default="+91")
    email = StringField(
        "Email",
        validators=[
            Optional(),
            Email(message="Invalid email address."),
            Length(max=255, message="Email must be less than 255 characters."),
        ],
    )

    category = SelectField("Category", validators=[DataRequired(message="Category is required.")], choices=[])
    priority = SelectField("Priority", validators=[DataRequired(message="Priority is required.")], choices=[])
    status = SelectField("Status", choices=[], default="active")
    team = SelectField("Team", validators=[Optional()], choices=[], default="")
    occupation = SelectField("Occupation", choices=[], default="other")
    sex = SelectField("Sex", validators=[Optional()], choices=[], default="")
    assigned_to = SelectMultipleField("Assigned To", choices=[])

    area = StringField("Area", validators=[DataRequired(message="Area is required."), Length(max=200)])
    city = StringField("City", validators=[DataRequired(message="City is required."), Length(max=100)])
    state = StringField("State", validators=[DataRequired(message="State is required."), Length(max=100)])
    nation = StringField("Nation", validators=[Optional(), Length(max=100)], default="India")
    pincode = StringField("Pincode", validators=[Optional(), Length(max=10)])
    organisation = StringField("Organisation", validators=[Optional(), Length(max=200)])
    marital_status = StringField("Marital Status", validators=[Optional(), Length(max=50)])
    notes = TextAreaField("Notes", validators=[Optional(), Length(max=5000)])

    def __init__(self, *args, current_assignees=None, **kwargs):
        super(ContactForm, self).__init__(*args, **kwargs)
        # Import here to avoid circular imports
        from flask_app.models import ContactCategory, ContactPriority, ContactStatus, Occupation, Sex, Team, User
        from flask_app.models.contact.enums import enum_choices

        self.category.choices = enum_choices(ContactCategory)
        self.priority.choices = enum_choices(ContactPriority)
        self.status.choices = enum_choices(ContactStatus)
        self.team.choices = [("", "None")] + enum_choices(Team)
        self.occupation.choices = enum_choices(Occupation)
        self.sex.choices = [("", "None")] + enum_choices(Sex)

        staff = User.query.filter_by(is_active=True).order_by(User.username).all()
        self.assigned_to.choices = [(user.username, user.get_full_name()) for user in staff]
        active = {user.username for user in staff}
        for username in current_assignees or []:
            if username not in active:
                self.assigned_to.choices.append((username, username))

    def validate_mobile(self, field):
        """Accept a national number, optionally prefixed with the configured country code"""
        if field.data and normalize_phone(field.data) is None:
            raise ValidationError(f"Mobile number must have {phone_settings()[1]} digits.")

    def contact_values(self):
        """Column values for Contact, with enum strings converted"""
        from flask_app.models import ContactCategory, ContactPriority, ContactStatus, Occupation, Sex, Team

        def clean(value):
            value = (value or "").strip()
            return value or None

        return {
            "name": self.name.data.strip(),
            "mobile": self.mobile.data.strip(),
            "country_code": clean(self.country_code.data) or "+91",
            "email": clean(self.email.data),
            "category": ContactCategory(self.category.data),
            "priority": ContactPriority(self.priority.data),
            "status": ContactStatus(self.status.data or ContactStatus.ACTIVE.value),
            "team": Team(self.team.data) if self.team.data else None,
            "occupation": Occupation(self.occupation.data or Occupation.OTHER.value),
            "sex": Sex(self.sex.data) if self.sex.data else None,
            "assigned_to": list(self.assigned_to.data or []),
            "area": self.area.data.strip(),
            "city": self.city.data.strip(),
            "state": self.state.data.strip(),
            "nation": clean(self.nation.data) or "India",
            "pincode": clean(self.pincode.data),
            "organisation": clean(self.organisation.data),
            "marital_status": clean(self.marital_status.data),
            "notes": clean(self.notes.data),
        }


def contact_form_payload(contact):
    """Current values of a contact in ContactForm's JSON shape, for partial updates"""
    data = contact.to_dict()
    data.pop("id", None)
    data.pop("created_at", None)
    return data


class ActivityForm(ApiForm):
    """Activity logged against a contact"""

    json_aliases = {"activityDate": "activity_date"}

    title = StringField(
        "Title",
        validators=[
            DataRequired(message="Title is required."),
            Length(max=200, message="Title must be less than 200 characters."),
        ],
    )
    notes = TextAreaField(
        "Notes",
        validators=[
            DataRequired(message="Notes are required."),
            Length(max=5000, message="Notes must be less than 5000 characters."),
        ],
    )
    activity_date = DateTimeField(
        "Activity Date",
        validators=[Optional()],
        format=["%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M", "%Y-%m-%d"],
    )
