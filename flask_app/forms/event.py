# flask_app/forms/event.py
"""
Forms for event management
"""

from wtforms import DateField, StringField, TextAreaField
from wtforms.validators import DataRequired, Length, Optional

from .base import ApiForm


class EventForm(ApiForm):
    """Create or update an event"""

    name = StringField(
        "Event Name",
        validators=[
            DataRequired(message="Event name is required."),
            Length(max=200, message="Event name must be less than 200 characters."),
        ],
    )
    date = DateField("Date", validators=[DataRequired(message="Event date is required.")], format="%Y-%m-%d")
    location = StringField(
        "Location",
        validators=[
            DataRequired(message="Location is required."),
            Length(max=300, message="Location must be less than 300 characters."),
        ],
    )
    description = TextAreaField(
        "Description",
        validators=[Optional(), Length(max=5000, message="Description must be less than 5000 characters.")],
    )

    def event_values(self):
        return {
            "name": self.name.data.strip(),
            "date": self.date.data,
            "location": self.location.data.strip(),
            "description": (self.description.data or "").strip() or None,
        }


def event_form_payload(event):
    data = event.to_dict()
    data.pop("id", None)
    data.pop("is_past", None)
    data.pop("created_at", None)
    return data
