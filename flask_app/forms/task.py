# flask_app/forms/task.py
"""
Forms for campaigns, task feedback and contact follow-ups
"""

from wtforms import DateField, DateTimeField, SelectField, StringField, TextAreaField
from wtforms.validators import DataRequired, Length, Optional

from .base import ApiForm


class CampaignForm(ApiForm):
    """Campaign metadata; the contact selection is passed alongside as a list of ids"""

    json_aliases = {"dueDate": "due_date"}

    name = StringField(
        "Campaign Name",
        validators=[
            DataRequired(message="Campaign name is required."),
            Length(max=200, message="Campaign name must be less than 200 characters."),
        ],
    )
    description = TextAreaField("Description", validators=[Optional(), Length(max=5000)])
    due_date = DateTimeField(
        "Due Date",
        validators=[DataRequired(message="Due date is required.")],
        format=["%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M", "%Y-%m-%d"],
    )


class TaskFeedbackForm(ApiForm):
    """Outcome of calling one contact on a task"""

    feedback = TextAreaField("Feedback", validators=[Optional(), Length(max=5000)])
    response = SelectField("Response", validators=[Optional()], choices=[], default="")

    def __init__(self, *args, **kwargs):
        super(TaskFeedbackForm, self).__init__(*args, **kwargs)
        from flask_app.models import TaskResponse

        self.response.choices = [("", "None")] + [(r.value, r.value) for r in TaskResponse]


class FollowUpForm(ApiForm):
    """Follow-up note against a contact"""

    json_aliases = {"dueDate": "due_date"}

    notes = TextAreaField(
        "Notes",
        validators=[
            DataRequired(message="Notes are required."),
            Length(max=5000, message="Notes must be less than 5000 characters."),
        ],
    )
    status = SelectField("Status", choices=[], default="pending")
    due_date = DateField("Due Date", validators=[Optional()], format="%Y-%m-%d")

    def __init__(self, *args, **kwargs):
        super(FollowUpForm, self).__init__(*args, **kwargs)
        from flask_app.models import FollowUpStatus
        from flask_app.models.contact.enums import enum_choices

        self.status.choices = enum_choices(FollowUpStatus)
