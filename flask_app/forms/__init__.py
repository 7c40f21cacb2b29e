# flask_app/forms/__init__.py
"""
WTForms package
"""

from .auth import LoginForm
from .base import ApiForm, json_formdata
from .contact import ActivityForm, ContactForm, contact_form_payload
from .event import EventForm, event_form_payload
from .task import CampaignForm, FollowUpForm, TaskFeedbackForm

__all__ = [
    "ApiForm",
    "json_formdata",
    "LoginForm",
    "ContactForm",
    "ActivityForm",
    "contact_form_payload",
    "EventForm",
    "event_form_payload",
    "CampaignForm",
    "FollowUpForm",
    "TaskFeedbackForm",
]
