# flask_app/models/contact/__init__.py
"""
Contact models package.
"""

from .activity import Activity
from .assignment import AssignmentList, AssignmentListType
from .base import Contact
from .enums import (
    ContactCategory,
    ContactPriority,
    ContactStatus,
    FollowUpStatus,
    Occupation,
    Sex,
    Team,
)
from .follow_up import FollowUp

__all__ = [
    "Contact",
    "FollowUp",
    "Activity",
    "AssignmentList",
    "AssignmentListType",
    # Enums
    "ContactCategory",
    "ContactPriority",
    "ContactStatus",
    "FollowUpStatus",
    "Occupation",
    "Sex",
    "Team",
]
