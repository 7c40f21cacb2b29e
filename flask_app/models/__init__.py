# flask_app/models/__init__.py
"""
Database models package
"""

from .base import BaseModel, db
from .contact import (
    Activity,
    AssignmentList,
    AssignmentListType,
    Contact,
    ContactCategory,
    ContactPriority,
    ContactStatus,
    FollowUp,
    FollowUpStatus,
    Occupation,
    Sex,
    Team,
)
from .event import Attendance, Event
from .task import Task, TaskFeedback, TaskResponse
from .user import ROLE_ADMIN, ROLE_STAFF, User

__all__ = [
    "db",
    "BaseModel",
    "User",
    "ROLE_ADMIN",
    "ROLE_STAFF",
    # Contact models
    "Contact",
    "FollowUp",
    "Activity",
    "AssignmentList",
    "AssignmentListType",
    # Contact enums
    "ContactCategory",
    "ContactPriority",
    "ContactStatus",
    "FollowUpStatus",
    "Occupation",
    "Sex",
    "Team",
    # Event models
    "Event",
    "Attendance",
    # Task models
    "Task",
    "TaskFeedback",
    "TaskResponse",
]
