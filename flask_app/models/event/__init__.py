# flask_app/models/event/__init__.py
"""
Event models package.
"""

from .models import Attendance, Event

__all__ = [
    "Event",
    "Attendance",
]
