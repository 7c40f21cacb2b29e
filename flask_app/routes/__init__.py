# flask_app/routes/__init__.py
"""
Application routes package
"""

from .auth import register_auth_routes
from .contact import register_contact_routes
from .event import register_event_routes
from .main import register_main_routes
from .task import register_task_routes


def init_routes(app):
    """Initialize all application routes"""
    register_main_routes(app)
    register_auth_routes(app)
    register_contact_routes(app)
    register_event_routes(app)
    register_task_routes(app)
