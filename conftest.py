# conftest.py

import os
import tempfile
from datetime import date

import pytest
from werkzeug.security import generate_password_hash

# Set testing environment BEFORE importing app to prevent database corruption
# This ensures app.py uses TestingConfig when imported
os.environ["FLASK_ENV"] = "testing"

# Now import app and other modules after environment is set
from app import app as flask_app
from flask_app.models import (
    ROLE_ADMIN,
    ROLE_STAFF,
    Contact,
    ContactCategory,
    ContactPriority,
    Event,
    User,
    db,
)


@pytest.fixture(scope="function")
def app():
    """Create and configure a test Flask application"""
    import uuid

    # Create a unique temporary database file for each test
    db_fd, temp_db = tempfile.mkstemp(suffix=f"_{uuid.uuid4().hex[:8]}.db")

    try:
        flask_app.config.update(
            {
                "TESTING": True,
                "WTF_CSRF_ENABLED": False,
                "SQLALCHEMY_DATABASE_URI": f"sqlite:///{temp_db}",
                "SQLALCHEMY_ECHO": False,
                "SECRET_KEY": "test-secret-key-for-testing-only",
                "MONITORING_ENABLED": False,
                "ENABLE_FILE_LOGGING": False,
                "ENABLE_CONSOLE_LOGGING": True,
                "LOG_LEVEL": "DEBUG",
                "BULK_UPDATE_MAX_CONTACTS": 1000,
                "DEFAULT_COUNTRY_CODE": "91",
                "PHONE_NUMBER_LENGTH": 10,
            }
        )

        # Re-initialize logging with updated config to pick up LOG_LEVEL=DEBUG
        from flask_app.utils.logging_config import setup_logging

        setup_logging(flask_app)

        with flask_app.app_context():
            # Drop any existing tables to ensure clean state
            db.drop_all()
            db.create_all()
            yield flask_app
            db.session.remove()
            db.session.close()
            db.drop_all()
    finally:
        # Always close and remove the temporary database file, even on error
        try:
            os.close(db_fd)
        except OSError:
            pass
        try:
            if os.path.exists(temp_db):
                os.unlink(temp_db)
        except OSError:
            pass


@pytest.fixture(autouse=True)
def app_context(app):
    """Automatically provide app context for all tests"""
    with app.app_context():
        yield


@pytest.fixture
def client(app):
    """Create a test client for the Flask application"""
    return app.test_client()


def _make_user(username, password, role=ROLE_STAFF, **kwargs):
    user = User(
        username=username,
        email=f"{username}@example.com",
        password_hash=generate_password_hash(password),
        first_name=username.title(),
        last_name="Staff",
        role=role,
        is_active=kwargs.pop("is_active", True),
        **kwargs,
    )
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def staff_users(app):
    """Three active staff members: alice, bob and carol"""
    return {name: _make_user(name, f"{name}pass123") for name in ("alice", "bob", "carol")}


@pytest.fixture
def admin_user(app):
    return _make_user("admin", "adminpass123", role=ROLE_ADMIN)


@pytest.fixture
def inactive_user(app):
    return _make_user("inactiveuser", "userpass123", is_active=False)


@pytest.fixture
def logged_in_staff(client, staff_users):
    """Client logged in as alice"""
    client.post("/login", json={"username": "alice", "password": "alicepass123"})
    return client, staff_users["alice"]


@pytest.fixture
def logged_in_admin(client, admin_user, staff_users):
    """Client logged in as an admin; staff users exist for assignments"""
    client.post("/login", json={"username": "admin", "password": "adminpass123"})
    return client, admin_user


@pytest.fixture
def make_contact(app):
    """Factory creating committed contacts with sensible defaults"""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        values = {
            "name": f"Contact {counter['n']}",
            "mobile": f"98765{counter['n']:05d}",
            "category": ContactCategory.VOLUNTEER,
            "priority": ContactPriority.MEDIUM,
            "area": "Kothrud",
            "city": "Pune",
            "state": "Maharashtra",
        }
        values.update(overrides)
        contact = Contact(**values)
        db.session.add(contact)
        db.session.commit()
        return contact

    return _make


@pytest.fixture
def test_event(app):
    event = Event(name="Town Hall", date=date(2025, 3, 1), location="Pune")
    db.session.add(event)
    db.session.commit()
    return event


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers and ensure testing environment"""
    os.environ["FLASK_ENV"] = "testing"

    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers"""
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(pytest.mark.slow)
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
