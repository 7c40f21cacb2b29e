"""Tests for health, metrics, logging setup and JSON error handling"""

import json
import logging
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from flask_app.services.errors import PersistenceFailure
from flask_app.utils.logging_config import JsonFormatter, setup_logging


class TestHealthCheck:
    """Test the health endpoint"""

    def test_healthy(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.get_json()
        assert body["status"] == "healthy"
        assert body["database"] == "ok"
        assert body["app"] == "Volunteer Contact Manager"

    def test_database_error(self, client):
        with patch("flask_app.routes.main.db.session.execute") as mock_execute:
            mock_execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection lost"))
            response = client.get("/health")

        assert response.status_code == 503
        assert response.get_json()["status"] == "unhealthy"


class TestMetricsEndpoint:
    """Test the Prometheus endpoint"""

    def test_disabled(self, client):
        assert client.get("/metrics").status_code == 404

    def test_enabled_exposes_service_counters(self, app, logged_in_staff, make_contact, test_event):
        client, _ = logged_in_staff
        app.config["MONITORING_ENABLED"] = True
        make_contact(mobile="9876543210")
        client.post(f"/api/events/{test_event.id}/check-in", json={"mobile": "9876543210"})

        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.content_type.startswith("text/plain")
        text = response.get_data(as_text=True)
        assert 'attendance_check_in_outcomes_total{outcome="recorded"}' in text
        assert "contacts_bulk_update_duration_seconds" in text


class TestErrorHandlers:
    """Test JSON error responses"""

    def test_unknown_route(self, client):
        response = client.get("/does-not-exist")
        assert response.status_code == 404
        assert response.get_json()["error"] == "not_found"

    def test_method_not_allowed(self, client):
        assert client.delete("/health").status_code == 405

    def test_persistence_failure_is_500(self, logged_in_staff, make_contact):
        client, _ = logged_in_staff
        contact = make_contact()
        with patch("flask_app.models.Contact.safe_delete", return_value=(False, "disk full")):
            response = client.delete(f"/api/contacts/{contact.id}")

        assert response.status_code == 500
        assert response.get_json()["error"] == "persistence_failure"

    def test_service_error_to_dict(self):
        error = PersistenceFailure("Could not save.", details={"contact_id": 3})
        assert error.to_dict() == {
            "message": "Could not save.",
            "error": "persistence_failure",
            "details": {"contact_id": 3},
        }


class TestLoggingSetup:
    """Test setup_logging"""

    def _configured(self, app):
        return [h for h in app.logger.handlers if getattr(h, "_configured_by_setup_logging", False)]

    def test_repeated_setup_does_not_stack_handlers(self, app):
        app.config.update(ENABLE_CONSOLE_LOGGING=True, ENABLE_FILE_LOGGING=False)
        setup_logging(app)
        setup_logging(app)
        assert len(self._configured(app)) == 1

    def test_file_logging(self, app, tmp_path):
        app.config.update(
            ENABLE_CONSOLE_LOGGING=False,
            ENABLE_FILE_LOGGING=True,
            LOG_DIR=str(tmp_path),
            LOG_FORMAT="json",
            LOG_LEVEL="INFO",
        )
        setup_logging(app)
        app.logger.info("contact saved")
        for handler in self._configured(app):
            handler.flush()

        lines = (tmp_path / "app.log").read_text(encoding="utf-8").splitlines()
        record = json.loads(lines[-1])
        assert record["message"] == "contact saved"
        assert record["level"] == "INFO"
        assert app.logger.level == logging.INFO

    def test_json_formatter_includes_request(self, app):
        record = logging.LogRecord("app", logging.WARNING, __file__, 1, "bad input", None, None)
        with app.test_request_context("/api/contacts", method="POST"):
            data = json.loads(JsonFormatter().format(record))
        assert data["method"] == "POST"
        assert data["path"] == "/api/contacts"
        assert data["message"] == "bad input"
