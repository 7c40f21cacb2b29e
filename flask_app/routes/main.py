# flask_app/routes/main.py
"""
Health and metrics endpoints
"""

from flask import Response, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from flask_app.models import db
from flask_app.utils.metrics import render_latest


def register_main_routes(app):
    """Register monitoring routes"""

    @app.route(app.config.get("HEALTH_CHECK_ENDPOINT", "/health"), methods=["GET"])
    def health():
        try:
            db.session.execute(text("SELECT 1"))
            database = "ok"
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Health check database error: {str(e)}")
            database = "error"

        status_code = 200 if database == "ok" else 503
        return (
            jsonify(
                {
                    "status": "healthy" if status_code == 200 else "unhealthy",
                    "database": database,
                    "app": current_app.config.get("APP_NAME"),
                    "version": current_app.config.get("APP_VERSION"),
                }
            ),
            status_code,
        )

    @app.route(app.config.get("METRICS_ENDPOINT", "/metrics"), methods=["GET"])
    def metrics():
        if not current_app.config.get("MONITORING_ENABLED", False):
            return jsonify({"message": "Metrics are disabled."}), 404
        payload, content_type = render_latest()
        return Response(payload, content_type=content_type)
