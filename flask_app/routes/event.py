# flask_app/routes/event.py
"""
Event and attendance API routes
"""

from flask import current_app, jsonify, request
from flask_login import current_user, login_required
from sqlalchemy import desc, or_

from flask_app.forms import ContactForm, EventForm, event_form_payload
from flask_app.models import Attendance, Event, db
from flask_app.services.attendance_service import AttendanceCheckInResolver, record_attendance
from flask_app.services.errors import ContactServiceError, NotFoundError, PersistenceFailure, ValidationError
from flask_app.utils.error_handler import form_error_response


def _get_event_or_404(event_id):
    event = db.session.get(Event, event_id)
    if event is None:
        raise NotFoundError(f"Event {event_id} not found")
    return event


def register_event_routes(app):
    """Register event management routes"""

    @app.route("/api/events", methods=["GET"])
    @login_required
    def api_events_list():
        """List events, most recent first"""
        try:
            query = Event.query
            search_term = request.args.get("search", "").strip()
            if search_term:
                pattern = f"%{search_term}%"
                query = query.filter(or_(Event.name.ilike(pattern), Event.location.ilike(pattern)))

            events = query.order_by(desc(Event.date), desc(Event.id)).all()
            results = []
            for event in events:
                data = event.to_dict()
                data["attendee_count"] = event.get_attendance_count()
                results.append(data)
            return jsonify(results)

        except Exception as e:
            current_app.logger.error(f"Error in events list: {str(e)}", exc_info=True)
            return jsonify({"message": "An error occurred while loading events."}), 500

    @app.route("/api/events", methods=["POST"])
    @login_required
    def api_events_create():
        form = EventForm.from_json()
        if not form.validate():
            return form_error_response(form)

        event, error = Event.safe_create(**form.event_values())
        if error:
            raise PersistenceFailure(f"Error creating event: {error}")

        current_app.logger.info(f"Event {event.id} '{event.name}' created by {current_user.username}")
        return jsonify(event.to_dict()), 201

    @app.route("/api/events/<int:event_id>", methods=["GET"])
    @login_required
    def api_events_get(event_id):
        event = _get_event_or_404(event_id)
        data = event.to_dict()
        data["attendee_count"] = event.get_attendance_count()
        return jsonify(data)

    @app.route("/api/events/<int:event_id>", methods=["PUT"])
    @login_required
    def api_events_update(event_id):
        event = _get_event_or_404(event_id)

        payload = event_form_payload(event)
        body = request.get_json(silent=True) or {}
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object.")
        payload.update(body)

        form = EventForm.from_json(payload)
        if not form.validate():
            return form_error_response(form)

        success, error = event.safe_update(**form.event_values())
        if not success:
            raise PersistenceFailure(f"Error updating event: {error}")

        current_app.logger.info(f"Event {event.id} updated by {current_user.username}")
        return jsonify(event.to_dict())

    @app.route("/api/events/<int:event_id>", methods=["DELETE"])
    @login_required
    def api_events_delete(event_id):
        event = _get_event_or_404(event_id)
        success, error = event.safe_delete()
        if not success:
            raise PersistenceFailure(f"Error deleting event: {error}")
        current_app.logger.info(f"Event {event_id} deleted by {current_user.username}")
        return "", 204

    @app.route("/api/events/<int:event_id>/attendees", methods=["GET"])
    @login_required
    def api_events_attendees(event_id):
        _get_event_or_404(event_id)
        records = Attendance.query.filter_by(event_id=event_id).order_by(Attendance.created_at, Attendance.id).all()
        return jsonify([record.to_dict(include_contact=True) for record in records])

    @app.route("/api/events/<int:event_id>/attendees", methods=["POST"])
    @login_required
    def api_events_attendees_add(event_id):
        """Record attendance for an existing contact; repeating it is not an error"""
        data = request.get_json(silent=True) or {}
        raw_contact_id = data.get("contactId", data.get("contact_id")) if isinstance(data, dict) else None
        if raw_contact_id in (None, ""):
            raise ValidationError("contactId is required.")
        try:
            contact_id = int(raw_contact_id)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid contact id: {raw_contact_id!r}") from None

        recorded = record_attendance(contact_id, event_id)
        payload = recorded.attendance.to_dict()
        payload["outcome"] = recorded.outcome.value
        return jsonify(payload), 201 if recorded.created else 200

    @app.route("/api/events/<int:event_id>/check-in", methods=["POST"])
    @login_required
    def api_events_check_in(event_id):
        """
        Check a person in by mobile number.

        A match records attendance (``found`` is true); no match returns the
        normalized number so the caller can register a new contact.
        """
        data = request.get_json(silent=True) or {}
        mobile = data.get("mobile") if isinstance(data, dict) else None

        resolver = AttendanceCheckInResolver(event_id)
        try:
            result = resolver.check_in(mobile)
        except ContactServiceError:
            raise
        except Exception as e:
            current_app.logger.error(f"Unexpected check-in error for event {event_id}: {str(e)}", exc_info=True)
            return jsonify({"message": "An error occurred during check-in."}), 500

        return jsonify(result.to_dict())

    @app.route("/api/events/<int:event_id>/check-in/new-contact", methods=["POST"])
    @login_required
    def api_events_check_in_new_contact(event_id):
        """Register the person as a new contact and record their attendance"""
        _get_event_or_404(event_id)
        form = ContactForm.from_json()
        if not form.validate():
            return form_error_response(form)

        resolver = AttendanceCheckInResolver(event_id)
        result = resolver.register_new_contact(form.contact_values())
        return jsonify(result.to_dict()), 201 if result.contact_created else 200
