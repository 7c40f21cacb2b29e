# flask_app/routes/contact.py
"""
Contact API routes
"""

from datetime import datetime, time

from flask import current_app, jsonify, request
from flask_login import current_user, login_required
from sqlalchemy import String, cast, or_

from flask_app.forms import ActivityForm, ContactForm, FollowUpForm, contact_form_payload
from flask_app.models import (
    Activity,
    Attendance,
    Contact,
    ContactCategory,
    ContactPriority,
    ContactStatus,
    FollowUp,
    FollowUpStatus,
    db,
)
from flask_app.services.attendance_service import find_contact_by_phone, normalize_lookup_phone
from flask_app.services.bulk_update_service import BulkUpdateService
from flask_app.services.errors import (
    ContactServiceError,
    InvalidValueError,
    NotFoundError,
    PersistenceFailure,
    ValidationError,
)
from flask_app.utils.error_handler import form_error_response
from flask_app.utils.permissions import visible_contacts_query
from flask_app.utils.phone import normalize_phone

FILTER_ENUMS = {
    "category": ContactCategory,
    "priority": ContactPriority,
    "status": ContactStatus,
}


def _parse_enum_filter(name, raw_value):
    enum_cls = FILTER_ENUMS[name]
    try:
        return enum_cls(raw_value)
    except ValueError:
        raise InvalidValueError(
            f"Invalid {name} '{raw_value}'. Expected one of: {', '.join(m.value for m in enum_cls)}."
        ) from None


def _get_contact_or_404(contact_id):
    contact = db.session.get(Contact, contact_id)
    if contact is None:
        raise NotFoundError(f"Contact {contact_id} not found")
    return contact


def _ensure_unique_mobile(mobile, exclude_id=None):
    normalized = normalize_phone(mobile)
    if normalized is None:
        return
    existing = [c.id for c in Contact.find_all_by_phone(normalized) if c.id != exclude_id]
    if existing:
        raise ValidationError(
            "Contact with this mobile number already exists.",
            details={"contact_ids": existing},
        )


def register_contact_routes(app):
    """Register contact API routes"""

    @app.route("/api/contacts", methods=["GET"])
    @login_required
    def api_contacts_list():
        """List contacts with optional search and filters"""
        try:
            query = visible_contacts_query(current_user)

            search_term = request.args.get("search", "").strip()
            if search_term:
                pattern = f"%{search_term}%"
                query = query.filter(
                    or_(
                        Contact.name.ilike(pattern),
                        Contact.mobile.ilike(pattern),
                        Contact.email.ilike(pattern),
                        Contact.area.ilike(pattern),
                        Contact.city.ilike(pattern),
                    )
                )

            for name in FILTER_ENUMS:
                raw_value = request.args.get(name, "").strip()
                if raw_value:
                    query = query.filter(getattr(Contact, name) == _parse_enum_filter(name, raw_value))

            city = request.args.get("city", "").strip()
            if city:
                query = query.filter(Contact.city.ilike(city))

            event_id = request.args.get("event", type=int)
            if event_id:
                query = query.join(Attendance, Attendance.contact_id == Contact.id).filter(
                    Attendance.event_id == event_id
                )

            assigned = request.args.get("assignedTo", "").strip()
            if assigned:
                query = query.filter(cast(Contact.assigned_to, String).contains(f'"{assigned}"', autoescape=True))

            contacts = query.order_by(Contact.name, Contact.id).all()
            current_app.logger.debug(f"Contact list returned {len(contacts)} contacts for {current_user.username}")
            return jsonify([contact.to_dict() for contact in contacts])

        except ContactServiceError:
            raise
        except Exception as e:
            current_app.logger.error(f"Error listing contacts: {str(e)}", exc_info=True)
            return jsonify({"message": "An error occurred while loading contacts."}), 500

    @app.route("/api/contacts/search", methods=["GET"])
    @login_required
    def api_contacts_search_by_mobile():
        """Look a contact up by mobile number; null when there is no match"""
        normalized = normalize_lookup_phone(request.args.get("mobile", ""))
        contact = find_contact_by_phone(normalized)
        return jsonify(contact.to_dict() if contact is not None else None)

    @app.route("/api/contacts", methods=["POST"])
    @login_required
    def api_contacts_create():
        form = ContactForm.from_json()
        if not form.validate():
            return form_error_response(form)

        values = form.contact_values()
        _ensure_unique_mobile(values["mobile"])

        contact, error = Contact.safe_create(**values)
        if error:
            raise PersistenceFailure(f"Error creating contact: {error}")

        current_app.logger.info(f"Contact {contact.id} created by {current_user.username}")
        return jsonify(contact.to_dict()), 201

    @app.route("/api/contacts/<int:contact_id>", methods=["GET"])
    @login_required
    def api_contacts_get(contact_id):
        return jsonify(_get_contact_or_404(contact_id).to_dict())

    @app.route("/api/contacts/<int:contact_id>", methods=["PUT"])
    @login_required
    def api_contacts_update(contact_id):
        """Update a contact; fields missing from the body keep their current value"""
        contact = _get_contact_or_404(contact_id)

        payload = contact_form_payload(contact)
        body = request.get_json(silent=True) or {}
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object.")
        payload.update(body)

        form = ContactForm.from_json(payload, current_assignees=list(contact.assigned_to))
        if not form.validate():
            return form_error_response(form)

        values = form.contact_values()
        if normalize_phone(values["mobile"]) != contact.mobile_normalized:
            _ensure_unique_mobile(values["mobile"], exclude_id=contact.id)

        success, error = contact.safe_update(**values)
        if not success:
            raise PersistenceFailure(f"Error updating contact: {error}")

        current_app.logger.info(f"Contact {contact.id} updated by {current_user.username}")
        return jsonify(contact.to_dict())

    @app.route("/api/contacts/<int:contact_id>", methods=["DELETE"])
    @login_required
    def api_contacts_delete(contact_id):
        contact = _get_contact_or_404(contact_id)
        success, error = contact.safe_delete()
        if not success:
            raise PersistenceFailure(f"Error deleting contact: {error}")
        current_app.logger.info(f"Contact {contact_id} deleted by {current_user.username}")
        return "", 204

    @app.route("/api/contacts/bulk-update", methods=["POST"])
    @login_required
    def api_contacts_bulk_update():
        """
        Apply one field change across the selected contacts.

        Body: ``{"contactIds": [...], "field": "...", "value": ..., "mode": "replace" | "add"}``.
        Per-contact failures are reported in the response, not as an error status.
        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object.")

        service = BulkUpdateService(max_contacts=current_app.config.get("BULK_UPDATE_MAX_CONTACTS"))
        result = service.bulk_update(
            data.get("contactIds", data.get("contact_ids")),
            data.get("field"),
            data.get("value"),
            data.get("mode"),
        )
        return jsonify(result.to_dict())

    @app.route("/api/contacts/<int:contact_id>/events", methods=["GET"])
    @login_required
    def api_contacts_events(contact_id):
        _get_contact_or_404(contact_id)
        records = (
            Attendance.query.filter_by(contact_id=contact_id).order_by(Attendance.created_at.desc()).all()
        )
        return jsonify([record.to_dict(include_event=True) for record in records])

    @app.route("/api/contacts/<int:contact_id>/followups", methods=["GET"])
    @login_required
    def api_contacts_followups(contact_id):
        _get_contact_or_404(contact_id)
        follow_ups = (
            FollowUp.query.filter_by(contact_id=contact_id)
            .order_by(FollowUp.created_at.desc(), FollowUp.id.desc())
            .all()
        )
        return jsonify([follow_up.to_dict() for follow_up in follow_ups])

    @app.route("/api/contacts/<int:contact_id>/followups", methods=["POST"])
    @login_required
    def api_contacts_followups_create(contact_id):
        _get_contact_or_404(contact_id)
        form = FollowUpForm.from_json()
        if not form.validate():
            return form_error_response(form)

        status = FollowUpStatus(form.status.data or FollowUpStatus.PENDING.value)
        follow_up, error = FollowUp.safe_create(
            contact_id=contact_id,
            notes=form.notes.data.strip(),
            status=status,
            due_date=datetime.combine(form.due_date.data, time.min) if form.due_date.data else None,
            created_by=current_user.username,
        )
        if error:
            raise PersistenceFailure(f"Error creating follow-up: {error}")

        current_app.logger.info(f"Follow-up {follow_up.id} added to contact {contact_id}")
        return jsonify(follow_up.to_dict()), 201

    @app.route("/api/contacts/<int:contact_id>/activities", methods=["GET"])
    @login_required
    def api_contacts_activities(contact_id):
        _get_contact_or_404(contact_id)
        activities = (
            Activity.query.filter_by(contact_id=contact_id)
            .order_by(Activity.created_at.desc(), Activity.id.desc())
            .all()
        )
        return jsonify([activity.to_dict() for activity in activities])

    @app.route("/api/contacts/<int:contact_id>/activities", methods=["POST"])
    @login_required
    def api_contacts_activities_create(contact_id):
        _get_contact_or_404(contact_id)
        form = ActivityForm.from_json()
        if not form.validate():
            return form_error_response(form)

        activity, error = Activity.safe_create(
            contact_id=contact_id,
            title=form.title.data.strip(),
            notes=form.notes.data.strip(),
            activity_date=form.activity_date.data,
            created_by=current_user.username,
        )
        if error:
            raise PersistenceFailure(f"Error creating activity: {error}")

        current_app.logger.info(f"Activity {activity.id} added to contact {contact_id}")
        return jsonify(activity.to_dict()), 201
