# flask_app/routes/task.py
"""
Campaign and task API routes
"""

from flask import current_app, jsonify, request
from flask_login import current_user, login_required
from sqlalchemy.exc import SQLAlchemyError

from flask_app.forms import CampaignForm, TaskFeedbackForm
from flask_app.models import Task, TaskFeedback, TaskResponse, db
from flask_app.services.campaign_service import CampaignService
from flask_app.services.errors import NotFoundError, PersistenceFailure, ValidationError
from flask_app.utils.error_handler import form_error_response
from flask_app.utils.permissions import is_admin


def _get_visible_task_or_404(task_id):
    task = db.session.get(Task, task_id)
    if task is None or (not is_admin(current_user) and task.assigned_to != current_user.username):
        raise NotFoundError(f"Task {task_id} not found")
    return task


def register_task_routes(app):
    """Register campaign and task routes"""

    @app.route("/api/campaigns", methods=["POST"])
    @login_required
    def api_campaigns_create():
        """
        Split the selected contacts among their owners and create one task per
        staff member. Contacts without an assignee are skipped.
        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object.")

        form = CampaignForm.from_json(data)
        if not form.validate():
            return form_error_response(form)

        contact_ids = data.get("contactIds", data.get("contact_ids"))
        if not isinstance(contact_ids, list):
            raise ValidationError("contactIds must be a list of contact ids.")
        tags = data.get("tags") or []
        if not isinstance(tags, list):
            raise ValidationError("tags must be a list.")

        result = CampaignService().create_campaign(
            name=form.name.data,
            description=(form.description.data or "").strip() or None,
            due_date=form.due_date.data,
            contact_ids=contact_ids,
            created_by=current_user.username,
            tags=[str(tag) for tag in tags],
        )
        return jsonify(result.to_dict()), 201 if result.created else 200

    @app.route("/api/tasks", methods=["GET"])
    @login_required
    def api_tasks_list():
        """Tasks, optionally filtered by assignee and campaign. Staff see only their own."""
        try:
            query = Task.query
            if is_admin(current_user):
                assigned = request.args.get("assignedTo", "").strip()
                if assigned:
                    query = query.filter(Task.assigned_to == assigned)
            else:
                query = query.filter(Task.assigned_to == current_user.username)

            campaign = request.args.get("campaign", "").strip()
            if campaign:
                query = query.filter(Task.campaign_name == campaign)

            tasks = query.order_by(Task.due_date, Task.id).all()
            return jsonify([task.to_dict() for task in tasks])

        except Exception as e:
            current_app.logger.error(f"Error listing tasks: {str(e)}", exc_info=True)
            return jsonify({"message": "An error occurred while loading tasks."}), 500

    @app.route("/api/tasks/campaigns/list", methods=["GET"])
    @login_required
    def api_tasks_campaign_names():
        rows = (
            db.session.query(Task.campaign_name)
            .filter(Task.campaign_name.isnot(None))
            .distinct()
            .order_by(Task.campaign_name)
            .all()
        )
        return jsonify([row.campaign_name for row in rows])

    @app.route("/api/tasks/<int:task_id>", methods=["GET"])
    @login_required
    def api_tasks_get(task_id):
        return jsonify(_get_visible_task_or_404(task_id).to_dict(include_feedback=True))

    @app.route("/api/tasks/<int:task_id>/feedback/<int:feedback_id>", methods=["PUT"])
    @login_required
    def api_tasks_feedback_update(task_id, feedback_id):
        """Record the outcome of calling one contact on a task"""
        task = _get_visible_task_or_404(task_id)
        item = db.session.get(TaskFeedback, feedback_id)
        if item is None or item.task_id != task.id:
            raise NotFoundError(f"Feedback {feedback_id} not found on task {task_id}")

        form = TaskFeedbackForm.from_json()
        if not form.validate():
            return form_error_response(form)

        response = TaskResponse(form.response.data) if form.response.data else None
        item.mark_completed(feedback=(form.feedback.data or "").strip() or None, response=response)
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Error saving feedback {feedback_id}: {str(e)}", exc_info=True)
            raise PersistenceFailure("Could not save feedback.") from e

        current_app.logger.info(f"Feedback {feedback_id} on task {task_id} completed by {current_user.username}")
        return jsonify(task.to_dict(include_feedback=True))
