# flask_app/models/task.py
"""
Staff tasks and per-contact task feedback.

Campaigns are not a separate table: every task created for a campaign carries
the campaign name.
"""

from datetime import datetime, timezone
from enum import Enum as PyEnum

from sqlalchemy import Enum, Index

from .base import BaseModel, db


class TaskResponse(PyEnum):
    """Contact's answer recorded on task feedback"""

    YES = "Yes"
    NO = "No"
    TENTATIVE = "Tentative"


class Task(BaseModel):
    """Work item assigned to one staff member"""

    __tablename__ = "tasks"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    due_date = db.Column(db.DateTime, nullable=False)
    tags = db.Column(db.JSON, nullable=True)
    is_completed = db.Column(db.Boolean, default=False, nullable=False)
    assigned_to = db.Column(db.String(80), nullable=False, index=True)
    created_by = db.Column(db.String(80), nullable=False)
    campaign_name = db.Column(db.String(200), nullable=True, index=True)

    feedback = db.relationship(
        "TaskFeedback",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskFeedback.id",
    )

    __table_args__ = (Index("idx_task_assignee_campaign", "assigned_to", "campaign_name"),)

    def __repr__(self):
        return f"<Task {self.title} -> {self.assigned_to}>"

    def to_dict(self, include_feedback=False):
        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "tags": self.tags or [],
            "is_completed": self.is_completed,
            "assigned_to": self.assigned_to,
            "created_by": self.created_by,
            "campaign_name": self.campaign_name,
            "contact_count": len(self.feedback),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_feedback:
            data["feedback"] = [item.to_dict() for item in self.feedback]
        return data


class TaskFeedback(BaseModel):
    """Outcome of a task for one contact"""

    __tablename__ = "task_feedback"

    id = db.Column(db.Integer, primary_key=True)
    task_id = db.Column(db.Integer, db.ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    contact_id = db.Column(db.Integer, db.ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False)
    assigned_to = db.Column(db.String(80), nullable=False)
    is_completed = db.Column(db.Boolean, default=False, nullable=False)
    feedback = db.Column(db.Text, nullable=True)
    response = db.Column(Enum(TaskResponse, name="task_response_enum"), nullable=True)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    task = db.relationship("Task", back_populates="feedback")
    contact = db.relationship("Contact")

    __table_args__ = (db.UniqueConstraint("task_id", "contact_id", name="_task_contact_uc"),)

    def __repr__(self):
        return f"<TaskFeedback task={self.task_id} contact={self.contact_id}>"

    def mark_completed(self, feedback=None, response=None):
        """Record the call outcome; the task completes when all of its feedback does"""
        self.is_completed = True
        self.feedback = feedback
        self.response = response
        self.completed_at = datetime.now(timezone.utc)
        if self.task is not None and all(item.is_completed for item in self.task.feedback):
            self.task.is_completed = True

    def to_dict(self):
        return {
            "id": self.id,
            "task_id": self.task_id,
            "contact_id": self.contact_id,
            "contact": self.contact.to_dict() if self.contact is not None else None,
            "assigned_to": self.assigned_to,
            "is_completed": self.is_completed,
            "feedback": self.feedback,
            "response": self.response.value if self.response else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
