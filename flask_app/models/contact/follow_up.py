# flask_app/models/contact/follow_up.py

from sqlalchemy import Enum, Index

from ..base import BaseModel, db
from .enums import FollowUpStatus


class FollowUp(BaseModel):
    """Scheduled follow-up note against a contact"""

    __tablename__ = "follow_ups"

    id = db.Column(db.Integer, primary_key=True)
    contact_id = db.Column(db.Integer, db.ForeignKey("contacts.id"), nullable=False)
    notes = db.Column(db.Text, nullable=False)
    status = db.Column(
        Enum(FollowUpStatus, name="follow_up_status_enum"),
        default=FollowUpStatus.PENDING,
        nullable=False,
    )
    due_date = db.Column(db.DateTime, nullable=True)
    completed_date = db.Column(db.DateTime, nullable=True)
    created_by = db.Column(db.String(80), db.ForeignKey("users.username"), nullable=False)

    contact = db.relationship("Contact", back_populates="follow_ups")

    __table_args__ = (Index("idx_follow_up_contact", "contact_id", "created_at"),)

    def __repr__(self):
        return f"<FollowUp contact={self.contact_id} status={self.status.value}>"

    def to_dict(self):
        return {
            "id": self.id,
            "contact_id": self.contact_id,
            "notes": self.notes,
            "status": self.status.value if self.status else None,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "completed_date": self.completed_date.isoformat() if self.completed_date else None,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
