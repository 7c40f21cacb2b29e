# flask_app/models/contact/activity.py

from sqlalchemy import Index

from ..base import BaseModel, db


class Activity(BaseModel):
    """Logged interaction with a contact (a call, a visit, a meeting)"""

    __tablename__ = "activities"

    id = db.Column(db.Integer, primary_key=True)
    contact_id = db.Column(db.Integer, db.ForeignKey("contacts.id"), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    notes = db.Column(db.Text, nullable=False)
    activity_date = db.Column(db.DateTime, nullable=True)
    created_by = db.Column(db.String(80), db.ForeignKey("users.username"), nullable=False)

    contact = db.relationship("Contact", back_populates="activities")

    __table_args__ = (Index("idx_activity_contact", "contact_id", "created_at"),)

    def __repr__(self):
        return f"<Activity contact={self.contact_id} {self.title}>"

    def to_dict(self):
        return {
            "id": self.id,
            "contact_id": self.contact_id,
            "title": self.title,
            "notes": self.notes,
            "activity_date": self.activity_date.isoformat() if self.activity_date else None,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
