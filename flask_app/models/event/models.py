# flask_app/models/event/models.py

from datetime import date

from flask import current_app
from sqlalchemy import Index
from sqlalchemy.exc import SQLAlchemyError

from ..base import BaseModel, db


class Event(BaseModel):
    """Model for representing events that contacts attend"""

    __tablename__ = "events"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False, index=True)
    location = db.Column(db.String(300), nullable=False)
    description = db.Column(db.Text, nullable=True)

    # Relationships
    attendance = db.relationship("Attendance", back_populates="event", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Event {self.name} ({self.date})>"

    def is_past(self):
        """Check if event date is before today"""
        return bool(self.date and self.date < date.today())

    def get_attendance_count(self):
        """Count recorded attendees"""
        try:
            return Attendance.query.filter_by(event_id=self.id).count()
        except SQLAlchemyError as e:
            current_app.logger.error(f"Error getting attendance count for event {self.id}: {str(e)}")
            return 0

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "date": self.date.isoformat() if self.date else None,
            "location": self.location,
            "description": self.description,
            "is_past": self.is_past(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Attendance(BaseModel):
    """Junction table recording that a contact attended an event"""

    __tablename__ = "attendance"

    id = db.Column(db.Integer, primary_key=True)
    contact_id = db.Column(db.Integer, db.ForeignKey("contacts.id"), nullable=False)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False)

    # Relationships
    contact = db.relationship("Contact", back_populates="attendance")
    event = db.relationship("Event", back_populates="attendance")

    # One record per contact per event
    __table_args__ = (
        Index("idx_attendance_event", "event_id"),
        db.UniqueConstraint("contact_id", "event_id", name="_attendance_contact_event_uc"),
    )

    def __repr__(self):
        return f"<Attendance event={self.event_id} contact={self.contact_id}>"

    @staticmethod
    def find_for(contact_id, event_id):
        """Existing record for the (contact, event) pair, if any"""
        return Attendance.query.filter_by(contact_id=contact_id, event_id=event_id).first()

    def to_dict(self, include_contact=False, include_event=False):
        data = {
            "id": self.id,
            "contact_id": self.contact_id,
            "event_id": self.event_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_contact and self.contact is not None:
            data["contact"] = self.contact.to_dict()
        if include_event and self.event is not None:
            data["event"] = self.event.to_dict()
        return data
