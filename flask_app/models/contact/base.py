# flask_app/models/contact/base.py
"""
Contact model: a volunteer, sympathiser or attendee tracked by staff.
"""

from sqlalchemy import Enum, Index
from sqlalchemy.orm import validates

from flask_app.utils.phone import normalize_phone

from ..base import BaseModel, db
from .assignment import AssignmentList, AssignmentListType
from .enums import ContactCategory, ContactPriority, ContactStatus, Occupation, Sex, Team


def _empty_assignment():
    return AssignmentList()


class Contact(BaseModel):
    """Contact record with classification, assignment and location fields"""

    __tablename__ = "contacts"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, index=True)

    # Phone number as entered; lookups go through mobile_normalized
    mobile = db.Column(db.String(20), nullable=False)
    mobile_normalized = db.Column(db.String(10), nullable=True, index=True)
    country_code = db.Column(db.String(5), nullable=False, default="+91")
    email = db.Column(db.String(255), nullable=True)

    # Classification
    category = db.Column(Enum(ContactCategory, name="contact_category_enum"), nullable=False, index=True)
    priority = db.Column(Enum(ContactPriority, name="contact_priority_enum"), nullable=False, index=True)
    status = db.Column(
        Enum(ContactStatus, name="contact_status_enum"),
        default=ContactStatus.ACTIVE,
        nullable=False,
        index=True,
    )
    team = db.Column(Enum(Team, name="team_enum"), nullable=True)
    occupation = db.Column(Enum(Occupation, name="occupation_enum"), default=Occupation.OTHER, nullable=False)
    sex = db.Column(Enum(Sex, name="sex_enum"), nullable=True)

    # Staff usernames, first entry owns the contact for campaigns
    assigned_to = db.Column(AssignmentListType(), default=_empty_assignment, nullable=False)

    # Location
    area = db.Column(db.String(200), nullable=False)
    city = db.Column(db.String(100), nullable=False, index=True)
    state = db.Column(db.String(100), nullable=False)
    nation = db.Column(db.String(100), nullable=False, default="India")
    pincode = db.Column(db.String(10), nullable=True)

    organisation = db.Column(db.String(200), nullable=True)
    marital_status = db.Column(db.String(50), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    # Relationships
    attendance = db.relationship("Attendance", back_populates="contact", cascade="all, delete-orphan")
    follow_ups = db.relationship("FollowUp", back_populates="contact", cascade="all, delete-orphan")
    activities = db.relationship("Activity", back_populates="contact", cascade="all, delete-orphan")

    __table_args__ = (Index("idx_contact_category_priority", "category", "priority"),)

    def __repr__(self):
        return f"<Contact {self.name} ({self.mobile})>"

    @validates("mobile")
    def validate_mobile(self, key, value):
        """Keep mobile_normalized in step with the raw number"""
        value = (value or "").strip()
        if not value:
            raise ValueError("Mobile number is required")
        self.mobile_normalized = normalize_phone(value)
        return value

    @validates("assigned_to")
    def validate_assigned_to(self, key, value):
        if isinstance(value, AssignmentList):
            return value
        return AssignmentList(value or [])

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "mobile": self.mobile,
            "country_code": self.country_code,
            "email": self.email,
            "category": self.category.value if self.category else None,
            "priority": self.priority.value if self.priority else None,
            "status": self.status.value if self.status else None,
            "team": self.team.value if self.team else None,
            "occupation": self.occupation.value if self.occupation else None,
            "sex": self.sex.value if self.sex else None,
            "assigned_to": self.assigned_to.to_list() if self.assigned_to else [],
            "area": self.area,
            "city": self.city,
            "state": self.state,
            "nation": self.nation,
            "pincode": self.pincode,
            "organisation": self.organisation,
            "marital_status": self.marital_status,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @staticmethod
    def find_all_by_phone(normalized_phone):
        """
        All contacts whose normalized mobile matches.

        The raw mobile column is not unique, so callers decide what more than
        one match means. Database errors propagate.
        """
        return Contact.query.filter_by(mobile_normalized=normalized_phone).order_by(Contact.id).all()
