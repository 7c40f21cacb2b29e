# flask_app/models/contact/enums.py
"""
Enums for contact models.
"""

from enum import Enum as PyEnum


class ContactCategory(PyEnum):
    """Contact category enumeration"""

    VOLUNTEER = "volunteer"
    SYMPATHISER = "sympathiser"
    ATTENDEE = "attendee"
    POLITICAL = "political"


class ContactPriority(PyEnum):
    """Follow-up priority"""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ContactStatus(PyEnum):
    """Contact status enumeration"""

    ACTIVE = "active"
    INACTIVE = "inactive"
    FOLLOW_UP = "follow-up"


class Team(PyEnum):
    """Team or affiliated organisation"""

    LOKAYAT_GENERAL = "lokayat-general"
    ABHIVYAKTI = "abhivyakti"
    MAHILA_JAGAR_SAMITI = "mahila-jagar-samiti"
    CONGRESS_PARTY = "congress-party"
    NCP_PARTY = "ncp-party"
    SHIVSENA_PARTY = "shivsena-party"
    OTHER_ORGANISATIONS = "other-organisations"
    CONGRESS_JJ_SHAKTI = "congress-jj-shakti"
    MAHARASHTRA_LEVEL = "maharashtra-level"
    SJA_MAHARASHTRA = "sja-maharashtra"
    SJA_TEACHERS_FRONT = "sja-teachers-front"


class Occupation(PyEnum):
    """Occupation enumeration"""

    SCHOOL_TEACHER = "school-teacher"
    PROFESSOR = "professor"
    DOCTOR = "doctor"
    LAWYER = "lawyer"
    ENGINEER = "engineer"
    WORKER = "worker"
    RETIRED = "retired"
    STUDENT = "student"
    PROFESSIONAL = "professional"
    OTHER = "other"
    JOURNALIST = "journalist"
    BUSINESS = "business"
    HOUSEWIFE = "housewife"


class Sex(PyEnum):
    """Sex enumeration"""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    PREFER_NOT_TO_SAY = "prefer_not_to_say"


class FollowUpStatus(PyEnum):
    """Follow-up status enumeration"""

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def enum_choices(enum_cls):
    """(value, label) pairs for WTForms select fields."""
    return [(member.value, member.value.replace("-", " ").replace("_", " ").title()) for member in enum_cls]
