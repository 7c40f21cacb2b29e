# flask_app/models/base.py
"""
Shared SQLAlchemy instance and abstract base model.
"""

from datetime import datetime, timezone

from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import SQLAlchemyError

db = SQLAlchemy()


def _utcnow():
    return datetime.now(timezone.utc)


class BaseModel(db.Model):
    """Abstract base model with timestamps and safe persistence helpers"""

    __abstract__ = True

    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    @classmethod
    def safe_create(cls, **kwargs):
        """
        Create and commit a new instance.

        Returns:
            Tuple of (instance, None) on success or (None, error_message) on failure
        """
        try:
            instance = cls(**kwargs)
            db.session.add(instance)
            db.session.commit()
            return instance, None
        except (SQLAlchemyError, ValueError) as e:
            db.session.rollback()
            current_app.logger.error(f"Error creating {cls.__name__}: {str(e)}")
            return None, str(e)

    def safe_update(self, **kwargs):
        """Update attributes and commit. Returns (success, error_message)."""
        try:
            for key, value in kwargs.items():
                setattr(self, key, value)
            db.session.commit()
            return True, None
        except (SQLAlchemyError, ValueError) as e:
            db.session.rollback()
            current_app.logger.error(f"Error updating {self.__class__.__name__} {getattr(self, 'id', None)}: {str(e)}")
            return False, str(e)

    def safe_delete(self):
        """Delete the instance and commit. Returns (success, error_message)."""
        try:
            db.session.delete(self)
            db.session.commit()
            return True, None
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Error deleting {self.__class__.__name__} {getattr(self, 'id', None)}: {str(e)}")
            return False, str(e)
