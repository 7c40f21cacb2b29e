# flask_app/models/user.py

import re

from flask import current_app
from flask_login import UserMixin
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import validates
from werkzeug.security import check_password_hash, generate_password_hash

from .base import BaseModel, db

ROLE_ADMIN = "admin"
ROLE_STAFF = "staff"

# Usernames are matched as quoted strings inside the JSON assignment column,
# which escapes non-ASCII characters, quotes and backslashes.
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9._@+-]+$")


class User(BaseModel, UserMixin):
    """Staff member. The username doubles as the staff identifier on contacts and tasks."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=True)
    password_hash = db.Column(db.String(255), nullable=False)
    first_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)
    mobile = db.Column(db.String(20), nullable=True)
    role = db.Column(db.String(20), default=ROLE_STAFF, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    is_super_admin = db.Column(db.Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<User {self.username}>"

    @validates("username")
    def validate_username(self, key, value):
        value = (value or "").strip()
        if not USERNAME_PATTERN.match(value):
            raise ValueError("Username may only contain ASCII letters, digits and . _ @ + -")
        return value

    @property
    def is_admin(self):
        return self.is_super_admin or self.role == ROLE_ADMIN

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def get_full_name(self):
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) if parts else self.username

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "name": self.get_full_name(),
            "mobile": self.mobile,
            "role": self.role,
            "is_active": self.is_active,
        }

    @staticmethod
    def find_by_username(username):
        """Find user by username with error handling"""
        try:
            return User.query.filter_by(username=username).first()
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding user by username {username}: {str(e)}")
            return None

    @staticmethod
    def existing_usernames(usernames):
        """Return the subset of ``usernames`` belonging to active staff accounts."""
        if not usernames:
            return set()
        rows = (
            db.session.query(User.username)
            .filter(User.username.in_(list(usernames)), User.is_active.is_(True))
            .all()
        )
        return {row.username for row in rows}
