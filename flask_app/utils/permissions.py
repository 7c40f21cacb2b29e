# flask_app/utils/permissions.py

from sqlalchemy import String, cast

from flask_app.models import Contact


def is_admin(user):
    """Admins and super admins see and manage every contact"""
    if not user or not user.is_authenticated:
        return False
    return bool(user.is_admin)


def visible_contacts_query(user, query=None):
    """
    Restrict a contact query to what ``user`` may see.

    Non-admin staff only see contacts whose assignment list contains their
    username.
    """
    if query is None:
        query = Contact.query
    if is_admin(user):
        return query
    return query.filter(cast(Contact.assigned_to, String).contains(f'"{user.username}"', autoescape=True))
