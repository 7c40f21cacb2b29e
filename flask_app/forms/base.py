# flask_app/forms/base.py
"""
Base form for JSON API endpoints
"""

from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict


def json_formdata(payload, aliases=None):
    """
    Convert a JSON object into form data WTForms can process.

    Null values are dropped, lists become repeated keys and camelCase keys
    listed in ``aliases`` are renamed to their field names.
    """
    aliases = aliases or {}
    formdata = MultiDict()
    if not isinstance(payload, dict):
        return formdata
    for key, value in payload.items():
        key = aliases.get(key, key)
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            for item in value:
                if item is not None:
                    formdata.add(key, str(item))
        elif isinstance(value, bool):
            formdata.add(key, "y" if value else "")
        else:
            formdata.add(key, str(value))
    return formdata


class ApiForm(FlaskForm):
    """FlaskForm fed from a JSON body. Session auth protects these endpoints, so no CSRF token."""

    json_aliases = {}

    class Meta:
        csrf = False

    @classmethod
    def from_json(cls, payload=None, **kwargs):
        if payload is None:
            payload = request.get_json(silent=True) or {}
        return cls(formdata=json_formdata(payload, cls.json_aliases), **kwargs)
