# flask_app/forms/auth.py

from wtforms import BooleanField, PasswordField, StringField
from wtforms.validators import DataRequired, Length

from .base import ApiForm


class LoginForm(ApiForm):
    """Staff login"""

    username = StringField(
        "Username",
        validators=[
            DataRequired(message="Username is required."),
            Length(max=80, message="Username must be less than 80 characters."),
        ],
    )
    password = PasswordField("Password", validators=[DataRequired(message="Password is required.")])
    remember_me = BooleanField("Remember Me")
