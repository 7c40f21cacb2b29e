"""
Staff account commands: ``flask users create`` and ``flask users deactivate``.
"""

from __future__ import annotations

from typing import Optional

import click
from flask.cli import with_appcontext

from flask_app.models import ROLE_ADMIN, ROLE_STAFF, User, db
from flask_app.models.user import USERNAME_PATTERN


@click.group(name="users")
def users_cli():
    """Manage staff accounts."""


@users_cli.command("create")
@click.argument("username")
@click.option("--email", default=None, help="Email address for the account.")
@click.option("--first-name", default=None)
@click.option("--last-name", default=None)
@click.option(
    "--role",
    type=click.Choice([ROLE_STAFF, ROLE_ADMIN]),
    default=ROLE_STAFF,
    show_default=True,
    help="Admins see every contact; staff see only contacts assigned to them.",
)
@click.password_option(help="Password; prompted for when omitted.")
@with_appcontext
def users_create(
    username: str,
    email: Optional[str],
    first_name: Optional[str],
    last_name: Optional[str],
    role: str,
    password: str,
):
    """Create a staff account. USERNAME is the identifier used in contact assignments."""
    username = username.strip()
    if not username:
        raise click.ClickException("Username cannot be empty.")
    if not USERNAME_PATTERN.match(username):
        raise click.ClickException(
            f"Invalid username '{username}': use ASCII letters, digits and . _ @ + - only."
        )
    if User.find_by_username(username) is not None:
        raise click.ClickException(f"Username '{username}' already exists.")
    if email and User.query.filter_by(email=email).first():
        raise click.ClickException(f"Email '{email}' already exists.")
    if not password:
        raise click.ClickException("Password cannot be empty.")

    user = User(
        username=username,
        email=email or None,
        first_name=first_name,
        last_name=last_name,
        role=role,
        is_active=True,
    )
    user.set_password(password)
    db.session.add(user)
    db.session.commit()

    click.echo(f"Created {role} account '{user.username}' (id {user.id}).")


@users_cli.command("deactivate")
@click.argument("username")
@with_appcontext
def users_deactivate(username: str):
    """Block logins for USERNAME. Existing assignments are kept."""
    user = User.find_by_username(username)
    if user is None:
        raise click.ClickException(f"No account named '{username}'.")
    if not user.is_active:
        click.echo(f"Account '{username}' is already inactive.")
        return

    user.is_active = False
    db.session.commit()
    click.echo(f"Deactivated account '{username}'.")
