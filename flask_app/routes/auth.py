# flask_app/routes/auth.py
"""
Session authentication routes
"""

from flask import current_app, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user

from flask_app.forms import LoginForm
from flask_app.models import User
from flask_app.utils.error_handler import form_error_response


def register_auth_routes(app):
    """Register authentication routes"""

    @app.route("/login", methods=["POST"])
    def login():
        form = LoginForm.from_json() if request.is_json else LoginForm(formdata=request.form)
        if not form.validate():
            return form_error_response(form)

        username = form.username.data.strip()
        user = User.find_by_username(username)
        if user is None or not user.check_password(form.password.data):
            current_app.logger.warning(f"Failed login attempt for username: {username}")
            return jsonify({"message": "Invalid username or password."}), 401

        if not user.is_active:
            current_app.logger.warning(f"Login attempt for inactive user: {username}")
            return jsonify({"message": "This account has been deactivated."}), 403

        login_user(user, remember=form.remember_me.data)
        current_app.logger.info(f"User {username} logged in")
        return jsonify(user.to_dict())

    @app.route("/logout", methods=["POST"])
    @login_required
    def logout():
        username = current_user.username
        logout_user()
        current_app.logger.info(f"User {username} logged out")
        return jsonify({"message": "Logged out."})

    @app.route("/api/user", methods=["GET"])
    @login_required
    def api_current_user():
        return jsonify(current_user.to_dict())

    @app.route("/api/users", methods=["GET"])
    @login_required
    def api_users():
        """Active staff, for assignment pickers"""
        users = User.query.filter_by(is_active=True).order_by(User.username).all()
        return jsonify([user.to_dict() for user in users])
