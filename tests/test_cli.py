from flask_app.cli import users_cli
from flask_app.models import User


class TestUsersCli:
    """Test the staff account commands"""

    def test_create_admin(self, app):
        runner = app.test_cli_runner()
        result = runner.invoke(
            users_cli, ["create", "dave", "--password", "davepass123", "--role", "admin", "--email", "dave@example.com"]
        )

        assert result.exit_code == 0, result.output
        user = User.find_by_username("dave")
        assert user.is_admin
        assert user.check_password("davepass123")

    def test_create_defaults_to_staff(self, app):
        result = app.test_cli_runner().invoke(users_cli, ["create", "erin", "--password", "erinpass123"])
        assert result.exit_code == 0, result.output
        assert User.find_by_username("erin").role == "staff"

    def test_duplicate_username(self, app, staff_users):
        result = app.test_cli_runner().invoke(users_cli, ["create", "alice", "--password", "x"])
        assert result.exit_code != 0
        assert "already exists" in result.output

    def test_deactivate(self, app, staff_users):
        runner = app.test_cli_runner()
        result = runner.invoke(users_cli, ["deactivate", "bob"])
        assert result.exit_code == 0
        assert User.find_by_username("bob").is_active is False

        assert runner.invoke(users_cli, ["deactivate", "nobody"]).exit_code != 0

    def test_non_ascii_username_is_rejected(self, app):
        result = app.test_cli_runner().invoke(users_cli, ["create", "priyā", "--password", "priyapass123"])
        assert result.exit_code != 0
        assert "ASCII" in result.output
        assert User.query.count() == 0
