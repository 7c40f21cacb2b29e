import pytest

from config.base import _coerce_bool, _int_from_env
from config.validation import validate_and_exit, validate_environment


@pytest.fixture
def production_env(monkeypatch):
    """A valid production environment"""
    monkeypatch.setenv("SECRET_KEY", "0123456789abcdef0123456789abcdef")
    monkeypatch.setenv("DATABASE_URL", "postgresql://contacts@localhost/contacts")
    for name in ("LOG_FORMAT", "BULK_UPDATE_MAX_CONTACTS", "DEFAULT_COUNTRY_CODE"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestValidateEnvironment:
    """Test start-up validation of environment variables"""

    def test_non_production_is_not_validated(self, monkeypatch):
        monkeypatch.delenv("SECRET_KEY", raising=False)
        assert validate_environment("development") == (True, [])
        assert validate_environment("testing") == (True, [])

    def test_valid_production(self, production_env):
        assert validate_environment("production") == (True, [])

    def test_default_secret_key_rejected(self, production_env):
        production_env.setenv("SECRET_KEY", "your-secret-key")
        is_valid, errors = validate_environment("production")
        assert not is_valid
        assert any("SECRET_KEY" in error for error in errors)

    def test_missing_database_url(self, production_env):
        production_env.delenv("DATABASE_URL")
        is_valid, errors = validate_environment("production")
        assert not is_valid
        assert any("DATABASE_URL" in error for error in errors)

    @pytest.mark.parametrize(
        "name,value",
        [
            ("LOG_FORMAT", "xml"),
            ("BULK_UPDATE_MAX_CONTACTS", "0"),
            ("BULK_UPDATE_MAX_CONTACTS", "many"),
            ("DEFAULT_COUNTRY_CODE", "+91"),
        ],
    )
    def test_invalid_settings(self, production_env, name, value):
        production_env.setenv(name, value)
        is_valid, errors = validate_environment("production")
        assert not is_valid
        assert any(name in error for error in errors)

    def test_reads_flask_env(self, production_env):
        production_env.setenv("FLASK_ENV", "production")
        production_env.delenv("DATABASE_URL")
        assert validate_environment()[0] is False

    def test_validate_and_exit(self, production_env, capsys):
        production_env.delenv("DATABASE_URL")
        with pytest.raises(SystemExit) as exc_info:
            validate_and_exit("production")
        assert exc_info.value.code == 1
        assert "DATABASE_URL" in capsys.readouterr().err


class TestConfigHelpers:
    """Test environment parsing helpers"""

    @pytest.mark.parametrize("value,expected", [("1", True), ("yes", True), ("off", False), (None, False)])
    def test_coerce_bool(self, value, expected):
        assert _coerce_bool(value) is expected

    def test_coerce_bool_default(self):
        assert _coerce_bool("maybe", default=True) is True

    def test_int_from_env(self, monkeypatch):
        monkeypatch.setenv("BULK_UPDATE_MAX_CONTACTS", "250")
        assert _int_from_env("BULK_UPDATE_MAX_CONTACTS", 1000) == 250

        monkeypatch.setenv("BULK_UPDATE_MAX_CONTACTS", "-5")
        assert _int_from_env("BULK_UPDATE_MAX_CONTACTS", 1000) == 1000

        monkeypatch.setenv("BULK_UPDATE_MAX_CONTACTS", "lots")
        assert _int_from_env("BULK_UPDATE_MAX_CONTACTS", 1000) == 1000

    def test_app_uses_testing_config(self, app):
        assert app.config["TESTING"] is True
        assert app.config["PHONE_NUMBER_LENGTH"] == 10
        assert app.config["DEFAULT_COUNTRY_CODE"] == "91"
