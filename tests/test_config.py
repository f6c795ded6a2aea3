"""Tests for settings loading."""

import textwrap

from taskhub.config import Settings, load_settings, load_yaml_overrides


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("TASKHUB_DATABASE_URL", raising=False)
        settings = Settings()
        assert settings.database_url.startswith("sqlite+aiosqlite")
        assert settings.jwt_algorithm == "HS256"
        assert settings.jwt_expiration_minutes == 1440

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("TASKHUB_LOG_LEVEL", "DEBUG")
        assert Settings().log_level == "DEBUG"


class TestYamlOverrides:
    def test_missing_file_is_empty(self, tmp_path):
        assert load_yaml_overrides(tmp_path / "absent.yaml") == {}

    def test_env_tokens_are_resolved(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MY_SECRET", "from-env")
        path = tmp_path / "config.yaml"
        path.write_text("jwt_secret: os.environ/MY_SECRET\nlog_level: WARNING\n")
        assert load_yaml_overrides(path) == {"jwt_secret": "from-env", "log_level": "WARNING"}

    def test_file_values_apply(self, tmp_path, monkeypatch):
        monkeypatch.delenv("TASKHUB_JWT_EXPIRATION_MINUTES", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text(textwrap.dedent("""
            jwt_expiration_minutes: 30
            seed_demo_data: true
        """))
        settings = load_settings(path)
        assert settings.jwt_expiration_minutes == 30
        assert settings.seed_demo_data is True

    def test_environment_wins_over_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TASKHUB_LOG_LEVEL", "ERROR")
        path = tmp_path / "config.yaml"
        path.write_text("log_level: WARNING\n")
        assert load_settings(path).log_level == "ERROR"
