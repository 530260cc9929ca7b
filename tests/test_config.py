"""Tests for settings loading."""

import logging

from yummyecho.config import YummyEchoSettings, load_settings


class TestSettings:
    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        for key in ("DATABASE_URL", "TELEGRAM_BOT_TOKEN", "ACTIVATION_PASSWORD", "REPORT_CLEANUP_SECONDS"):
            monkeypatch.delenv(f"YUMMYECHO_{key}", raising=False)
        settings = YummyEchoSettings()
        assert settings.telegram_bot_token is None
        assert settings.activation_password is None
        assert settings.report_cleanup_seconds == 60.0
        assert "localhost" in settings.database_url

    def test_env_prefix(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("YUMMYECHO_ACTIVATION_PASSWORD", "clave123")
        monkeypatch.setenv("YUMMYECHO_REPORT_CLEANUP_SECONDS", "5")
        settings = YummyEchoSettings()
        assert settings.activation_password == "clave123"
        assert settings.report_cleanup_seconds == 5.0

    def test_dotenv_file(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("YUMMYECHO_TELEGRAM_BOT_TOKEN", raising=False)
        (tmp_path / ".env").write_text("YUMMYECHO_TELEGRAM_BOT_TOKEN=123:abc\nUNRELATED=1\n")
        assert YummyEchoSettings().telegram_bot_token == "123:abc"

    def test_warns_without_password(self, monkeypatch, tmp_path, caplog):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("YUMMYECHO_ACTIVATION_PASSWORD", raising=False)
        with caplog.at_level(logging.WARNING, logger="yummyecho.config"):
            load_settings()
        assert "ACTIVATION_PASSWORD" in caplog.text

    def test_warns_on_remote_database(self, monkeypatch, tmp_path, caplog):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("YUMMYECHO_DATABASE_URL", "postgresql://u:p@db.example.com/x")
        with caplog.at_level(logging.WARNING, logger="yummyecho.config"):
            load_settings()
        assert "not localhost" in caplog.text
