"""
Tests for settings loading and environment overrides
"""
from unittest.mock import patch

import settings as settings_module
from settings import build_settings, is_test_mode, resend_cooldown_seconds


class TestSettings:
    def test_defaults(self):
        settings = build_settings(environ={})

        assert is_test_mode(settings) is False
        assert resend_cooldown_seconds(settings) == 60
        assert settings["cooldown"]["backend"] == "memory"
        assert "{code}" in settings["sms"]["message_template"]

    def test_overrides_merge_into_sections(self):
        settings = build_settings({"sms": {"uid": "portal"}}, environ={})

        assert settings["sms"]["uid"] == "portal"
        assert settings["sms"]["timeout_seconds"] == 10

    def test_test_mode_forces_zero_cooldown(self):
        settings = build_settings({"verification": {"resend_cooldown_seconds": 120}}, environ={"TESTMODE": "true"})

        assert is_test_mode(settings) is True
        assert resend_cooldown_seconds(settings) == 0

    def test_testmode_false_wins_over_file(self):
        settings = build_settings({"portal": {"test_mode": True}}, environ={"TESTMODE": "0"})

        assert is_test_mode(settings) is False

    def test_environment_overrides(self):
        settings = build_settings(
            environ={
                "RESEND_COOLDOWN_SECONDS": "30",
                "COOLDOWN_BACKEND": "redis",
                "REDIS_URL": "redis://cache:6379/1",
                "SMS_UID": "uid",
                "SMS_PWD": "pwd",
            }
        )

        assert resend_cooldown_seconds(settings) == 30
        assert settings["cooldown"] == {"backend": "redis", "redis_url": "redis://cache:6379/1"}
        assert (settings["sms"]["uid"], settings["sms"]["pwd"]) == ("uid", "pwd")

    def test_defaults_are_not_mutated(self):
        build_settings({"portal": {"test_mode": True}}, environ={})

        assert build_settings(environ={})["portal"]["test_mode"] is False

    def test_load_settings_writes_defaults_when_missing(self, tmp_path):
        config_file = tmp_path / "settings.yaml"
        with patch.object(settings_module, "CONFIG_FILE", str(config_file)), \
                patch.object(settings_module, "CONFIG_DIR", str(tmp_path)), \
                patch.dict("os.environ", {}, clear=True):
            loaded = settings_module.load_settings(force=True)

        assert config_file.exists()
        assert loaded["verification"]["resend_cooldown_seconds"] == 60
        settings_module._cached_settings = None

    def test_load_settings_reads_yaml(self, tmp_path):
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("portal:\n  test_mode: true\nsms:\n  uid: from-file\n")
        with patch.object(settings_module, "CONFIG_FILE", str(config_file)), \
                patch.dict("os.environ", {}, clear=True):
            loaded = settings_module.load_settings(force=True)

        assert is_test_mode(loaded) is True
        assert loaded["sms"]["uid"] == "from-file"
        assert loaded["sms"]["pwd"] == ""
        settings_module._cached_settings = None
