import environs
import pytest

from oicp.shared.exceptions import InvalidSettingsValueError
from oicp.shared.settings import SettingKey, load_shared_settings, shared_settings


class TestSharedSettings:
    @pytest.fixture(autouse=True)
    def restore_settings(self):
        saved = dict(shared_settings)
        yield
        shared_settings.clear()
        shared_settings.update(saved)

    def test_defaults(self, monkeypatch):
        for key in (
            "MESSAGE_LOG_XML",
            "LOG_LEVEL",
            "REQUEST_TIMEOUT",
            "XML_PRETTY_PRINT",
        ):
            monkeypatch.delenv(key, raising=False)
        load_shared_settings()

        assert shared_settings[SettingKey.MESSAGE_LOG_XML] is False
        assert shared_settings[SettingKey.LOG_LEVEL] == "INFO"
        assert shared_settings[SettingKey.REQUEST_TIMEOUT] == 60
        assert shared_settings[SettingKey.XML_PRETTY_PRINT] is False

    @pytest.mark.parametrize(
        "env_name, env_value, setting_key, expected_value",
        [
            ("MESSAGE_LOG_XML", "true", SettingKey.MESSAGE_LOG_XML, True),
            ("LOG_LEVEL", "debug", SettingKey.LOG_LEVEL, "DEBUG"),
            ("REQUEST_TIMEOUT", "15", SettingKey.REQUEST_TIMEOUT, 15),
            ("XML_PRETTY_PRINT", "1", SettingKey.XML_PRETTY_PRINT, True),
        ],
    )
    def test_env_overrides(
        self, monkeypatch, env_name, env_value, setting_key, expected_value
    ):
        monkeypatch.setenv(env_name, env_value)
        load_shared_settings()

        assert shared_settings[setting_key] == expected_value

    @pytest.mark.parametrize(
        "env_name, env_value",
        [("LOG_LEVEL", "VERBOSE"), ("REQUEST_TIMEOUT", "0")],
    )
    def test_invalid_values(self, monkeypatch, env_name, env_value):
        monkeypatch.setenv(env_name, env_value)
        with pytest.raises(InvalidSettingsValueError) as exc_info:
            load_shared_settings()

        assert exc_info.value.entity == "shared"
        assert exc_info.value.setting == env_name

    def test_malformed_values_are_collected(self, monkeypatch):
        monkeypatch.setenv("REQUEST_TIMEOUT", "soon")
        monkeypatch.setenv("XML_PRETTY_PRINT", "perhaps")
        with pytest.raises(environs.EnvError) as exc_info:
            load_shared_settings()

        assert "REQUEST_TIMEOUT" in str(exc_info.value)
        assert "XML_PRETTY_PRINT" in str(exc_info.value)
