from typing import Optional

import environs

from oicp.shared.exceptions import InvalidSettingsValueError


class SettingKey:
    MESSAGE_LOG_XML = "MESSAGE_LOG_XML"
    LOG_LEVEL = "LOG_LEVEL"
    REQUEST_TIMEOUT = "REQUEST_TIMEOUT"
    XML_PRETTY_PRINT = "XML_PRETTY_PRINT"


# Defaults apply until load_shared_settings() is called
shared_settings = {
    SettingKey.MESSAGE_LOG_XML: False,
    SettingKey.LOG_LEVEL: "INFO",
    SettingKey.REQUEST_TIMEOUT: 60,
    SettingKey.XML_PRETTY_PRINT: False,
}

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_shared_settings(env_path: Optional[str] = None):
    env = environs.Env(eager=False)
    env.read_env(path=env_path)  # read .env file, if it exists

    settings = {
        SettingKey.MESSAGE_LOG_XML: env.bool("MESSAGE_LOG_XML", default=False),
        SettingKey.LOG_LEVEL: env.str("LOG_LEVEL", default="INFO").upper(),
        SettingKey.REQUEST_TIMEOUT: env.int("REQUEST_TIMEOUT", default=60),
        SettingKey.XML_PRETTY_PRINT: env.bool("XML_PRETTY_PRINT", default=False),
    }
    env.seal()  # raise all errors at once, if any

    if settings[SettingKey.LOG_LEVEL] not in LOG_LEVELS:
        raise InvalidSettingsValueError(
            "shared", SettingKey.LOG_LEVEL, settings[SettingKey.LOG_LEVEL]
        )
    if settings[SettingKey.REQUEST_TIMEOUT] <= 0:
        raise InvalidSettingsValueError(
            "shared",
            SettingKey.REQUEST_TIMEOUT,
            settings[SettingKey.REQUEST_TIMEOUT],
        )

    shared_settings.update(settings)
