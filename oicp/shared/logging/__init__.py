import logging.config

from oicp.shared.settings import SettingKey, shared_settings


def _init_logger():
    # An extra logging level for dumping full XML documents
    def trace(self, message, *args, **kwargs):
        if self.isEnabledFor(level_num):
            self._log(level_num, message, args, **kwargs)

    level_num = logging.DEBUG - 5
    level_name = "TRACE"
    logging.addLevelName(level_num, level_name)
    setattr(logging, level_name, level_num)
    setattr(logging.getLoggerClass(), level_name.lower(), trace)

    logging.getLogger().setLevel(shared_settings[SettingKey.LOG_LEVEL])
