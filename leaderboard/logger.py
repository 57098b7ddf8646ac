import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'

class LoggingConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='LEADERBOARD_')

    log_level: str = 'INFO'

logging_config = LoggingConfig()

_configured = False

def get_logger(name: str = 'leaderboard') -> logging.Logger:
    """Return the service logger, configuring the root handler on first use"""
    global _configured
    if not _configured:
        logging.basicConfig(
            level=logging_config.log_level.upper(),
            format=LOG_FORMAT
        )
        _configured = True
    return logging.getLogger(name)
