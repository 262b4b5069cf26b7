import logging
import logging.config
import sys
from pathlib import Path

from .config import LOG_DIR, LOG_LEVEL

# Chatty transport libraries pulled in by the Gemini SDK
QUIET_LOGGERS = ('urllib3', 'grpc', 'google')


def setup_logging(log_level: str = LOG_LEVEL, log_dir: str = LOG_DIR):
    """
    Configures logging for the application: console output plus a rotating
    file in `log_dir`.
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / 'app.log'

    logging_config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'default': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S',
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'stream': sys.stderr,
                'formatter': 'default',
            },
            'file': {
                'class': 'logging.handlers.RotatingFileHandler',
                'filename': log_file,
                'maxBytes': 1024 * 1024 * 5,  # 5 MB
                'backupCount': 5,
                'formatter': 'default',
                'encoding': 'utf-8',
            },
        },
        'root': {
            'handlers': ['console', 'file'],
            'level': log_level.upper(),
        },
        'loggers': {name: {'level': 'WARNING'} for name in QUIET_LOGGERS},
    }

    logging.config.dictConfig(logging_config)
