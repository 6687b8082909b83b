import os
import logging
import logging.config
from pathlib import Path
from datetime import datetime
from typing import Optional

def setup_logger(name: str, log_level: Optional[str] = None,
                 log_dir: Optional[str] = None, log_to_file: bool = True) -> logging.Logger:   # console + daily rotating file logger

    log_level = (log_level or os.getenv('STEPSELECT_LOG_LEVEL', 'INFO')).upper()
    log_path = Path(log_dir or os.getenv('STEPSELECT_LOG_DIR', 'logs'))

    handlers = {
        'console': {
            'level': log_level,
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
            'stream': 'ext://sys.stdout'
        }
    }

    if log_to_file:
        log_path.mkdir(parents=True, exist_ok=True)
        # one file per day shared by every stepselect module
        handlers['file'] = {
            'level': 'DEBUG',
            'class': 'logging.handlers.RotatingFileHandler',
            'formatter': 'detailed',
            'filename': str(log_path / f'stepselect_{datetime.now().strftime("%Y%m%d")}.log'),
            'maxBytes': 10485760,  # 10MB
            'backupCount': 5
        }

    logging_config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            },
            'detailed': {
                'format': '%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            }
        },
        'handlers': handlers,
        'loggers': {
            # the package logger also carries logging.getLogger(__name__) records from library modules
            'stepselect': {
                'level': 'DEBUG',
                'handlers': list(handlers),
                'propagate': False
            }
        },
        'root': {
            'level': log_level,
            'handlers': ['console']
        }
    }

    logging.config.dictConfig(logging_config)
    return logging.getLogger(name)
