"""
Logging configuration for the orbit family computations.

This module provides a centralized configuration for the logging system.
It defines the formatters and handlers used by the continuation jobs.

Only the main process owns the console and the rotating log files. Worker
processes send their records through a queue, and a listener thread in the
main process hands them to the main process's loggers.

Usage:
    Call setup_logging() once, before any job is launched:

    ```python
    from cr3bp_families.logging_config import setup_logging
    setup_logging()
    ```
"""

import logging
import logging.config
import logging.handlers
from pathlib import Path

from cr3bp_families.config import LOG_DIR

# Package loggers: (level, handlers in the main process)
PACKAGE_LOGGERS = {
    'cr3bp_families.continuation': ('DEBUG', ['console', 'file', 'error_file']),
    'cr3bp_families.orbits': ('DEBUG', ['file']),
}


def setup_logging(default_level=logging.INFO, log_dir=LOG_DIR):
    """
    Setup logging configuration for the project.

    Parameters
    ----------
    default_level : int, optional
        Default logging level. Default is logging.INFO.
    log_dir : str, optional
        Directory to store log files. Default is "logs".

    Returns
    -------
    None
        The function configures the logging system directly.
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            },
            'detailed': {
                'format': '%(asctime)s [%(levelname)s] %(name)s (%(processName)s %(filename)s:%(lineno)d): %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'level': 'INFO',
                'formatter': 'standard',
                'stream': 'ext://sys.stdout',
            },
            'file': {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': 'DEBUG',
                'formatter': 'detailed',
                'filename': log_path / 'simulation.log',
                'maxBytes': 10485760,  # 10 MB
                'backupCount': 5,
                'encoding': 'utf8'
            },
            'error_file': {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': 'ERROR',
                'formatter': 'detailed',
                'filename': log_path / 'error.log',
                'maxBytes': 10485760,  # 10 MB
                'backupCount': 5,
                'encoding': 'utf8'
            },
        },
        'loggers': {
            '': {  # root logger
                'handlers': ['console', 'file', 'error_file'],
                'level': default_level,
                'propagate': True
            },
        }
    }
    for name, (level, handlers) in PACKAGE_LOGGERS.items():
        config['loggers'][name] = {'handlers': handlers, 'level': level, 'propagate': False}

    logging.config.dictConfig(config)

    logger = logging.getLogger(__name__)
    logger.debug("Logging configuration applied")


class _DispatchHandler(logging.Handler):
    """Hands a record received from a worker to the logger it was emitted on."""

    def handle(self, record):
        logging.getLogger(record.name).handle(record)
        return True

    def emit(self, record):
        self.handle(record)


def start_log_listener(queue):
    """
    Start forwarding records put on `queue` by worker processes.

    The records go through the main process's loggers, so they reach the
    handlers configured by setup_logging().

    Returns
    -------
    logging.handlers.QueueListener
        The running listener; call stop() once the workers are done.
    """
    listener = logging.handlers.QueueListener(queue, _DispatchHandler())
    listener.start()
    return listener


def setup_worker_logging(queue, default_level=logging.INFO):
    """
    Route every record of a worker process to `queue`.

    Used as a process pool initializer. Any handler inherited from the parent
    (fork start method) is replaced, so no worker writes to the log files.
    """
    config = {
        'version': 1,
        'disable_existing_loggers': False,
        'handlers': {
            'queue': {
                '()': logging.handlers.QueueHandler,
                'queue': queue,
            },
        },
        'loggers': {
            '': {
                'handlers': ['queue'],
                'level': default_level,
            },
        },
    }
    for name, (level, _) in PACKAGE_LOGGERS.items():
        config['loggers'][name] = {'handlers': ['queue'], 'level': level, 'propagate': False}

    logging.config.dictConfig(config)
