"""
Centralized logging module for the TLINK OPC UA bridge.

This module provides a singleton logger that wraps the standard library
logging system, so the bridge and asyncua share one handler and level.
"""

from typing import Optional
import logging
import sys


LOGGER_NAME = "tlink_opcua"
LOG_FORMAT = "[%(levelname)s] %(asctime)s - %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


class BridgeLogger:
    """
    Singleton logger for the bridge.

    Writes through the ``tlink_opcua`` stdlib logger. Until
    ``configure`` is called, records propagate to whatever handlers
    the host process installed.
    """

    _instance: Optional['BridgeLogger'] = None

    def __init__(self):
        self._logger = logging.getLogger(LOGGER_NAME)
        self._handler: Optional[logging.Handler] = None
        self._initialized = False

    @classmethod
    def get_instance(cls) -> 'BridgeLogger':
        """Get the singleton logger instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance. Useful for testing."""
        if cls._instance is not None and cls._instance._handler is not None:
            cls._instance._logger.removeHandler(cls._instance._handler)
        cls._instance = None

    @property
    def is_debug(self) -> bool:
        return self._logger.isEnabledFor(logging.DEBUG)

    def configure(self, debug: bool = False) -> None:
        """
        Attach a stdout handler and set levels.

        Args:
            debug: Log everything at DEBUG, including asyncua internals.
                   Otherwise only errors are shown.
        """
        level = logging.DEBUG if debug else logging.ERROR

        if self._handler is None:
            self._handler = logging.StreamHandler(sys.stdout)
            self._handler.setFormatter(
                logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
            )
            self._logger.addHandler(self._handler)
            self._logger.propagate = False

        self._logger.setLevel(level)
        logging.getLogger("asyncua").setLevel(level if debug else logging.WARNING)
        self._initialized = True

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self._logger.debug(message)

    def info(self, message: str) -> None:
        """Log an informational message."""
        self._logger.info(message)

    def warn(self, message: str) -> None:
        """Log a warning message."""
        self._logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self._logger.error(message)

    def fatal(self, message: str) -> None:
        """Log a message that precedes process termination."""
        self._logger.critical(message)


# Module-level convenience functions
def get_logger() -> BridgeLogger:
    """Get the singleton logger instance."""
    return BridgeLogger.get_instance()


def log_debug(message: str) -> None:
    """Log a debug message."""
    get_logger().debug(message)


def log_info(message: str) -> None:
    """Log an informational message."""
    get_logger().info(message)


def log_warn(message: str) -> None:
    """Log a warning message."""
    get_logger().warn(message)


def log_error(message: str) -> None:
    """Log an error message."""
    get_logger().error(message)


def log_fatal(message: str) -> None:
    """Log a fatal message."""
    get_logger().fatal(message)
