"""
Debug logging switch for the Polymer SDK.

The SDK only ever logs through ``logging.getLogger(__name__)`` loggers under
the ``polymer_sdk`` namespace. Nothing is printed unless the application
configures logging or a client is created with ``debug=True``.
"""
import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - [%(levelname)s] - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_DEBUG_HANDLER_NAME = "polymer_sdk.debug"


def enable_debug_logging(stream=None) -> logging.Logger:
    """
    Send SDK debug output to a stream (stderr by default).

    Calling this more than once does not add duplicate handlers.

    Returns:
        The package logger
    """
    package_logger = logging.getLogger("polymer_sdk")
    package_logger.setLevel(logging.DEBUG)

    if not any(h.get_name() == _DEBUG_HANDLER_NAME for h in package_logger.handlers):
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.set_name(_DEBUG_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        package_logger.addHandler(handler)

    return package_logger
