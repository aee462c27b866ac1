import logging
from typing import Optional, Union

from .config import get_config

LOGGER_NAME = "capfs"


def init_logging(
    level: Optional[Union[int, str]] = None, clear_existing_handlers: bool = True
) -> logging.Logger:
    """
    Sets up console logging for the capfs package logger.

    Args:
        level: The desired logging level (e.g., logging.DEBUG or "DEBUG").
               Defaults to the configured ``log_level``.
        clear_existing_handlers: If True, removes any handlers already attached to the
                                 capfs logger, which prevents duplicate output when
                                 setup code runs more than once.

    Returns:
        The configured package logger
    """
    if level is None:
        level = get_config().log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    package_logger = logging.getLogger(LOGGER_NAME)

    if clear_existing_handlers:
        for handler in package_logger.handlers[:]:
            package_logger.removeHandler(handler)
            handler.close()

    stream_handler = logging.StreamHandler()
    formatter = logging.Formatter("%(asctime)s - %(levelname)s - [%(name)s] %(message)s")
    stream_handler.setFormatter(formatter)

    package_logger.addHandler(stream_handler)
    package_logger.setLevel(level)

    package_logger.debug(
        f"capfs logging setup complete. Level set to {logging.getLevelName(level)}."
    )
    return package_logger
