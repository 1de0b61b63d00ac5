# fintracker/logging_utils.py
import logging
from typing import Optional, Union

_LOGGER_INITIALISED = False


def _coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_root_logger(level: Optional[Union[int, str]] = None) -> None:
    """Attach one stream handler to the root logger.

    Safe to call repeatedly (module reloads, app factory per test); later
    calls only change the level when one is given.
    """
    global _LOGGER_INITIALISED
    root_logger = logging.getLogger()

    if _LOGGER_INITIALISED:
        if level is not None:
            root_logger.setLevel(_coerce_level(level))
        return

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.setLevel(_coerce_level(level if level is not None else logging.INFO))
    root_logger.addHandler(handler)
    _LOGGER_INITIALISED = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    configure_root_logger()
    return logging.getLogger(name)
