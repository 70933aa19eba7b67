"""Configure process-wide logging."""

import logging

from pythonjsonlogger import jsonlogger

FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'


def setup_logger(level: str = 'INFO', json: bool = True) -> None:
    """Attach a single stream handler to the root logger."""
    handler = logging.StreamHandler()
    if json:
        formatter: logging.Formatter = jsonlogger.JsonFormatter(
            FORMAT,
            rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
        )
    else:
        formatter = logging.Formatter(FORMAT)
    handler.setFormatter(formatter)
    logger = logging.getLogger()
    for existing in list(logger.handlers):
        if getattr(existing, '_accountdir', False):
            logger.removeHandler(existing)
    handler._accountdir = True     # type: ignore
    logger.addHandler(handler)
    logger.setLevel(level)
