# shopassist/core/logging.py
import logging
import sys
import colorlog

_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
_LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}


def configure_logging(level=logging.INFO, colored: bool = True):
    """
    Root handler on stdout. Colors are for local dev only; production log
    collectors get the plain format (no ANSI escapes).
    """
    handler = colorlog.StreamHandler(sys.stdout)
    if colored:
        handler.setFormatter(
            colorlog.ColoredFormatter(
                "%(log_color)s%(asctime)s %(levelname)-8s [%(name)s]%(reset)s %(message)s",
                datefmt="%H:%M:%S",
                log_colors=_LOG_COLORS,
            )
        )
    else:
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    logging.getLogger("shopassist").setLevel(level)
    logging.getLogger("uvicorn.error").setLevel(level)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING if level > logging.DEBUG else level)
    logging.getLogger("watchfiles").setLevel(logging.WARNING)
