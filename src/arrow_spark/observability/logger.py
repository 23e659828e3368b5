import json
import logging
import os
import sys
import time
import uuid

LOGGER_NAME = "arrow_spark"


class _C:
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"


def _use_color() -> bool:
    # Color only if explicitly enabled and terminal supports it.
    return os.getenv("LOG_COLOR", "0") == "1" and sys.stdout.isatty()


def _event_color(event_type: str) -> str:
    if event_type.endswith("_FAILED"):
        return _C.RED
    return _C.GREEN


def get_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


logger = get_logger()


def generate_request_id() -> str:
    return str(uuid.uuid4())


def log_event(event_type: str, payload: dict):
    """
    Emit one structured event as a single JSON line.
    """
    record = {"event_type": event_type, **payload}
    text = json.dumps(record, default=str)

    if _use_color():
        logger.info(f"{_event_color(event_type)}{text}{_C.RESET}")
    else:
        logger.info(text)


class RequestTimer:
    """
    Simple execution timer.
    """

    def __init__(self):
        self.start_time = time.time()

    def duration(self) -> float:
        return round(time.time() - self.start_time, 4)
