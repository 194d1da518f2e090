# testdrive/utils.py
"""Logging setup, retry helper and small id/upload utilities."""
import os
import logging
import time
import uuid
from functools import wraps

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"

ALLOWED_IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}


def configure_logging(level=None):
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(format=LOG_FORMAT, level=getattr(logging, level, logging.INFO))


def get_logger(name="testdrive"):
    # children of "testdrive" share the root handler installed by configure_logging
    if name != "testdrive" and not name.startswith("testdrive."):
        name = f"testdrive.{name}"
    return logging.getLogger(name)

logger = get_logger()


def retry(exceptions, tries=3, delay=1, backoff=2, logger=logger):
    """Retry ``exceptions`` with exponential backoff; the last attempt propagates."""
    def deco_retry(f):
        @wraps(f)
        def f_retry(*args, **kwargs):
            remaining, wait = tries, delay
            while remaining > 1:
                try:
                    return f(*args, **kwargs)
                except exceptions as e:
                    logger.warning("%s failed: %s, retrying in %s sec", f.__name__, e, wait)
                    time.sleep(wait)
                    remaining -= 1
                    wait *= backoff
            return f(*args, **kwargs)
        return f_retry
    return deco_retry


def new_id() -> str:
    return str(uuid.uuid4())


def is_valid_id(value) -> bool:
    try:
        uuid.UUID(str(value))
    except (TypeError, ValueError):
        return False
    return True


def allowed_image(filename) -> bool:
    return bool(filename) and "." in filename and \
        filename.rsplit(".", 1)[1].lower() in ALLOWED_IMAGE_EXTENSIONS
