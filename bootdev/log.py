# This file is part of bootdev. See LICENSE for copyright and license info.

import logging
import time

from functools import wraps

LOGGER_NAME = 'bootdev'
DEFAULT_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'

# -v for info, -vv for debug; errors are always reported
VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


class NullHandler(logging.Handler):
    def emit(self, record):
        pass


def level_for_verbosity(verbosity):
    return VERBOSITY_LEVELS[max(0, min(verbosity, len(VERBOSITY_LEVELS) - 1))]


def basicConfig(stream=None, filename=None, verbosity=None,
                level=logging.NOTSET, fmt=DEFAULT_FORMAT):
    """Send the bootdev logger (and only it) to stream or filename."""
    if filename:
        handler = logging.FileHandler(filename=filename, mode='a')
    elif stream:
        handler = logging.StreamHandler(stream=stream)
    else:
        handler = NullHandler()

    if verbosity is not None:
        level = level_for_verbosity(verbosity)

    handler.setFormatter(logging.Formatter(fmt=fmt))
    handler.setLevel(level)

    logger = logging.getLogger(LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(level)
    logger.addHandler(handler)
    logger.propagate = False
    return handler


def log_time(msg, func, *args, **kwargs):
    start = time.time()
    try:
        return func(*args, **kwargs)
    finally:
        LOG.debug("%s took %.3f seconds", msg, time.time() - start)


def logged_time(msg):
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            return log_time(msg, func, *args, **kwargs)
        return wrapper
    return decorator


LOG = logging.getLogger(LOGGER_NAME)
LOG.addHandler(NullHandler())

# vi: ts=4 expandtab syntax=python
