from datetime import datetime
from functools import wraps
import logging

logger = logging.getLogger('bitonic_sort')
logger.addHandler(logging.StreamHandler())
logger.setLevel(logging.WARNING)


def timed(func):
    @wraps(func)
    def decorated(*args, **kwargs):
        s = datetime.now()
        ret = func(*args, **kwargs)
        logger.info("%s - %.4f", func.__name__, (datetime.now() - s).total_seconds())
        return ret
    return decorated


def set_log_level(level):
    if isinstance(level, str):
        level = level.upper()
    logger.setLevel(level)


def next_power_of_two(n):
    """Returns the next power of two greater than or equal to n."""
    return 1 << (n - 1).bit_length() if n > 0 else 1


def is_power_of_two(n):
    return n > 0 and n & (n - 1) == 0


def log2(n):
    """Exact base-2 logarithm of a power of two."""
    return n.bit_length() - 1
