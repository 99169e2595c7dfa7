import time
from functools import wraps
from typing import Callable


def measure_time(func: Callable) -> Callable:
    """
    Decorator to measure execution time of any function.

    Used by the multi-file analysis entry points; the last duration is
    exposed as ``func.last_duration_ms``.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        wrapper.last_duration_ms = round((time.perf_counter() - start) * 1000, 2)
        return result

    wrapper.last_duration_ms = None
    return wrapper


def safe_decode(raw_bytes: bytes) -> str:
    """
    Safely decode JavaScript source files.

    Test suites pulled from older repositories are not always UTF-8.
    """
    try:
        return raw_bytes.decode("utf-8")
    except UnicodeDecodeError:
        return raw_bytes.decode("latin-1")
