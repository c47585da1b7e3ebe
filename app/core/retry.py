import functools
import logging
import time
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def with_retry(
    operation: Callable[[], T],
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call `operation` until it succeeds or attempts run out.

    Backoff is exponential without jitter: initial_delay, then x2 per retry
    (1s, 2s, 4s, ... with the defaults). Errors not listed in `retry_on`
    propagate immediately; after the last attempt the final error is
    re-raised unchanged.

    There is no timeout here, only a ceiling on attempts. Total wall-clock
    wait grows with max_attempts, so keep it small on latency-sensitive
    paths.

    Args:
        operation: zero-argument callable to invoke.
        max_attempts: total number of calls, including the first one.
        initial_delay: seconds to wait before the first retry.
        retry_on: exception types considered transient.
        sleep: injectable for tests.

    Raises:
        ValueError: if max_attempts < 1.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    delay = initial_delay
    attempt = 1
    while True:
        try:
            return operation()
        except retry_on as exc:
            if attempt >= max_attempts:
                logger.error(f"Giving up after {attempt} attempt(s): {exc!r}")
                raise
            logger.warning(
                f"Attempt {attempt}/{max_attempts} failed ({exc!r}); "
                f"retrying in {delay:.2f}s"
            )
            sleep(delay)
            delay *= 2
            attempt += 1


def retrying(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
):
    """
    Decorator form of `with_retry`.

        @retrying(max_attempts=5)
        def fetch(): ...
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            return with_retry(
                lambda: func(*args, **kwargs),
                max_attempts=max_attempts,
                initial_delay=initial_delay,
                retry_on=retry_on,
                sleep=sleep,
            )

        return wrapper

    return decorator
