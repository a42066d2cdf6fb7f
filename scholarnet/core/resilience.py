"""
resilience utilities - logging setup and fetcher-side retry.
the crawl core never retries; retries are opt-in for the page fetcher only.
"""

import time
import random
import logging
import functools
from typing import TypeVar, Callable, Optional, Tuple
from dataclasses import dataclass

from .errors import NetworkError


# setup logging
logger = logging.getLogger("scholarnet")


T = TypeVar("T")


@dataclass
class RetryConfig:
    """configuration for retry behavior."""
    max_attempts: int = 1  # 1 = no retry
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0
    jitter: bool = True
    # exceptions that should trigger retry
    retryable_exceptions: Tuple[type, ...] = (NetworkError,)

    def delay_for(self, attempt: int) -> float:
        """backoff delay after a failed attempt (1-based)."""
        delay = min(
            self.base_delay * (self.exponential_base ** (attempt - 1)),
            self.max_delay
        )
        if self.jitter:
            delay = delay * (0.5 + random.random())
        return delay


def retry_with_backoff(
    config: Optional[RetryConfig] = None,
    on_retry: Optional[Callable[[Exception, int], None]] = None
):
    """
    decorator for retry with exponential backoff.

    usage:
        @retry_with_backoff(RetryConfig(max_attempts=3))
        def flaky_function():
            ...
    """
    if config is None:
        config = RetryConfig()

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            for attempt in range(1, config.max_attempts + 1):
                try:
                    return func(*args, **kwargs)

                except config.retryable_exceptions as e:
                    if attempt >= config.max_attempts:
                        if config.max_attempts > 1:
                            logger.warning(
                                f"[retry] {func.__name__} failed after {attempt} attempts: {e}"
                            )
                        raise

                    delay = config.delay_for(attempt)
                    logger.info(
                        f"[retry] {func.__name__} attempt {attempt} failed, "
                        f"retrying in {delay:.1f}s: {e}"
                    )

                    if on_retry:
                        on_retry(e, attempt)

                    time.sleep(delay)

            # max_attempts < 1
            return func(*args, **kwargs)

        return wrapper
    return decorator


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None
):
    """
    setup scholarnet logging.
    call once at startup.
    """
    formatter = logging.Formatter(
        "%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)

    # configure scholarnet logger, replacing handlers of an earlier call
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)
    logger.addHandler(console_handler)

    # file handler if specified
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    return logger
