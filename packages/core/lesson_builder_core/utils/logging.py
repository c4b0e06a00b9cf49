"""Logging utilities."""

import asyncio
import logging
import os
import sys
from functools import wraps
from typing import Any, Callable, TypeVar

_LOG_LEVEL = os.environ.get("LESSON_BUILDER_LOG_LEVEL", "INFO").upper()
_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

F = TypeVar("F", bound=Callable[..., Any])


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """Get a configured logger.

    Args:
        name: Logger name (typically __name__)
        level: Optional log level override

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(handler)

    if level is not None:
        logger.setLevel(level)
    elif logger.level == logging.NOTSET:
        logger.setLevel(getattr(logging, _LOG_LEVEL, logging.INFO))

    return logger


def log_exceptions(
    logger: logging.Logger,
    absorb: tuple[type[BaseException], ...] = (),
    default: Any = None,
) -> Callable[[F], F]:
    """Decorator that logs exceptions raised by a sync or async function.

    Exceptions listed in ``absorb`` are logged and replaced by ``default``;
    anything else is logged and re-raised.

    Args:
        logger: Logger to use for exception logging
        absorb: Exception types that should not propagate
        default: Value returned when an absorbed exception occurs

    Returns:
        Decorated function
    """

    def decorator(func: F) -> F:
        def _handle(e: Exception) -> Any:
            if absorb and isinstance(e, absorb):
                logger.warning(f"{func.__name__} failed: {e}")
                return default
            logger.exception(f"Exception in {func.__name__}: {e}")
            raise e

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                return _handle(e)

        @wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                return _handle(e)

        if asyncio.iscoroutinefunction(func):
            return async_wrapper  # type: ignore
        return sync_wrapper  # type: ignore

    return decorator
