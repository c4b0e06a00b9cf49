"""Shared utilities."""

from lesson_builder_core.utils.logging import get_logger, log_exceptions

__all__ = ["get_logger", "log_exceptions"]
