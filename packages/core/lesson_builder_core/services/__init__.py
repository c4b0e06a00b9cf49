"""Clients for the lesson service boundary."""

from lesson_builder_core.services.base import BaseLessonService
from lesson_builder_core.services.http import HttpLessonService

__all__ = ["BaseLessonService", "HttpLessonService"]
