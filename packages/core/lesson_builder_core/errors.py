"""Exception hierarchy for the lesson builder core."""


class LessonBuilderError(Exception):
    """Base class for all lesson builder errors."""


class BlockNotFoundError(LessonBuilderError):
    """Raised when an operation references a block id that is not in the document."""

    def __init__(self, block_id: str):
        super().__init__(f"Block not found: {block_id}")
        self.block_id = block_id


class InvalidDragTransition(LessonBuilderError):
    """Raised when a drag session receives an event its current state cannot accept."""


class ServiceError(LessonBuilderError):
    """Raised when a call across the lesson service boundary fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class LessonNotFoundError(ServiceError):
    """Raised when the service reports that a lesson does not exist."""

    def __init__(self, lesson_id: str):
        super().__init__(f"Lesson not found: {lesson_id}", status_code=404)
        self.lesson_id = lesson_id


class QuestionImportError(LessonBuilderError):
    """Raised when a question bank entry cannot become a quiz block."""

    def __init__(self, question_id: str, reason: str):
        super().__init__(f"Cannot import question {question_id}: {reason}")
        self.question_id = question_id
