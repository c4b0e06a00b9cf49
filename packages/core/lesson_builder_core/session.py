"""Editor session: one lesson's editor wired to the lesson service.

The session loads metadata and blocks, runs the legacy converter when a lesson
has never been converted, debounces saves through ``AutosaveScheduler`` and
exposes the remaining service-backed actions (publish toggle, templates,
question import, linked content). Service failures are logged and absorbed so
the editor keeps its prior state.
"""

from datetime import datetime
from enum import Enum

from lesson_builder_core.autosave import AutosaveScheduler
from lesson_builder_core.config import ConverterConfig, EditorConfig
from lesson_builder_core.converter.legacy import convert_legacy_markup, needs_conversion
from lesson_builder_core.document.editor import LessonEditor
from lesson_builder_core.errors import (
    LessonNotFoundError,
    QuestionImportError,
    ServiceError,
)
from lesson_builder_core.schemas.blocks import Block
from lesson_builder_core.schemas.lessons import (
    LessonMeta,
    LessonStatus,
    LinkedContent,
    QuestionCandidate,
)
from lesson_builder_core.schemas.templates import BlockTemplate
from lesson_builder_core.services.base import BaseLessonService
from lesson_builder_core.templates.store import TemplateStore
from lesson_builder_core.utils.logging import get_logger, log_exceptions

logger = get_logger(__name__)


class LoadStatus(str, Enum):
    """Outcome of loading a lesson into a session."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    NOT_FOUND = "not_found"
    FAILED = "failed"


class EditorSession:
    """Owns the editor, autosave and template store for one lesson."""

    def __init__(
        self,
        service: BaseLessonService,
        lesson_id: str,
        config: EditorConfig | None = None,
        converter_config: ConverterConfig | None = None,
    ):
        """Initialize the session.

        Args:
            service: Lesson service client
            lesson_id: Lesson to edit
            config: Editor options (history size, autosave delay)
            converter_config: Legacy markup conversion options
        """
        self.service = service
        self.lesson_id = lesson_id
        self.config = config or EditorConfig()
        self.converter_config = converter_config or ConverterConfig()

        self.editor = LessonEditor(config=self.config)
        self.templates = TemplateStore(service)
        self.autosave = AutosaveScheduler(self._persist, self.config.autosave_delay)
        self.meta: LessonMeta | None = None
        self.load_status = LoadStatus.IDLE
        self.question_candidates: list[QuestionCandidate] = []
        self._loading = False

        self.editor.add_listener(self._on_change)

    @property
    def last_saved_at(self) -> datetime | None:
        return self.autosave.last_saved_at

    def _on_change(self) -> None:
        if self.load_status == LoadStatus.LOADED:
            self.autosave.notify_change()

    async def load(self) -> LoadStatus:
        """Load metadata and blocks, converting legacy markup if needed.

        A call made while a load is already running returns immediately with
        the current status.
        """
        if self._loading:
            return self.load_status
        self._loading = True
        self.load_status = LoadStatus.LOADING
        try:
            meta = await self.service.get_lesson(self.lesson_id)
            blocks = await self.service.get_blocks(self.lesson_id)
        except LessonNotFoundError:
            logger.warning(f"Lesson {self.lesson_id} not found")
            self.load_status = LoadStatus.NOT_FOUND
            return self.load_status
        except ServiceError as e:
            logger.error(f"Failed to load lesson {self.lesson_id}: {e}")
            self.load_status = LoadStatus.FAILED
            return self.load_status
        finally:
            self._loading = False

        self.meta = meta
        self.editor.load(blocks)
        if needs_conversion(len(blocks), meta.content):
            result = convert_legacy_markup(meta.content, self.converter_config)
            self.editor.apply_conversion(result)
            logger.info(
                f"Lesson {self.lesson_id}: converted legacy markup into "
                f"{len(result.blocks)} unsaved blocks"
            )

        self.load_status = LoadStatus.LOADED
        logger.info(f"Loaded lesson {self.lesson_id} with {len(self.editor.document)} blocks")
        return self.load_status

    async def _persist(self) -> None:
        revision = self.editor.revision
        count = await self.service.save_blocks(
            self.lesson_id, self.editor.document.to_payload()
        )
        self.editor.mark_saved(revision)
        logger.info(f"Saved {count} blocks for lesson {self.lesson_id}")

    async def save(self) -> bool:
        """Save now, replacing any pending debounced save.

        Returns:
            True if the save ran and succeeded
        """
        self.autosave.cancel()
        return await self.autosave.save_now()

    async def toggle_publish(self) -> LessonStatus | None:
        """Flip the lesson between draft and published.

        Returns:
            The new status, or None if the service call failed
        """
        if self.meta is None:
            return None
        target = (
            LessonStatus.PUBLISHED if self.meta.is_draft else LessonStatus.DRAFT
        )
        try:
            self.meta = await self.service.set_status(self.lesson_id, target)
        except ServiceError as e:
            logger.warning(f"Failed to change status of lesson {self.lesson_id}: {e}")
            return None
        return self.meta.status

    @log_exceptions(logger, absorb=(ServiceError,), default=[])
    async def load_question_candidates(self) -> list[QuestionCandidate]:
        self.question_candidates = await self.service.list_question_candidates(
            self.lesson_id
        )
        return self.question_candidates

    def import_question(
        self, question_id: str, at_index: int | None = None
    ) -> Block | None:
        """Insert a quiz block from a previously fetched candidate question."""
        for candidate in self.question_candidates:
            if candidate.id == question_id:
                try:
                    return self.editor.import_question(candidate, at_index)
                except QuestionImportError as e:
                    logger.warning(str(e))
                    return None
        logger.warning(f"Question {question_id} is not an importable candidate")
        return None

    @log_exceptions(logger, absorb=(ServiceError,), default=LinkedContent())
    async def load_linked_content(self) -> LinkedContent:
        return await self.service.get_linked_content(self.lesson_id)

    async def save_selection_as_template(
        self,
        name: str,
        category: str = "custom",
        description: str = "",
    ) -> BlockTemplate | None:
        """Store the selected blocks (or the whole lesson) as a template."""
        blocks = self.editor.selected_blocks() or list(self.editor.document)
        return await self.templates.save_as_template(
            blocks, name, category=category, description=description
        )

    def apply_template(
        self, template: BlockTemplate, at_index: int | None = None
    ) -> list[Block]:
        return self.editor.apply_template(template.blocks, at_index)

    async def close(self) -> None:
        """Cancel the debounce timer and make one final save if anything changed."""
        final = self.config.final_save_on_close and self.editor.dirty
        await self.autosave.close(final_save=final)
        logger.info(f"Closed editor session for lesson {self.lesson_id}")
