"""HTTP client for the lesson service API."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import httpx
from pydantic import ValidationError

from lesson_builder_core.errors import LessonNotFoundError, ServiceError
from lesson_builder_core.schemas.blocks import Block
from lesson_builder_core.schemas.lessons import (
    LessonMeta,
    LessonStatus,
    LinkedContent,
    QuestionCandidate,
)
from lesson_builder_core.schemas.templates import BlockTemplate, TemplateBlock
from lesson_builder_core.services.base import BaseLessonService
from lesson_builder_core.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 30.0


class HttpLessonService(BaseLessonService):
    """Lesson service client speaking JSON over HTTP.

    Requests are never retried here; the editor decides what a failure means.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000/api/v1",
        timeout: float = DEFAULT_TIMEOUT,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: API root including the version prefix
            timeout: Request timeout in seconds
            headers: Extra headers sent with every request (e.g. auth)
            transport: Optional httpx transport, used to stub the network
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = headers or {}
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
                transport=self._transport,
            )
        return self._client

    async def _request(
        self, method: str, path: str, expect_body: bool = True, **kwargs: Any
    ) -> Any:
        """Send a request and decode the JSON body.

        Args:
            method: HTTP method
            path: Path below the API root
            expect_body: Whether the response must carry a JSON object

        Raises:
            ServiceError: On transport errors, non-2xx responses, and missing
                or undecodable bodies
        """
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise ServiceError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            detail = _error_detail(response)
            raise ServiceError(
                f"{method} {path} returned {response.status_code}: {detail}",
                status_code=response.status_code,
            )
        if response.status_code == 204 or not response.content:
            if expect_body:
                raise ServiceError(
                    f"{method} {path} returned an empty body",
                    status_code=response.status_code,
                )
            return None
        try:
            data = response.json()
        except ValueError as e:
            raise ServiceError(
                f"{method} {path} returned invalid JSON: {e}",
                status_code=response.status_code,
            ) from e
        if expect_body and not isinstance(data, dict):
            raise ServiceError(
                f"{method} {path} returned {type(data).__name__}, expected an object",
                status_code=response.status_code,
            )
        return data

    async def get_lesson(self, lesson_id: str) -> LessonMeta:
        try:
            data = await self._request("GET", f"/lessons/{lesson_id}")
        except ServiceError as e:
            if e.status_code == 404:
                raise LessonNotFoundError(lesson_id) from e
            raise
        with _parsing("lesson"):
            return LessonMeta.model_validate(data)

    async def get_blocks(self, lesson_id: str) -> list[Block]:
        data = await self._request("GET", f"/lessons/{lesson_id}/blocks")
        with _parsing("block list"):
            blocks = [Block.from_payload(item) for item in data.get("blocks", [])]
        return sorted(blocks, key=lambda b: b.order_index)

    async def save_blocks(self, lesson_id: str, blocks: list[dict[str, Any]]) -> int:
        logger.debug(f"Saving {len(blocks)} blocks for lesson {lesson_id}")
        data = await self._request(
            "PUT", f"/lessons/{lesson_id}/blocks", json={"blocks": blocks}
        )
        with _parsing("save result"):
            return int(data.get("block_count", len(blocks)))

    async def set_status(self, lesson_id: str, status: LessonStatus) -> LessonMeta:
        data = await self._request(
            "PATCH", f"/lessons/{lesson_id}/status", json={"status": status.value}
        )
        with _parsing("lesson"):
            return LessonMeta.model_validate(data)

    async def list_templates(self, category: str | None = None) -> list[BlockTemplate]:
        params = {"category": category} if category else None
        data = await self._request("GET", "/block-templates", params=params)
        with _parsing("template list"):
            return [BlockTemplate.model_validate(t) for t in data.get("templates", [])]

    async def create_template(
        self,
        name: str,
        description: str,
        category: str,
        blocks: list[TemplateBlock],
    ) -> BlockTemplate:
        payload = {
            "name": name,
            "description": description,
            "category": category,
            "blocks": [block.to_payload() for block in blocks],
        }
        data = await self._request("POST", "/block-templates", json=payload)
        with _parsing("template"):
            return BlockTemplate.model_validate(data)

    async def update_template(self, template_id: str, **fields: Any) -> BlockTemplate:
        if "blocks" in fields:
            fields["blocks"] = [
                block.to_payload() if isinstance(block, TemplateBlock) else block
                for block in fields["blocks"]
            ]
        data = await self._request(
            "PATCH", f"/block-templates/{template_id}", json=fields
        )
        with _parsing("template"):
            return BlockTemplate.model_validate(data)

    async def delete_template(self, template_id: str) -> None:
        await self._request(
            "DELETE", f"/block-templates/{template_id}", expect_body=False
        )

    async def list_question_candidates(self, lesson_id: str) -> list[QuestionCandidate]:
        data = await self._request("GET", f"/lessons/{lesson_id}/question-candidates")
        with _parsing("question list"):
            return [QuestionCandidate.model_validate(q) for q in data.get("questions", [])]

    async def get_linked_content(self, lesson_id: str) -> LinkedContent:
        data = await self._request("GET", f"/lessons/{lesson_id}/linked-content")
        with _parsing("linked content"):
            return LinkedContent.model_validate(data)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.debug("Closed lesson service HTTP client")


@contextmanager
def _parsing(what: str) -> Iterator[None]:
    """Report a malformed response payload as a service error."""
    try:
        yield
    except (ValidationError, TypeError, ValueError, AttributeError) as e:
        raise ServiceError(f"Malformed {what} payload: {e}") from e


def _error_detail(response: httpx.Response) -> str:
    """Extract a readable error message from an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("error") or body)
    return str(body)
