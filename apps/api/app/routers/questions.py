"""Question import and linked content routes."""

from uuid import UUID

from fastapi import APIRouter, Depends
from lesson_builder_core.schemas.lessons import IMPORTABLE_QUESTION_TYPES
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import models
from app.db.session import get_db
from app.schemas.api import (
    LinkedContentResponse,
    LinkedItemResponse,
    QuestionCandidateListResponse,
    QuestionCandidateResponse,
)
from app.services.access import current_user, is_admin, require_admin
from app.services.lessons import get_lesson_or_404

router = APIRouter()


@router.get(
    "/lessons/{lesson_id}/question-candidates",
    response_model=QuestionCandidateListResponse,
)
async def list_question_candidates(
    lesson_id: UUID,
    db: AsyncSession = Depends(get_db),
    _: str | None = Depends(require_admin),
) -> QuestionCandidateListResponse:
    """List the lesson's questions that can become quiz blocks.

    Only single and multiple choice questions have the option list a quiz
    block needs.
    """
    await get_lesson_or_404(db, lesson_id)
    result = await db.execute(
        select(models.Question)
        .where(
            models.Question.lesson_id == lesson_id,
            models.Question.question_type.in_(
                [t.value for t in IMPORTABLE_QUESTION_TYPES]
            ),
        )
        .order_by(models.Question.created_at)
    )
    questions = result.scalars().all()
    return QuestionCandidateListResponse(
        questions=[QuestionCandidateResponse.model_validate(q) for q in questions]
    )


@router.get("/lessons/{lesson_id}/linked-content", response_model=LinkedContentResponse)
async def get_linked_content(
    lesson_id: UUID,
    db: AsyncSession = Depends(get_db),
    email: str | None = Depends(current_user),
) -> LinkedContentResponse:
    """Return references to the lesson's questions, flashcards and articles."""
    await get_lesson_or_404(db, lesson_id, include_drafts=is_admin(email))

    questions = await db.execute(
        select(models.Question.id, models.Question.question_text)
        .where(models.Question.lesson_id == lesson_id)
        .order_by(models.Question.created_at)
    )
    flashcards = await db.execute(
        select(models.Flashcard.id, models.Flashcard.front)
        .where(models.Flashcard.lesson_id == lesson_id)
        .order_by(models.Flashcard.created_at)
    )
    articles = await db.execute(
        select(models.Article.id, models.Article.title)
        .where(models.Article.lesson_id == lesson_id)
        .order_by(models.Article.title)
    )
    return LinkedContentResponse(
        questions=[LinkedItemResponse(id=i, title=t) for i, t in questions.all()],
        flashcards=[LinkedItemResponse(id=i, title=t) for i, t in flashcards.all()],
        articles=[LinkedItemResponse(id=i, title=t) for i, t in articles.all()],
    )
