"""Lesson metadata routes."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import models
from app.db.session import get_db
from app.schemas.api import (
    LessonCreate,
    LessonListResponse,
    LessonResponse,
    LessonStatusUpdate,
    LessonUpdate,
    LessonVersionListResponse,
    LessonVersionResponse,
)
from app.services.access import current_user, is_admin, require_admin
from app.services.lessons import get_lesson_or_404

router = APIRouter()


@router.get("/lessons", response_model=LessonListResponse)
async def list_lessons(
    module_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    email: str | None = Depends(current_user),
) -> LessonListResponse:
    """List lessons, optionally filtered by module.

    Non-editors only see published lessons.
    """
    query = select(models.Lesson).order_by(
        models.Lesson.order_index, models.Lesson.created_at
    )
    if module_id:
        query = query.where(models.Lesson.module_id == module_id)
    if not is_admin(email):
        query = query.where(models.Lesson.status == "published")

    result = await db.execute(query)
    lessons = result.scalars().all()
    return LessonListResponse(
        lessons=[LessonResponse.model_validate(lesson) for lesson in lessons]
    )


@router.post("/lessons", response_model=LessonResponse, status_code=201)
async def create_lesson(
    payload: LessonCreate,
    db: AsyncSession = Depends(get_db),
    _: str | None = Depends(require_admin),
) -> LessonResponse:
    """Create a new lesson."""
    lesson = models.Lesson(
        title=payload.title,
        module_id=payload.module_id,
        status=payload.status.value,
        order_index=payload.order_index,
        estimated_minutes=payload.estimated_minutes,
        content=payload.content,
    )
    db.add(lesson)
    await db.commit()
    await db.refresh(lesson)
    return LessonResponse.model_validate(lesson)


@router.get("/lessons/{lesson_id}", response_model=LessonResponse)
async def get_lesson(
    lesson_id: UUID,
    db: AsyncSession = Depends(get_db),
    email: str | None = Depends(current_user),
) -> LessonResponse:
    """Get lesson metadata, including any legacy markup body."""
    lesson = await get_lesson_or_404(db, lesson_id, include_drafts=is_admin(email))
    return LessonResponse.model_validate(lesson)


@router.patch("/lessons/{lesson_id}", response_model=LessonResponse)
async def update_lesson(
    lesson_id: UUID,
    payload: LessonUpdate,
    db: AsyncSession = Depends(get_db),
    _: str | None = Depends(require_admin),
) -> LessonResponse:
    """Update lesson metadata."""
    lesson = await get_lesson_or_404(db, lesson_id)
    for field, value in payload.model_dump(exclude_none=True).items():
        setattr(lesson, field, value)
    await db.commit()
    await db.refresh(lesson)
    return LessonResponse.model_validate(lesson)


@router.patch("/lessons/{lesson_id}/status", response_model=LessonResponse)
async def set_lesson_status(
    lesson_id: UUID,
    payload: LessonStatusUpdate,
    db: AsyncSession = Depends(get_db),
    _: str | None = Depends(require_admin),
) -> LessonResponse:
    """Publish or unpublish a lesson."""
    lesson = await get_lesson_or_404(db, lesson_id)
    lesson.status = payload.status.value
    await db.commit()
    await db.refresh(lesson)
    return LessonResponse.model_validate(lesson)


@router.get("/lessons/{lesson_id}/versions", response_model=LessonVersionListResponse)
async def list_lesson_versions(
    lesson_id: UUID,
    limit: int = 20,
    db: AsyncSession = Depends(get_db),
    _: str | None = Depends(require_admin),
) -> LessonVersionListResponse:
    """List the most recent block snapshots, newest first."""
    limit = max(1, min(limit, 100))
    await get_lesson_or_404(db, lesson_id)
    result = await db.execute(
        select(models.LessonVersion)
        .where(models.LessonVersion.lesson_id == lesson_id)
        .order_by(models.LessonVersion.version_number.desc())
        .limit(limit)
    )
    versions = result.scalars().all()
    return LessonVersionListResponse(
        versions=[LessonVersionResponse.model_validate(v) for v in versions]
    )
