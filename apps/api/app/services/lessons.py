"""Lesson lookup helpers shared by the lesson routers."""

from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import models


async def get_lesson_or_404(
    db: AsyncSession,
    lesson_id: UUID,
    include_drafts: bool = True,
) -> models.Lesson:
    """Load a lesson or raise 404.

    Args:
        db: Database session
        lesson_id: Lesson to load
        include_drafts: When False, draft lessons are reported as missing

    Returns:
        The lesson row
    """
    lesson = await db.get(models.Lesson, lesson_id)
    if not lesson or (not include_drafts and lesson.status == "draft"):
        raise HTTPException(status_code=404, detail="Lesson not found")
    return lesson
