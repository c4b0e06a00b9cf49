"""Lesson block sequence routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import models
from app.db.session import get_db
from app.schemas.api import (
    BlockListResponse,
    BlockPayload,
    BlockResponse,
    BlocksSaveRequest,
    BlocksSaveResponse,
)
from app.services.access import current_user, is_admin, require_admin
from app.services.lessons import get_lesson_or_404

router = APIRouter()


def _snapshot(block: models.LessonBlock) -> dict:
    """Serialize a block row the way the editor sends it."""
    return {
        "id": block.id,
        "block_type": block.block_type,
        "content": block.content,
        "order_index": block.order_index,
        "style": block.style,
    }


def _to_row(lesson_id: UUID, item: BlockPayload, position: int) -> models.LessonBlock:
    """Build a block row from an editor payload.

    The stored order is the position in the request, so indices stay
    contiguous whatever the client sent.
    """
    return models.LessonBlock(
        id=item.id or models.new_block_id(),
        lesson_id=lesson_id,
        block_type=item.block_type.value,
        content=item.content,
        style=item.style.model_dump(mode="json") if item.style else None,
        order_index=position,
    )


@router.get("/lessons/{lesson_id}/blocks", response_model=BlockListResponse)
async def list_blocks(
    lesson_id: UUID,
    db: AsyncSession = Depends(get_db),
    email: str | None = Depends(current_user),
) -> BlockListResponse:
    """List a lesson's blocks in order."""
    await get_lesson_or_404(db, lesson_id, include_drafts=is_admin(email))
    result = await db.execute(
        select(models.LessonBlock)
        .where(models.LessonBlock.lesson_id == lesson_id)
        .order_by(models.LessonBlock.order_index)
    )
    blocks = result.scalars().all()
    return BlockListResponse(blocks=[BlockResponse.model_validate(b) for b in blocks])


@router.put("/lessons/{lesson_id}/blocks", response_model=BlocksSaveResponse)
async def save_blocks(
    lesson_id: UUID,
    payload: BlocksSaveRequest,
    db: AsyncSession = Depends(get_db),
    email: str | None = Depends(require_admin),
) -> BlocksSaveResponse:
    """Replace a lesson's whole block sequence and record a version snapshot.

    The delete, inserts and snapshot commit together, so readers never see a
    partially saved lesson.
    """
    lesson = await get_lesson_or_404(db, lesson_id)

    ids = [item.id for item in payload.blocks if item.id]
    if len(ids) != len(set(ids)):
        raise HTTPException(status_code=400, detail="Duplicate block ids")

    await db.execute(
        delete(models.LessonBlock).where(models.LessonBlock.lesson_id == lesson.id)
    )
    rows = [
        _to_row(lesson.id, item, position)
        for position, item in enumerate(payload.blocks)
    ]
    db.add_all(rows)

    count_result = await db.execute(
        select(func.count(models.LessonVersion.id)).where(
            models.LessonVersion.lesson_id == lesson.id
        )
    )
    version_number = count_result.scalar_one() + 1
    db.add(
        models.LessonVersion(
            lesson_id=lesson.id,
            version_number=version_number,
            blocks_snapshot=[_snapshot(row) for row in rows],
            saved_by=email,
        )
    )
    await db.commit()

    return BlocksSaveResponse(block_count=len(rows), version_number=version_number)
