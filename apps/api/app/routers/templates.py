"""Block template routes."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import models
from app.db.session import get_db
from app.schemas.api import (
    TemplateBlockPayload,
    TemplateCreate,
    TemplateListResponse,
    TemplateResponse,
    TemplateUpdate,
)
from app.services.access import require_admin
from app.settings import settings

router = APIRouter()


def _serialize_blocks(blocks: list[TemplateBlockPayload]) -> list[dict]:
    """Store template blocks in the editor's wire shape."""
    return [
        {
            "block_type": block.block_type.value,
            "content": block.content,
            "style": block.style.model_dump(mode="json") if block.style else None,
        }
        for block in blocks
    ]


async def _get_template_or_404(db: AsyncSession, template_id: UUID) -> models.BlockTemplate:
    template = await db.get(models.BlockTemplate, template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")
    return template


@router.get("/block-templates", response_model=TemplateListResponse)
async def list_templates(
    category: Optional[str] = None,
    limit: int | None = None,
    db: AsyncSession = Depends(get_db),
) -> TemplateListResponse:
    """List templates, built-in ones first, then by name."""
    limit = max(1, min(limit or settings.template_list_limit, 500))
    query = (
        select(models.BlockTemplate)
        .order_by(models.BlockTemplate.is_builtin.desc(), models.BlockTemplate.name)
        .limit(limit)
    )
    if category:
        query = query.where(models.BlockTemplate.category == category)

    result = await db.execute(query)
    templates = result.scalars().all()
    return TemplateListResponse(
        templates=[TemplateResponse.model_validate(t) for t in templates]
    )


@router.post("/block-templates", response_model=TemplateResponse, status_code=201)
async def create_template(
    payload: TemplateCreate,
    db: AsyncSession = Depends(get_db),
    email: str | None = Depends(require_admin),
) -> TemplateResponse:
    """Save a group of block snapshots as a template."""
    name = payload.name.strip()
    if not name or not payload.blocks:
        raise HTTPException(
            status_code=400, detail="name and blocks (non-empty array) are required"
        )

    template = models.BlockTemplate(
        name=name,
        description=payload.description,
        category=payload.category.strip() or "custom",
        blocks=_serialize_blocks(payload.blocks),
        is_builtin=False,
        created_by=email,
    )
    db.add(template)
    await db.commit()
    await db.refresh(template)
    return TemplateResponse.model_validate(template)


@router.patch("/block-templates/{template_id}", response_model=TemplateResponse)
async def update_template(
    template_id: UUID,
    payload: TemplateUpdate,
    db: AsyncSession = Depends(get_db),
    _: str | None = Depends(require_admin),
) -> TemplateResponse:
    """Update a template's name, description, category or blocks."""
    template = await _get_template_or_404(db, template_id)

    if payload.name is not None:
        if not payload.name.strip():
            raise HTTPException(status_code=400, detail="name must not be empty")
        template.name = payload.name.strip()
    if payload.description is not None:
        template.description = payload.description
    if payload.category is not None:
        template.category = payload.category.strip() or "custom"
    if payload.blocks is not None:
        if not payload.blocks:
            raise HTTPException(status_code=400, detail="blocks must not be empty")
        template.blocks = _serialize_blocks(payload.blocks)

    await db.commit()
    await db.refresh(template)
    return TemplateResponse.model_validate(template)


@router.delete("/block-templates/{template_id}", status_code=204)
async def delete_template(
    template_id: UUID,
    db: AsyncSession = Depends(get_db),
    _: str | None = Depends(require_admin),
) -> None:
    """Delete a template. Built-in templates cannot be deleted."""
    template = await _get_template_or_404(db, template_id)
    if template.is_builtin:
        raise HTTPException(status_code=403, detail="Cannot delete built-in templates")
    await db.delete(template)
    await db.commit()
