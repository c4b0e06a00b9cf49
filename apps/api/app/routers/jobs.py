"""Batch conversion job routes."""

import json
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import models
from app.db.session import get_db
from app.schemas.api import (
    ConversionJobCreate,
    JobEventListResponse,
    JobEventResponse,
    JobListResponse,
    JobResponse,
)
from app.services.access import require_admin
from app.services.queue import enqueue_job, subscribe_progress

router = APIRouter()


async def _get_job_or_404(db: AsyncSession, job_id: UUID) -> models.Job:
    result = await db.execute(select(models.Job).where(models.Job.id == job_id))
    job = result.scalar_one_or_none()
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


@router.get("/jobs", response_model=JobListResponse)
async def list_jobs(
    job_type: Optional[str] = None,
    status: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
) -> JobListResponse:
    """List jobs, newest first."""
    query = select(models.Job).order_by(models.Job.created_at.desc())
    if job_type:
        query = query.where(models.Job.job_type == job_type)
    if status:
        query = query.where(models.Job.status == status)

    result = await db.execute(query)
    jobs = result.scalars().all()
    return JobListResponse(jobs=[JobResponse.model_validate(j) for j in jobs])


@router.post("/jobs/conversions", response_model=JobResponse, status_code=201)
async def create_conversion_job(
    payload: ConversionJobCreate,
    db: AsyncSession = Depends(get_db),
    _: str | None = Depends(require_admin),
) -> JobResponse:
    """Queue a legacy markup conversion or a conversion rollback."""
    if payload.lesson_id and not await db.get(models.Lesson, payload.lesson_id):
        raise HTTPException(status_code=404, detail="Lesson not found")
    if payload.job_type == "conversion_rollback" and not (
        payload.lesson_id or payload.module_id or payload.all
    ):
        raise HTTPException(
            status_code=400,
            detail="Rollback needs lesson_id, module_id or all=true",
        )

    job = models.Job(
        job_type=payload.job_type,
        status="pending",
        progress=0,
        current_step="queued",
        options_json=payload.model_dump(mode="json", exclude={"job_type"}),
    )
    db.add(job)
    await db.commit()
    await db.refresh(job)

    db.add(
        models.JobEvent(
            job_id=job.id,
            level="info",
            message="Job queued",
            step=job.current_step,
            progress=job.progress,
            details_json=job.options_json,
        )
    )
    await db.commit()

    await enqueue_job(str(job.id))

    return JobResponse.model_validate(job)


@router.get("/jobs/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> JobResponse:
    """Get job status, progress and, once finished, its summary."""
    job = await _get_job_or_404(db, job_id)
    return JobResponse.model_validate(job)


@router.delete("/jobs/{job_id}", status_code=204)
async def cancel_job(
    job_id: UUID,
    db: AsyncSession = Depends(get_db),
    _: str | None = Depends(require_admin),
) -> None:
    """Cancel a job that has not started yet."""
    job = await _get_job_or_404(db, job_id)
    if job.status != "pending":
        raise HTTPException(status_code=400, detail="Job cannot be cancelled")
    job.status = "cancelled"
    db.add(
        models.JobEvent(
            job_id=job.id,
            level="info",
            message="Job cancelled",
            step=job.current_step,
            progress=job.progress,
        )
    )
    await db.commit()


@router.get("/jobs/{job_id}/stream")
async def stream_job_progress(
    job_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> StreamingResponse:
    """Stream job progress updates over Server-Sent Events."""
    await _get_job_or_404(db, job_id)

    async def event_generator():
        """Yield progress events in SSE format."""
        async for event in subscribe_progress(str(job_id)):
            yield f"data: {json.dumps(event)}\n\n"

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


@router.get("/jobs/{job_id}/events", response_model=JobEventListResponse)
async def list_job_events(
    job_id: UUID,
    limit: int = 200,
    db: AsyncSession = Depends(get_db),
) -> JobEventListResponse:
    """List the most recent events for a job."""
    limit = max(1, min(limit, 500))
    await _get_job_or_404(db, job_id)

    events_result = await db.execute(
        select(models.JobEvent)
        .where(models.JobEvent.job_id == job_id)
        .order_by(models.JobEvent.created_at.desc())
        .limit(limit)
    )
    events = list(events_result.scalars().all())
    # Reverse for chronological display.
    events.reverse()
    return JobEventListResponse(
        events=[JobEventResponse.model_validate(event) for event in events]
    )
