"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.db.session import init_db
from app.routers import auth, blocks, health, jobs, lessons, questions, templates
from app.services.queue import close_redis
from app.settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialize services on startup and cleanup on shutdown."""
    await init_db()
    yield
    await close_redis()


app = FastAPI(
    title="Lesson Builder API",
    description="Block-based lesson storage, templates and legacy conversion jobs",
    version="0.1.0",
    lifespan=lifespan,
)

# Allow-all is for local development; credentials require specific origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.cors_allow_all else settings.cors_origins,
    allow_credentials=not settings.cors_allow_all,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(auth.router, prefix="/api/v1", tags=["auth"])
app.include_router(lessons.router, prefix="/api/v1", tags=["lessons"])
app.include_router(blocks.router, prefix="/api/v1", tags=["blocks"])
app.include_router(questions.router, prefix="/api/v1", tags=["questions"])
app.include_router(templates.router, prefix="/api/v1", tags=["templates"])
app.include_router(jobs.router, prefix="/api/v1", tags=["jobs"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
