"""
Idea Board — FastAPI application entry-point.

Run with:
    uvicorn ideaboard.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ideaboard.config import configure_logging, settings
from ideaboard.database import Base, engine
from ideaboard.exceptions import IdeaBoardError
from ideaboard.schemas.idea import ErrorOut

# ── Import routers ──
from ideaboard.routers import ideas

logger = logging.getLogger(__name__)


# ── Lifespan: create tables on startup ──
@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Hackathon idea board — submit ideas, vote, auto-approve, convert to tasks.",
    version="0.1.0",
    lifespan=lifespan,
)


# ── Map engine errors to JSON responses ──
@app.exception_handler(IdeaBoardError)
async def idea_board_error_handler(request: Request, exc: IdeaBoardError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    body = ErrorOut(detail=exc.message, code=exc.code, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


# ── Register API routers ──
app.include_router(ideas.router)


@app.get("/health")
async def health():
    return {"status": "ok", "app": settings.APP_NAME}
