"""
FastAPI Backend for the MoodMusic Conversation Engine

REST endpoints for per-session conversations: take a turn, read the current
mood and context, produce the closing message and fetch mood-matched tracks
from the preferred music catalog.
"""

import time
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import structlog
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .. import __version__
from ..models.config_models import SystemConfig
from ..models.conversation_models import (
    DialogueContext,
    EngineResponse,
    Mood,
    MoodAnalysisResult,
    TranscriptEntry,
)
from ..services.conversation_engine_service import ConversationEngine
from ..services.session_manager_service import SessionManagerService
from ..utils.logging_config import log_error, log_performance, setup_logging
from .client_factory import MusicServiceFactory
from .logging_middleware import LoggingMiddleware
from .music_service import MusicServiceError

logger = structlog.get_logger(__name__)

# Global service instances, created in lifespan
session_manager: Optional[SessionManagerService] = None
music_service_factory: Optional[MusicServiceFactory] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown."""
    global session_manager, music_service_factory

    config = SystemConfig.from_env()
    setup_logging(
        log_dir=config.log_dir,
        log_level=config.log_level,
        enable_console=config.enable_console_logging
    )

    logger.info("Initializing MoodMusic services", music_service=config.music_service)
    session_manager = SessionManagerService(
        random_seed=config.random_seed,
        session_timeout_minutes=config.session_timeout_minutes,
        max_transcript_entries=config.max_transcript_entries
    )
    music_service_factory = MusicServiceFactory(config)

    yield

    logger.info("Shutting down MoodMusic services", active_sessions=len(session_manager.active_sessions()))
    session_manager = None
    music_service_factory = None


app = FastAPI(
    title="MoodMusic API",
    description="Mood-inferring conversational music recommendation engine",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"])


# Dependencies
def get_session_manager() -> SessionManagerService:
    if session_manager is None:
        raise HTTPException(status_code=503, detail="Session manager not available")
    return session_manager


def get_music_service_factory() -> MusicServiceFactory:
    if music_service_factory is None:
        raise HTTPException(status_code=503, detail="Music services not available")
    return music_service_factory


def _existing_engine(sessions: SessionManagerService, session_id: str) -> ConversationEngine:
    engine = sessions.get(session_id)
    if engine is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return engine


# Request/Response Models
class TurnRequest(BaseModel):
    """A single user utterance."""
    text: str = Field(..., max_length=2000, description="What the user said")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    timestamp: float
    version: str
    components: Dict[str, str]


class ConclusionResponse(BaseModel):
    """Closing message plus the arguments for a recommendation lookup."""
    session_id: str
    mood: Mood
    text: str
    recommendation_hint: Dict[str, Any]


class RecommendationResponse(BaseModel):
    """Tracks suggested for the session's mood."""
    session_id: str
    service: str
    mood: Mood
    genre: Optional[str] = None
    tracks: List[Dict[str, Any]]


# API Endpoints
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=time.time(),
        version=__version__,
        components={
            "session_manager": "active" if session_manager else "inactive",
            "music_services": "active" if music_service_factory else "inactive",
        }
    )


@app.post("/sessions/{session_id}/turns", response_model=EngineResponse)
async def take_turn(
    session_id: str,
    request: TurnRequest,
    sessions: SessionManagerService = Depends(get_session_manager)
):
    """Process one user utterance and append both sides to the transcript."""
    start_time = time.time()
    engine = sessions.get_or_create(session_id)
    response = engine.respond(request.text)

    log_performance("conversation_turn", time.time() - start_time, topic=response.topic.value)
    return response


@app.get("/sessions/{session_id}/mood", response_model=MoodAnalysisResult)
async def get_session_mood(
    session_id: str,
    sessions: SessionManagerService = Depends(get_session_manager)
):
    """Mood analysis over the whole session transcript."""
    engine = _existing_engine(sessions, session_id)
    return engine.analyze_transcript()


@app.get("/sessions/{session_id}/context")
async def get_session_context(
    session_id: str,
    sessions: SessionManagerService = Depends(get_session_manager)
):
    """Read-only snapshot of the session's dialogue state."""
    engine = _existing_engine(sessions, session_id)
    context: DialogueContext = engine.context.snapshot()
    transcript: List[TranscriptEntry] = list(engine.transcript)
    return {
        "session_id": session_id,
        "context": context.model_dump(mode="json"),
        "transcript": [entry.model_dump(mode="json") for entry in transcript],
        "current_mood": engine.current_mood(),
        "timestamp": time.time()
    }


@app.post("/sessions/{session_id}/conclusion", response_model=ConclusionResponse)
async def conclude_session(
    session_id: str,
    sessions: SessionManagerService = Depends(get_session_manager)
):
    """Closing message for the session's dominant mood."""
    engine = _existing_engine(sessions, session_id)
    mood = engine.analyze_transcript().dominant_mood

    return ConclusionResponse(
        session_id=session_id,
        mood=mood,
        text=engine.generate_conclusion(mood),
        recommendation_hint=engine.recommendation_hint(mood)
    )


@app.post("/sessions/{session_id}/recommendations", response_model=RecommendationResponse)
async def recommend_tracks(
    session_id: str,
    sessions: SessionManagerService = Depends(get_session_manager),
    factory: MusicServiceFactory = Depends(get_music_service_factory)
):
    """Fetch tracks for the session's mood from the preferred catalog."""
    engine = _existing_engine(sessions, session_id)
    mood = engine.analyze_transcript().dominant_mood
    hint = engine.recommendation_hint(mood)

    service = factory.get_preferred_service()
    start_time = time.time()
    async with service:
        tracks = await service.get_recommendations_by_mood(
            hint["mood"].value,
            limit=hint["limit"],
            genre=hint["genre"]
        )

    log_performance(
        "recommendations",
        time.time() - start_time,
        service=service.service_name,
        results_count=len(tracks)
    )

    return RecommendationResponse(
        session_id=session_id,
        service=service.service_name,
        mood=mood,
        genre=hint["genre"],
        tracks=[track.to_dict() for track in tracks]
    )


@app.delete("/sessions/{session_id}")
async def end_session(
    session_id: str,
    sessions: SessionManagerService = Depends(get_session_manager)
):
    """Forget the session; the next turn starts a fresh conversation."""
    existed = sessions.end(session_id)
    return {"session_id": session_id, "ended": existed}


# Error handlers
@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Custom HTTP exception handler."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.detail,
            "timestamp": time.time(),
            "path": str(request.url)
        }
    )


@app.exception_handler(MusicServiceError)
async def music_service_exception_handler(request, exc):
    """Catalog failures are upstream errors."""
    log_error(exc, {"path": str(request.url), "service": exc.service, "status": exc.status})
    logger.warning("Music service request failed", service=exc.service, error=str(exc))
    return JSONResponse(
        status_code=502,
        content={
            "error": str(exc),
            "service": exc.service,
            "timestamp": time.time(),
            "path": str(request.url)
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """General exception handler for unexpected errors."""
    log_error(exc, {"path": str(request.url)})
    logger.error("Unexpected error", error=str(exc), error_type=type(exc).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "timestamp": time.time(),
            "path": str(request.url)
        }
    )
