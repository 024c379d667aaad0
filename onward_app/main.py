# onward_app/main.py

import logging
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from onward_app.config.constants import CHAT_MESSAGE_MAX_CHARS, JOURNAL_DEFAULT_LIST_LIMIT
from onward_app.config.settings import settings
from onward_app.core.errors import (
    EntryNotFoundError,
    InvalidInputError,
    PersistenceError,
    ProfileExistsError,
    ProfileNotFoundError,
)
from onward_app.core.profile import ProfileRecord
from onward_app.core.progress_service import ProgressService
from onward_app.integrations import llm
from onward_app.persistence import SessionLocal, engine, init_db

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# --- Pydantic models ---
class ProfileResponse(BaseModel):
    start_date: datetime
    no_contact_start_date: datetime
    name: str
    why_statement: str
    precision_level: str
    relationship_type: str
    relationship_duration: str
    reason_for_no_contact: str
    previous_no_contact_attempts: int
    journal_entries_count: int
    total_chat_sessions: int
    chat_sessions_today: int
    last_chat_session_date: datetime
    app_opened_today: int
    last_active_date: datetime
    daily_activity_log: List[date]
    unlocked_achievement_ids: List[str]
    achieved_milestone_ids: List[str]
    current_growth_stage: str
    consistency_score: float
    self_care_score: float
    emotional_stability_score: float
    daily_reminder_enabled: bool
    reminder_time: str
    weekly_reports_enabled: bool
    anonymous_analytics_enabled: bool

    @classmethod
    def from_record(cls, profile: ProfileRecord) -> "ProfileResponse":
        return cls(**profile.to_dict())

class CreateProfileRequest(BaseModel):
    no_contact_start_date: datetime
    name: str = ""
    why_statement: str = ""
    precision_level: str = Field("day", description="day, hour or minute")
    relationship_type: str = ""
    relationship_duration: str = ""
    reason_for_no_contact: str = ""
    previous_no_contact_attempts: int = Field(0, ge=0)

class NoContactStartRequest(BaseModel):
    no_contact_start_date: datetime

class RelationshipContextRequest(BaseModel):
    relationship_type: str
    relationship_duration: str
    reason_for_no_contact: str
    previous_no_contact_attempts: int = Field(0, ge=0)

class SettingsRequest(BaseModel):
    daily_reminder_enabled: bool = True
    reminder_time: str = Field("20:00", description="Local reminder time, HH:MM")
    weekly_reports_enabled: bool = True
    anonymous_analytics_enabled: bool = True

class JournalEntryRequest(BaseModel):
    content: str = Field(..., min_length=1, description="The journal entry text.")
    mood: Optional[str] = None

class JournalEntryResponse(BaseModel):
    entry: Dict[str, Any]
    profile: ProfileResponse

class MilestoneResponse(BaseModel):
    milestone: Optional[Dict[str, Any]] = None

class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., min_length=1, max_length=CHAT_MESSAGE_MAX_CHARS)
    user_id: Optional[str] = Field(None, alias="userId")

class ChatResponse(BaseModel):
    message: str
    timestamp: str


# --- Dependencies ---
def get_progress_service(request: Request) -> ProgressService:
    return request.app.state.progress_service

def get_chat_client(request: Request) -> Callable[[str], str]:
    return request.app.state.chat_client

def _require(value, what: str = "Profile"):
    if value is None:
        raise HTTPException(status_code=404, detail=f"{what} not found. Complete onboarding via POST /profile.")
    return value


router = APIRouter()


# --- Profile ---
@router.post("/profile", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
def create_profile_endpoint(request: CreateProfileRequest, service: ProgressService = Depends(get_progress_service)):
    """Completes onboarding by creating the single profile record."""
    profile = service.create_profile(**request.model_dump())
    return ProfileResponse.from_record(profile)

@router.get("/profile", response_model=ProfileResponse)
def get_profile_endpoint(service: ProgressService = Depends(get_progress_service)):
    return ProfileResponse.from_record(_require(service.get_profile()))

@router.delete("/profile", status_code=status.HTTP_204_NO_CONTENT)
def erase_all_endpoint(service: ProgressService = Depends(get_progress_service)):
    """Irreversibly deletes the profile and every journal entry."""
    service.erase_all()
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.put("/profile/no-contact-start", response_model=ProfileResponse)
def set_no_contact_start_endpoint(request: NoContactStartRequest, service: ProgressService = Depends(get_progress_service)):
    profile = service.set_no_contact_start_date(request.no_contact_start_date)
    return ProfileResponse.from_record(_require(profile))

@router.put("/profile/relationship", response_model=ProfileResponse)
def update_relationship_endpoint(request: RelationshipContextRequest, service: ProgressService = Depends(get_progress_service)):
    profile = service.update_relationship_context(**request.model_dump())
    return ProfileResponse.from_record(_require(profile))

@router.put("/profile/settings", response_model=ProfileResponse)
def update_settings_endpoint(request: SettingsRequest, service: ProgressService = Depends(get_progress_service)):
    profile = service.update_settings(**request.model_dump())
    return ProfileResponse.from_record(_require(profile))


# --- Progress & activity ---
@router.get("/progress")
def progress_endpoint(service: ProgressService = Depends(get_progress_service)):
    """Scores, streak, growth stage, unlocks and engagement flags."""
    return _require(service.progress_summary())

@router.post("/activity/app-open", response_model=ProfileResponse)
def app_open_endpoint(service: ProgressService = Depends(get_progress_service)):
    return ProfileResponse.from_record(_require(service.record_app_open()))

@router.post("/journal", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
def create_journal_entry_endpoint(request: JournalEntryRequest, service: ProgressService = Depends(get_progress_service)):
    result = _require(service.record_journal_entry(request.content, mood=request.mood))
    profile, entry = result
    return JournalEntryResponse(entry=entry, profile=ProfileResponse.from_record(profile))

@router.get("/journal")
def list_journal_entries_endpoint(
    limit: int = Query(JOURNAL_DEFAULT_LIST_LIMIT, ge=0, description="Newest entries to return."),
    service: ProgressService = Depends(get_progress_service),
):
    return service.list_journal_entries(limit=limit)

@router.delete("/journal/{entry_id}", response_model=ProfileResponse)
def delete_journal_entry_endpoint(entry_id: str, service: ProgressService = Depends(get_progress_service)):
    profile = service.record_journal_deletion(entry_id)
    return ProfileResponse.from_record(_require(profile))


# --- Unlocks ---
@router.post("/milestones/check", response_model=MilestoneResponse)
def check_milestones_endpoint(service: ProgressService = Depends(get_progress_service)):
    """Awards at most one newly reached milestone."""
    milestone = service.check_milestones(missing_ok=False)
    return MilestoneResponse(milestone=milestone.to_dict() if milestone else None)

@router.post("/achievements/check")
def check_achievements_endpoint(service: ProgressService = Depends(get_progress_service)):
    unlocked = _require(service.check_achievements())
    return [a.to_dict() for a in unlocked]


# --- Export ---
@router.get("/export")
def export_endpoint(service: ProgressService = Depends(get_progress_service)):
    return _require(service.export_snapshot())


# --- Chat assistant proxy ---
@router.post("/api/chat", response_model=ChatResponse)
def chat_endpoint(
    request: ChatRequest,
    service: ProgressService = Depends(get_progress_service),
    chat_client: Callable[[str], str] = Depends(get_chat_client),
):
    if not request.message.strip():
        return JSONResponse(status_code=400, content={"error": "Message is required and must be a non-empty string"})

    try:
        reply = chat_client(request.message)
    except llm.LLMError as e:
        logger.error("Chat upstream failure for user %s: %s", request.user_id, e)
        return JSONResponse(status_code=500, content={"error": "Failed to get response from AI service"})

    try:
        service.record_chat_session()
    except PersistenceError as e:
        # The reply is still delivered; the counter update can be retried next session
        logger.warning("Chat session not recorded: %s", e)

    return ChatResponse(message=reply, timestamp=datetime.now(timezone.utc).isoformat())

@router.get("/api/health")
def health_endpoint():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.api_version,
    }


# --- Error mapping ---
def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(EntryNotFoundError)
    async def entry_not_found_handler(request: Request, exc: EntryNotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ProfileNotFoundError)
    async def profile_not_found_handler(request: Request, exc: ProfileNotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ProfileExistsError)
    async def profile_exists_handler(request: Request, exc: ProfileExistsError):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(PersistenceError)
    async def persistence_handler(request: Request, exc: PersistenceError):
        logger.error("Persistence failure on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=503, content={"detail": "Could not save your progress. Please try again."})

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError):
        # The chat proxy keeps its {error: ...} contract with HTTP 400
        if request.url.path.startswith("/api/"):
            errors = exc.errors()
            message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
            return JSONResponse(status_code=400, content={"error": message})
        return JSONResponse(status_code=422, content={"detail": exc.errors()})


def create_app(
    service: Optional[ProgressService] = None,
    chat_client: Optional[Callable[[str], str]] = None,
) -> FastAPI:
    """
    Builds the API around one ProgressService. Without an explicit service,
    one is bound to the configured database and its tables are created on
    startup.
    """
    create_tables = service is None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if create_tables:
            init_db(engine)
            logger.info("Database tables ensured at %s", settings.db_connection_string)
        yield

    app = FastAPI(title="Onward Progress API", version=settings.api_version, lifespan=lifespan)
    app.state.progress_service = service or ProgressService(SessionLocal)
    app.state.chat_client = chat_client or llm.generate_response
    app.include_router(router)
    _register_exception_handlers(app)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("onward_app.main:app", host="0.0.0.0", port=8000, reload=False)
