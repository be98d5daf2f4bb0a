"""Sessions module - scheduled sessions, intents and check-ins."""

from .models import IntentStatus, Session, SessionCheckin, SessionIntent, SessionStatus
from .repository import SessionCheckinRepository, SessionIntentRepository, SessionRepository
from .schemas import (
    CheckinEntry,
    CheckinResponse,
    FinalizeResponse,
    IntentDeclare,
    IntentResponse,
    IntentUpdate,
    SessionCreate,
    SessionFinalize,
    SessionResponse,
    SessionUpdate,
)
from .service import Finalization, SessionIntentService, SessionService

__all__ = [
    "CheckinEntry",
    "CheckinResponse",
    "Finalization",
    "FinalizeResponse",
    "IntentDeclare",
    "IntentResponse",
    "IntentStatus",
    "IntentUpdate",
    "Session",
    "SessionCheckin",
    "SessionCheckinRepository",
    "SessionCreate",
    "SessionFinalize",
    "SessionIntent",
    "SessionIntentRepository",
    "SessionIntentService",
    "SessionRepository",
    "SessionResponse",
    "SessionService",
    "SessionStatus",
    "SessionUpdate",
]
