"""Table requests module - join requests and their approval."""

from .models import TableRequest, TableRequestStatus
from .repository import TableRequestRepository
from .schemas import TableRequestCreate, TableRequestResponse
from .service import TableRequestService

__all__ = [
    "TableRequest",
    "TableRequestCreate",
    "TableRequestRepository",
    "TableRequestResponse",
    "TableRequestService",
    "TableRequestStatus",
]
