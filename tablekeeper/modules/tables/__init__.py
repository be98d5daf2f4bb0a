"""Tables module - game tables and their members."""

from .models import Table, TableMembership, TableStatus
from .repository import MembershipRepository, TableRepository
from .schemas import MemberResponse, TableCreate, TableResponse, TableUpdate
from .service import TableService

__all__ = [
    "MemberResponse",
    "MembershipRepository",
    "Table",
    "TableCreate",
    "TableMembership",
    "TableRepository",
    "TableResponse",
    "TableService",
    "TableStatus",
    "TableUpdate",
]
