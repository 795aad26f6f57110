"""MongoDB repositories, one per collection."""

from plannora.repositories.collaboration_repo import (
    CollaborationRepository,
    MessageRepository,
    NoteRepository,
)
from plannora.repositories.event_repo import EventRepository
from plannora.repositories.match_repo import MatchRequestRepository
from plannora.repositories.user_repo import UserRepository
from plannora.repositories.vendor_repo import (
    CollaborationVendorRepository,
    VendorRepository,
)

__all__ = [
    "CollaborationRepository",
    "CollaborationVendorRepository",
    "EventRepository",
    "MatchRequestRepository",
    "MessageRepository",
    "NoteRepository",
    "UserRepository",
    "VendorRepository",
]
