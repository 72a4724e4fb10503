from .user_repository import UserRepository
from .agent_profile_repository import AgentProfileRepository
from .office_repository import OfficeRepository
from .property_repository import PropertyRepository
from .saved_search_repository import SavedSearchRepository

__all__ = [
    "UserRepository",
    "AgentProfileRepository",
    "OfficeRepository",
    "PropertyRepository",
    "SavedSearchRepository",
]
