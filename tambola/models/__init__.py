from .base import Base

# import models so metadata.create_all sees every table
from .shared_state import AnnouncementRecord, SharedStateEntry  # noqa: F401

__all__ = [
    "Base",
    "AnnouncementRecord",
    "SharedStateEntry",
]
