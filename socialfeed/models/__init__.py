"""SQLAlchemy models for credential persistence."""

from .base import Base
from .credential import StoredCredential

__all__ = [
    "Base",
    "StoredCredential",
]
