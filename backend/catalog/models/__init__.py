"""All SQLAlchemy models – re-exported for Alembic and app use."""

from catalog.models.user import User
from catalog.models.species import Kingdom, Species
from catalog.models.comment import Comment
from catalog.models.audit_log import AuditLog

__all__ = [
    "User",
    "Kingdom", "Species",
    "Comment",
    "AuditLog",
]
