"""SQLAlchemy ORM models for formsync."""

from formsync.models.base import Base
from formsync.models.form import Form

__all__ = [
    "Base",
    "Form",
]
