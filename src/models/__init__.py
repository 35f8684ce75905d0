"""Database model type definitions."""

from src.models.user import UserChanges, UserRow

__all__ = [
    "UserRow",
    "UserChanges",
]
