"""User model type definitions for database operations."""

from typing import TypedDict


class UserRow(TypedDict):
    """User table row representation.

    Maps directly to the users table schema. ``pubkey`` and ``address`` are
    each unique; ``is_profile_complete`` is stored as a 0/1 integer flag.
    """

    id: str
    pubkey: str
    address: str
    name: str | None
    avatar_uri: str | None
    is_profile_complete: int
    created_at: str
    updated_at: str


class UserChanges(TypedDict, total=False):
    """Columns written by a partial user update.

    A key that is missing is left untouched; a key that is present is
    written, even when its value is None.
    """

    name: str | None
    avatar_uri: str | None
    is_profile_complete: int
    updated_at: str
