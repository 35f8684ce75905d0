"""Credential store backends for user records.

Both backends enforce uniqueness of ``pubkey`` and of ``address``: a second
insert that reuses either value fails with DuplicateCredentialError.
"""

import asyncio
import logging
from functools import lru_cache
from typing import Any, Protocol

from postgrest.exceptions import APIError as PostgrestAPIError
from supabase import Client

from src.core.config import get_settings
from src.core.supabase import get_supabase_client
from src.models.user import UserChanges, UserRow

logger = logging.getLogger(__name__)

# Postgres unique_violation
UNIQUE_VIOLATION = "23505"


def quote_filter_value(value: str) -> str:
    """Quote a value for a PostgREST logic-tree filter such as ``or=(...)``.

    Backslashes and double quotes are escaped so the value cannot close the
    quotes and add clauses of its own.
    """
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class DuplicateCredentialError(Exception):
    """Raised when an insert collides with an existing pubkey or address."""

    def __init__(self, pubkey: str, address: str) -> None:
        super().__init__(f"A user with pubkey {pubkey} or address {address} already exists")
        self.pubkey = pubkey
        self.address = address


class UserStore(Protocol):
    """Operations the identity service needs from a credential store."""

    async def find_by_credential(self, pubkey: str, address: str | None = None) -> UserRow | None: ...

    async def get_by_id(self, user_id: str) -> UserRow | None: ...

    async def insert_user(self, row: UserRow) -> None: ...

    async def update_user(self, user_id: str, changes: UserChanges) -> None: ...

    async def list_users(self) -> list[UserRow]: ...

    async def check_connection(self) -> dict[str, Any]: ...


class SupabaseUserStore:
    """User records in a Supabase (PostgREST) table.

    The table must declare unique constraints on ``pubkey`` and ``address``.
    """

    def __init__(self, client: Client | None = None, table: str | None = None) -> None:
        self.client = client or get_supabase_client()
        self.table = table or get_settings().users_table

    async def find_by_credential(self, pubkey: str, address: str | None = None) -> UserRow | None:
        """Find the user whose pubkey or address matches.

        Either alias resolves the same identity. With only ``pubkey`` given,
        the single value is matched against both columns.

        Args:
            pubkey: Value matched against the pubkey column.
            address: Value matched against the address column; defaults to pubkey.

        Returns:
            UserRow | None: The matching user or None.
        """
        if address is None:
            address = pubkey

        response = (
            self.client.table(self.table)
            .select("*")
            .or_(f"pubkey.eq.{quote_filter_value(pubkey)},address.eq.{quote_filter_value(address)}")
            .limit(1)
            .execute()
        )

        return response.data[0] if response.data else None

    async def get_by_id(self, user_id: str) -> UserRow | None:
        response = (
            self.client.table(self.table)
            .select("*")
            .eq("id", user_id)
            .maybe_single()
            .execute()
        )

        return response.data if response and response.data else None

    async def insert_user(self, row: UserRow) -> None:
        """Insert a new user row.

        Raises:
            DuplicateCredentialError: If the pubkey or address is taken.
        """
        try:
            self.client.table(self.table).insert(dict(row)).execute()
        except PostgrestAPIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise DuplicateCredentialError(row["pubkey"], row["address"]) from e
            raise

    async def update_user(self, user_id: str, changes: UserChanges) -> None:
        (
            self.client.table(self.table)
            .update(dict(changes))
            .eq("id", user_id)
            .execute()
        )

    async def list_users(self) -> list[UserRow]:
        response = (
            self.client.table(self.table)
            .select("*")
            .order("created_at", desc=True)
            .execute()
        )

        return response.data or []

    async def check_connection(self) -> dict[str, Any]:
        """Check that the users table is reachable.

        Returns:
            dict: Connection status with 'healthy' boolean and optional 'error' message.
        """
        try:
            self.client.table(self.table).select("id").limit(1).execute()
            return {"healthy": True}
        except Exception as e:
            return {"healthy": False, "error": str(e)}


class InMemoryUserStore:
    """Async-safe in-process user store for local development and tests."""

    def __init__(self) -> None:
        self._rows: dict[str, UserRow] = {}
        self._lock = asyncio.Lock()

    async def find_by_credential(self, pubkey: str, address: str | None = None) -> UserRow | None:
        if address is None:
            address = pubkey

        async with self._lock:
            for row in self._rows.values():
                if row["pubkey"] == pubkey or row["address"] == address:
                    return row.copy()
        return None

    async def get_by_id(self, user_id: str) -> UserRow | None:
        async with self._lock:
            row = self._rows.get(user_id)
            return row.copy() if row else None

    async def insert_user(self, row: UserRow) -> None:
        async with self._lock:
            for existing in self._rows.values():
                if existing["pubkey"] == row["pubkey"] or existing["address"] == row["address"]:
                    raise DuplicateCredentialError(row["pubkey"], row["address"])
            if row["id"] in self._rows:
                raise ValueError(f"User id {row['id']} already exists")
            self._rows[row["id"]] = row.copy()

    async def update_user(self, user_id: str, changes: UserChanges) -> None:
        async with self._lock:
            row = self._rows.get(user_id)
            if row is not None:
                row.update(changes)

    async def list_users(self) -> list[UserRow]:
        async with self._lock:
            rows = [row.copy() for row in self._rows.values()]
        return sorted(rows, key=lambda r: r["created_at"], reverse=True)

    async def check_connection(self) -> dict[str, Any]:
        return {"healthy": True}

    def __len__(self) -> int:
        return len(self._rows)


@lru_cache
def get_user_store() -> UserStore:
    """Get the cached credential store selected by settings.

    Returns:
        UserStore: Supabase-backed store, or the in-memory store when
            USER_STORE_BACKEND=memory.
    """
    settings = get_settings()
    if settings.user_store_backend == "memory":
        logger.warning("Using in-memory user store; users are lost on restart")
        return InMemoryUserStore()
    return SupabaseUserStore()
