"""Identity resolution: find-or-create users by wallet credential."""

import logging
from datetime import datetime, timezone
from uuid import uuid4

from src.api.middleware.error_handler import InvalidInputError, NoFieldsProvidedError, NotFoundError
from src.core.user_store import DuplicateCredentialError, UserStore, get_user_store
from src.models.user import UserChanges, UserRow
from src.schemas.user import ProfileUpdate

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class IdentityService:
    """Service resolving wallet credentials into durable user records.

    ``pubkey`` and ``address`` are treated as aliases of one wallet
    identity: a user is found when either of them matches. The profile
    completeness flag is only ever raised, never cleared.
    """

    def __init__(self, store: UserStore | None = None) -> None:
        """Initialize identity service with a credential store.

        Args:
            store: Store to use; defaults to the configured store.
        """
        self.store = store if store is not None else get_user_store()

    async def authenticate(
        self,
        pubkey: str | None,
        address: str | None,
        name: str | None = None,
    ) -> UserRow:
        """Return the user owning a credential, creating it on first sight.

        Authenticating an existing user does not modify it. A new user gets a
        fresh id, both credentials, the optional name, and a complete profile
        iff a name was given.

        Args:
            pubkey: Wallet public key.
            address: Wallet address.
            name: Optional display name, only used when creating.

        Returns:
            UserRow: The user as stored.

        Raises:
            InvalidInputError: If pubkey or address is missing.
        """
        if not pubkey or not address:
            raise InvalidInputError("pubkey and address are required")

        user = await self.store.find_by_credential(pubkey, address)
        if user:
            logger.info("User authenticated: %s", user["name"] or user["address"])
            return user

        now = _now()
        row = UserRow(
            id=str(uuid4()),
            pubkey=pubkey,
            address=address,
            name=name or None,
            avatar_uri=None,
            is_profile_complete=1 if name else 0,
            created_at=now,
            updated_at=now,
        )

        try:
            await self.store.insert_user(row)
        except DuplicateCredentialError:
            # Lost a race with a concurrent first login for the same wallet
            winner = await self.store.find_by_credential(pubkey, address)
            if winner is None:
                raise
            logger.info("User created concurrently, returning existing: %s", winner["id"])
            return winner

        created = await self.store.get_by_id(row["id"])
        if created is None:
            raise NotFoundError("User not found")

        logger.info("Created new user: %s", created["name"] or created["address"])
        return created

    async def get_by_id(self, user_id: str) -> UserRow:
        """Get a user by id.

        Raises:
            NotFoundError: If no user has this id.
        """
        user = await self.store.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def get_by_address(self, address: str) -> UserRow:
        """Get a user by wallet address or pubkey.

        Raises:
            NotFoundError: If neither credential column matches.
        """
        user = await self.store.find_by_credential(address)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def update_profile(self, user_id: str, data: ProfileUpdate) -> UserRow:
        """Apply a partial profile update.

        Only fields present in ``data`` are written. Any applied field marks
        the profile complete and refreshes ``updated_at``.

        Args:
            user_id: The user's id.
            data: The fields to update.

        Returns:
            UserRow: The user re-read after the write.

        Raises:
            NotFoundError: If the user does not exist.
            NoFieldsProvidedError: If neither name nor avatarUri was supplied.
        """
        if await self.store.get_by_id(user_id) is None:
            raise NotFoundError("User not found")

        changes: UserChanges = data.to_changes()
        if not changes:
            raise NoFieldsProvidedError()

        changes["is_profile_complete"] = 1
        changes["updated_at"] = _now()
        await self.store.update_user(user_id, changes)

        return await self.get_by_id(user_id)

    async def list_users(self) -> list[UserRow]:
        """List all users, newest first."""
        return await self.store.list_users()
