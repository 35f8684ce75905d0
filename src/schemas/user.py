"""User Pydantic schemas for API request/response models."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.models.user import UserChanges, UserRow


class AuthenticateRequest(BaseModel):
    """Schema for wallet authentication.

    Credentials are optional at the schema level so that a missing pubkey or
    address is reported by the identity service as invalid input rather
    than as a request validation error.
    """

    pubkey: str | None = Field(default=None, description="Wallet public key")
    address: str | None = Field(default=None, description="Wallet address")
    name: str | None = Field(default=None, max_length=255, description="Display name for a new user")


class ProfileUpdate(BaseModel):
    """Schema for a partial profile update.

    Only fields sent in the request are applied. Sending ``null`` clears the
    field; omitting it leaves the stored value as is.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, max_length=255, description="New display name")
    avatar_uri: str | None = Field(default=None, alias="avatarUri", description="New avatar URI")

    def to_changes(self) -> UserChanges:
        """Project the explicitly supplied fields onto storage columns."""
        changes: UserChanges = {}
        if "name" in self.model_fields_set:
            changes["name"] = self.name
        if "avatar_uri" in self.model_fields_set:
            changes["avatar_uri"] = self.avatar_uri
        return changes


class UserResponse(BaseModel):
    """Schema for user API responses (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: str = Field(description="User unique identifier")
    pubkey: str = Field(description="Wallet public key")
    address: str = Field(description="Wallet address")
    name: str | None = Field(default=None, description="Display name")
    avatar_uri: str | None = Field(default=None, description="Avatar URI")
    is_profile_complete: bool = Field(description="Whether the user has completed their profile")
    created_at: str = Field(description="Creation timestamp, ISO 8601 as stored")
    updated_at: str = Field(description="Last update timestamp, ISO 8601 as stored")

    @classmethod
    def from_row(cls, row: UserRow) -> "UserResponse":
        """Build a response from a stored row, mapping the 0/1 flag to a bool."""
        return cls(
            id=row["id"],
            pubkey=row["pubkey"],
            address=row["address"],
            name=row["name"],
            avatar_uri=row["avatar_uri"],
            is_profile_complete=row["is_profile_complete"] == 1,
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def to_row(self) -> UserRow:
        """Map back to the storage shape."""
        return UserRow(
            id=self.id,
            pubkey=self.pubkey,
            address=self.address,
            name=self.name,
            avatar_uri=self.avatar_uri,
            is_profile_complete=1 if self.is_profile_complete else 0,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
