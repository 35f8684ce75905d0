"""User API routes."""

from fastapi import APIRouter

from src.schemas.user import AuthenticateRequest, ProfileUpdate, UserResponse
from src.services.identity_service import IdentityService

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "/auth",
    response_model=UserResponse,
    summary="Authenticate with a wallet",
    description="Returns the user owning the wallet credentials, creating one on first login.",
)
async def authenticate(data: AuthenticateRequest) -> UserResponse:
    """Authenticate or create a user from wallet credentials.

    Args:
        data: Wallet pubkey, address and optional display name.

    Returns:
        UserResponse: The stored user.

    Raises:
        InvalidInputError: 400 if pubkey or address is missing.
    """
    service = IdentityService()
    user = await service.authenticate(
        pubkey=data.pubkey,
        address=data.address,
        name=data.name,
    )

    return UserResponse.from_row(user)


@router.get(
    "",
    response_model=list[UserResponse],
    summary="List users",
    description="Returns all users, newest first. Intended for debugging and demos.",
)
async def list_users() -> list[UserResponse]:
    service = IdentityService()
    users = await service.list_users()
    return [UserResponse.from_row(user) for user in users]


@router.get(
    "/by-address/{address}",
    response_model=UserResponse,
    summary="Get user by wallet address",
    description="Looks the user up by address or pubkey.",
)
async def get_user_by_address(address: str) -> UserResponse:
    """Get a user by either wallet credential.

    Raises:
        NotFoundError: 404 if no user matches.
    """
    service = IdentityService()
    user = await service.get_by_address(address)
    return UserResponse.from_row(user)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get user by ID",
)
async def get_user(user_id: str) -> UserResponse:
    """Get a user by id.

    Raises:
        NotFoundError: 404 if the user does not exist.
    """
    service = IdentityService()
    user = await service.get_by_id(user_id)
    return UserResponse.from_row(user)


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update user profile",
    description="Updates only the provided fields and marks the profile complete.",
)
async def update_user_profile(user_id: str, data: ProfileUpdate | None = None) -> UserResponse:
    """Update a user's profile.

    Args:
        user_id: The user's id.
        data: Fields to update (name and/or avatarUri). A missing body
            counts as no fields provided.

    Returns:
        UserResponse: The updated user.

    Raises:
        NotFoundError: 404 if the user does not exist.
        NoFieldsProvidedError: 400 if no field was provided.
    """
    service = IdentityService()
    user = await service.update_profile(user_id, data if data is not None else ProfileUpdate())
    return UserResponse.from_row(user)
