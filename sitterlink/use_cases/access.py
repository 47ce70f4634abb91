"""Current-user resolution shared by use cases."""

from sitterlink.domain.exceptions import AccessDeniedError
from sitterlink.domain.models import UserProfile, UserType
from sitterlink.domain.protocols import CurrentUserProtocol


async def resolve_current_user(
    identity: CurrentUserProtocol, required_role: UserType | None = None
) -> UserProfile:
    """Load the logged-in user and optionally enforce a role.

    Raises:
        AuthenticationError: If nobody is logged in
        AccessDeniedError: If the user's role differs from ``required_role``
        StoreError: If the user record cannot be fetched
    """
    user = UserProfile.model_validate(await identity.me())
    if required_role is not None and user.user_type is not required_role:
        actual = user.user_type.value if user.user_type else None
        raise AccessDeniedError(required_role.value, actual)
    return user


__all__ = ["resolve_current_user"]
