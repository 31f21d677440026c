from fastapi import Depends, HTTPException, status

from staffpanel.auth.dependencies import get_current_user
from staffpanel.auth.schemas import CurrentUser


async def require_admin(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Require the admin flag. Used on every admin-only mutation and listing."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden",
        )
    return current_user


def is_owner_or_admin(current_user: CurrentUser, owner_id: int) -> bool:
    return current_user.is_admin or current_user.id == owner_id
