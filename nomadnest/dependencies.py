from fastapi import Depends, HTTPException, status
from .services.jwt_service import JWTService


async def get_active_user(current_user: dict = Depends(JWTService.get_current_user)) -> dict:
    """
    Dependency for write operations.
    Raises HTTPException if the account has been blocked by moderation.
    """
    if current_user.get("status") == "blocked":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account has been blocked"
        )
    return current_user


async def get_current_admin_user(current_user: dict = Depends(JWTService.get_current_user)) -> dict:
    """
    Dependency to get current admin user.
    Raises HTTPException if user is not an admin.
    """
    if current_user.get("role") != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user
