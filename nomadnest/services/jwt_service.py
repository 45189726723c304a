from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from ..config import settings
from .document_store import DocumentStore, get_store

# JWT token scheme
security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)

USERS = "users"


class JWTService:
    @staticmethod
    def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
        """Create a JWT access token"""
        to_encode = data.copy()

        if expires_delta:
            expire = datetime.now(timezone.utc) + expires_delta
        else:
            expire = datetime.now(timezone.utc) + \
                timedelta(minutes=settings.jwt_expiry_minutes)

        to_encode.update({"exp": expire})
        encoded_jwt = jwt.encode(
            to_encode,
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm
        )
        return encoded_jwt

    @staticmethod
    def create_token(user_id: str, role: str = None, expires_delta: Optional[timedelta] = None) -> str:
        """Create a JWT token for user authentication"""
        data = {"sub": str(user_id)}
        if role:
            data["role"] = role
        return JWTService.create_access_token(data, expires_delta)

    @staticmethod
    def verify_token(token: str) -> dict:
        """Verify and decode a JWT token"""
        try:
            payload = jwt.decode(
                token,
                settings.jwt_secret_key,
                algorithms=[settings.jwt_algorithm]
            )
            return payload
        except JWTError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Could not validate credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )

    @staticmethod
    async def _user_from_token(token: str, store: DocumentStore) -> dict:
        payload = JWTService.verify_token(token)

        user_id = payload.get("sub")
        if not user_id:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Could not validate credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )

        user = await store.get(USERS, user_id)
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User not found",
                headers={"WWW-Authenticate": "Bearer"},
            )
        return user

    @staticmethod
    async def get_current_user(
        credentials: HTTPAuthorizationCredentials = Depends(security),
        store: DocumentStore = Depends(get_store),
    ) -> dict:
        """Get the current authenticated user document from JWT token"""
        return await JWTService._user_from_token(credentials.credentials, store)

    @staticmethod
    async def get_optional_user(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
        store: DocumentStore = Depends(get_store),
    ) -> Optional[dict]:
        """Like get_current_user, but anonymous requests resolve to None"""
        if credentials is None:
            return None
        return await JWTService._user_from_token(credentials.credentials, store)
