from fastapi import APIRouter, Depends, status

from ..schemas import UserRegister, UserLogin, AuthResponse
from ..services import auth_service
from ..services.document_store import DocumentStore, get_store
from ..services.jwt_service import JWTService
from ..utils import public_user


router = APIRouter(
    prefix="/auth",
    tags=["authentication"],
    responses={
        401: {"description": "Invalid credentials"},
        409: {"description": "Email already registered"},
    }
)


def _auth_response(user: dict) -> AuthResponse:
    return AuthResponse(
        access_token=JWTService.create_token(user["id"], user.get("role")),
        user=public_user(user),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: UserRegister, store: DocumentStore = Depends(get_store)):
    """
    Create an account and sign it in.

    **Response:**
    - `access_token`: JWT bearer token
    - `user`: the new user's profile, without credentials
    """
    user = await auth_service.register_user(store, payload.email, payload.password, payload.name)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
async def login(payload: UserLogin, store: DocumentStore = Depends(get_store)):
    """
    Exchange email and password for a bearer token.

    Blocked accounts can still sign in; write endpoints reject them.
    """
    user = await auth_service.authenticate(store, payload.email, payload.password)
    return _auth_response(user)


@router.get("/me")
async def me(current_user: dict = Depends(JWTService.get_current_user)):
    return public_user(current_user)
