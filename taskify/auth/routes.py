# =============================================================================
# Auth API Routes
# =============================================================================
#
# Endpoints:
#   POST /auth/register  - Create account (no tokens)
#   POST /auth/login     - Get tokens
#   POST /auth/refresh   - Rotate refresh token, get a new pair
#   POST /auth/logout    - Revoke the current refresh token
#   GET  /auth/me        - Get current user
#
# Errors are raised as TaskifyError and mapped to status codes by the app's
# exception handlers.
#
# =============================================================================

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field, field_validator
from pydantic.networks import validate_email

from taskify.auth.context import Identity
from taskify.auth.middleware import require_identity
from taskify.auth.passwords import MAX_PASSWORD_BYTES, password_too_long
from taskify.auth.service import AuthService
from taskify.auth.tokens import TokenPair
from taskify.core.models import UserProfile

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


# =============================================================================
# Request Models
# =============================================================================


class _EmailPassword(BaseModel):
    email: str
    password: str = Field(min_length=6)

    @field_validator("email")
    @classmethod
    def _valid_email(cls, value: str) -> str:
        # Validate the shape but keep the address exactly as typed
        validate_email(value)
        return value

    @field_validator("password")
    @classmethod
    def _fits_bcrypt(cls, value: str) -> str:
        if password_too_long(value):
            raise ValueError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
        return value


class RegisterRequest(_EmailPassword):
    name: str | None = None


class LoginRequest(_EmailPassword):
    pass


class RefreshRequest(BaseModel):
    token: str = Field(min_length=1)


class MessageResponse(BaseModel):
    message: str


# =============================================================================
# Public Endpoints
# =============================================================================


@router.post("/register", response_model=UserProfile, status_code=201)
async def register(data: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    """
    Create a new account.

    Returns the public profile; log in separately to get tokens.
    """
    return await auth.register(data.email, data.password, data.name)


@router.post("/login", response_model=TokenPair)
async def login(data: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    """
    Authenticate and get tokens.
    """
    return await auth.login(data.email, data.password)


@router.post("/refresh", response_model=TokenPair)
async def refresh(data: RefreshRequest, auth: AuthService = Depends(get_auth_service)):
    """
    Exchange the current refresh token for a new pair.

    The presented token stops working as soon as this succeeds.
    """
    return await auth.refresh(data.token)


# =============================================================================
# Protected Endpoints
# =============================================================================


@router.post("/logout", response_model=MessageResponse)
async def logout(
    identity: Identity = Depends(require_identity),
    auth: AuthService = Depends(get_auth_service),
):
    """Revoke the refresh token; the access token simply expires."""
    await auth.logout(identity.id)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserProfile)
async def get_current_user(
    identity: Identity = Depends(require_identity),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Get the current authenticated user.
    """
    return await auth.get_profile(identity.id)
