"""
Authentication API routes.
"""

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, EmailStr, Field

from reliatrack.api.dependencies import CurrentUserDep, DatabaseDep
from reliatrack.config.settings import settings
from reliatrack.schemas import TokenResponse, UserResponse
from reliatrack.services.auth_service import AuthService

router = APIRouter()


class SignupRequest(BaseModel):
    """User registration request."""
    email: EmailStr
    password: str = Field(..., min_length=settings.auth.password_min_length)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    company: str | None = None
    phone: str | None = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(body: SignupRequest, db: DatabaseDep):
    """Create an account on the basic plan and return a bearer token."""
    result = await AuthService(db).signup(**body.model_dump())
    return TokenResponse(
        token=result["token"],
        user=UserResponse.model_validate(result["user"]),
    )


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: DatabaseDep):
    """
    Authenticate user and get access token.

    - **email**: User email address
    - **password**: User password
    """
    result = await AuthService(db).authenticate(body.email, body.password)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return TokenResponse(
        token=result["token"],
        user=UserResponse.model_validate(result["user"]),
    )


@router.get("/me", response_model=UserResponse)
async def me(current_user: CurrentUserDep):
    return current_user
