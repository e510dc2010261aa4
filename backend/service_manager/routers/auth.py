"""Registration and login endpoints."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth import AuthContext, get_auth_context
from ..database import get_db
from ..errors import persistence_error
from ..models import Profile
from ..schemas.user import AuthResponse, LoginRequest, ProfileResponse, RegisterRequest
from ..security import create_access_token, get_password_hash, verify_password
from ..utils.db_utils import commit_with_retry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _auth_response(message: str, profile: Profile) -> AuthResponse:
    return AuthResponse(
        message=message,
        user={"id": profile.id, "email": profile.email, "name": profile.name},
        token=create_access_token(profile.id, profile.email),
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(data: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Create an account and return an access token."""
    email = data.email.strip().lower()
    existing = await db.execute(select(Profile).where(Profile.email == email))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="Email already registered")

    profile = Profile(
        email=email,
        name=data.name.strip(),
        password_hash=get_password_hash(data.password),
    )
    db.add(profile)
    try:
        await commit_with_retry(db)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to register {email}: {e}")
        raise persistence_error("Failed to register user", e)
    await db.refresh(profile)

    logger.info(f"Registered user {profile.id}")
    return _auth_response("User registered successfully", profile)


@router.post("/login", response_model=AuthResponse)
async def login(data: LoginRequest, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Profile).where(Profile.email == data.email.strip().lower()))
    profile = result.scalar_one_or_none()
    if not profile or not verify_password(data.password, profile.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return _auth_response("Login successful", profile)


@router.get("/me", response_model=ProfileResponse)
async def me(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    profile = await db.get(Profile, auth.user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")
    return profile
