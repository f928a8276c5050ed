"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt (trainer accounts)
- JWT token creation/verification
- FastAPI dependencies for admin / trainer protected routes

The admin account is configured through settings; trainers live in the
`trainers` collection.
"""

from datetime import datetime, timedelta
from typing import Optional
from bson import ObjectId
from bson.errors import InvalidId
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.config import get_settings
from app.db.mongodb import get_collection, COLLECTIONS

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor (auto_error off so a missing header becomes a 401)
bearer_scheme = HTTPBearer(auto_error=False)

ADMIN_USER_ID = "admin"


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> dict:
    """
    FastAPI dependency - Get current authenticated user (admin or trainer).

    Usage:
        @router.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    payload = decode_token(credentials.credentials)
    if not payload:
        raise credentials_exception

    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or not role:
        raise credentials_exception

    if role == "admin":
        return {"user_id": ADMIN_USER_ID, "email": settings.admin_email, "role": "admin"}

    if role != "trainer":
        raise credentials_exception

    # Verify trainer still exists and is active
    try:
        trainer = get_collection(COLLECTIONS["trainers"]).find_one({"_id": ObjectId(user_id)})
    except InvalidId:
        trainer = None

    if not trainer:
        raise credentials_exception

    if trainer.get("status") != "active":
        raise HTTPException(status_code=403, detail="Account deactivated")

    return {"user_id": str(trainer["_id"]), "email": trainer["email"], "role": "trainer", "name": trainer.get("name")}


async def get_current_admin(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require admin role."""
    if user["role"] != "admin":
        raise HTTPException(status_code=403, detail="Admins only")
    return user


async def get_current_trainer(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require trainer role."""
    if user["role"] != "trainer":
        raise HTTPException(status_code=403, detail="Trainers only")
    return user
