"""
Authentication Routes

POST /auth/login - Login (admin or trainer) and get JWT token
GET /auth/me - Get current user info
"""

import hmac

from fastapi import APIRouter, HTTPException, Depends

from app.core.auth import verify_password, create_access_token, get_current_user, ADMIN_USER_ID
from app.core.config import get_settings
from app.services.mongo_service import TrainerService
from app.schemas.schemas import LoginRequest, TokenResponse, UserRole

settings = get_settings()

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=TokenResponse, response_model_by_alias=True)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    if request.email.lower() == settings.admin_email.lower():
        if not hmac.compare_digest(request.password, settings.admin_password):
            raise HTTPException(status_code=401, detail="Invalid email or password")
        token = create_access_token(data={"sub": ADMIN_USER_ID, "role": UserRole.admin.value})
        return TokenResponse(access_token=token, role=UserRole.admin, user_id=ADMIN_USER_ID)

    trainer = TrainerService().get_by_email(request.email)
    if not trainer or not verify_password(request.password, trainer["passwordHash"]):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if trainer.get("status") != "active":
        raise HTTPException(status_code=403, detail="Account deactivated")

    trainer_id = str(trainer["_id"])
    token = create_access_token(data={"sub": trainer_id, "role": UserRole.trainer.value})

    return TokenResponse(access_token=token, role=UserRole.trainer, user_id=trainer_id)


@router.get("/me")
async def get_me(user: dict = Depends(get_current_user)):
    """Get current authenticated user's info."""
    return user
