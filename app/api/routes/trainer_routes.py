"""
Trainer Routes

Admin:
GET /admin/trainers - List trainers
POST /admin/trainers - Create trainer account
PUT /admin/trainers/{trainer_id}/status - Activate / deactivate

Trainer:
GET /trainer/notifications - My notifications (newest first)
PUT /trainer/notifications/{notification_id}/read - Mark as read
"""

from fastapi import APIRouter, HTTPException, Depends
from pymongo.errors import DuplicateKeyError

from app.core.auth import get_current_admin, get_current_trainer, hash_password
from app.services.mongo_service import TrainerService, NotificationService, serialize_doc
from app.schemas.schemas import TrainerCreate, TrainerStatusUpdate, MessageResponse

admin_router = APIRouter(prefix="/admin/trainers", tags=["Trainers"])
trainer_router = APIRouter(prefix="/trainer", tags=["Trainer Portal"])


@admin_router.get("")
async def list_trainers(admin: dict = Depends(get_current_admin)):
    return TrainerService().list_all()


@admin_router.post("", status_code=201)
async def create_trainer(data: TrainerCreate, admin: dict = Depends(get_current_admin)):
    """Create a trainer account. Email must be unique."""
    try:
        doc = TrainerService().insert(
            name=data.name,
            email=data.email,
            password_hash=hash_password(data.password),
            status=data.status.value
        )
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="A trainer with this email already exists")

    doc.pop("passwordHash", None)
    return serialize_doc(doc)


@admin_router.put("/{trainer_id}/status")
async def update_trainer_status(trainer_id: str, data: TrainerStatusUpdate, admin: dict = Depends(get_current_admin)):
    trainer = TrainerService().update_status(trainer_id, data.status.value)
    if not trainer:
        raise HTTPException(status_code=404, detail="Trainer not found")
    return trainer


@trainer_router.get("/notifications")
async def my_notifications(trainer: dict = Depends(get_current_trainer)):
    return NotificationService().list_for_recipient(trainer["user_id"])


@trainer_router.put("/notifications/{notification_id}/read", response_model=MessageResponse)
async def mark_notification_read(notification_id: str, trainer: dict = Depends(get_current_trainer)):
    if not NotificationService().mark_read(notification_id, trainer["user_id"]):
        raise HTTPException(status_code=404, detail="Notification not found")
    return MessageResponse(message="Notification marked as read")
