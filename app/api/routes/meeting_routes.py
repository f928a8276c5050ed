"""
Meeting Routes

POST /admin/meetings - Schedule a meeting and notify trainers (admin)
GET /admin/meetings - List meetings, latest date first (admin or trainer)
DELETE /admin/meetings/{meeting_id} - Delete a meeting (admin)
"""

from fastapi import APIRouter, HTTPException, Depends
from fastapi.concurrency import run_in_threadpool

from app.core.auth import get_current_admin, get_current_user
from app.services.email_service import EmailService, get_email_service
from app.services.mongo_service import MeetingService, serialize_doc
from app.services.notification_service import notify_trainers_of_meeting
from app.schemas.schemas import MeetingCreate, MessageResponse

router = APIRouter(prefix="/admin/meetings", tags=["Meetings"])


@router.post("", status_code=201)
async def create_meeting(
    data: MeetingCreate,
    admin: dict = Depends(get_current_admin),
    email_service: EmailService = Depends(get_email_service)
):
    """
    Create a meeting, then notify the attendees.

    attendees: list of trainer ids, or ["ALL"] (default) for every active trainer.
    Notification and email failures are logged and never fail the request.
    """
    meeting = MeetingService().insert(data.to_document(), created_by=admin["user_id"])

    await run_in_threadpool(notify_trainers_of_meeting, meeting, email_service)

    return serialize_doc(meeting)


@router.get("")
async def list_meetings(user: dict = Depends(get_current_user)):
    return MeetingService().list_all()


@router.delete("/{meeting_id}", response_model=MessageResponse)
async def delete_meeting(meeting_id: str, admin: dict = Depends(get_current_admin)):
    if not MeetingService().delete(meeting_id):
        raise HTTPException(status_code=404, detail="Meeting not found")
    return MessageResponse(message="Meeting removed")
