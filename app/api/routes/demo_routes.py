"""
Demo Class Routes

Public:
GET /demo/slots - Free slots (?date=YYYY-MM-DD, default: from today on)
POST /demo/book - Book a demo class

Admin:
POST /demo/slots - Create slots in bulk
GET /demo/bookings - All bookings, newest first
DELETE /demo/slots/{slot_id} - Delete a slot
"""

import html
import logging
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from app.core.auth import get_current_admin
from app.services.email_service import EmailService, get_email_service
from app.services.mongo_service import DemoSlotService, DemoBookingService, start_of_day
from app.schemas.schemas import DemoSlotBulkCreate, DemoBookingCreate, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Demo Classes"])


@router.get("/slots")
async def list_available_slots(date_: Optional[date] = Query(None, alias="date")):
    day = datetime.combine(date_, datetime.min.time()) if date_ else None
    return DemoSlotService().list_available(day)


@router.post("/slots", status_code=201)
async def create_slots(data: DemoSlotBulkCreate, admin: dict = Depends(get_current_admin)):
    """
    Bulk create slots. Duplicates of an existing (date, time) are rejected by the
    unique index; the other slots are still created and the response is 400.
    """
    created, error = DemoSlotService().insert_many([slot.model_dump() for slot in data.slots])
    if error:
        logger.warning("Some demo slots were not created: %s", error)
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "message": "Error creating slots. Some might duplicate existing ones.",
                "created": len(created),
            },
        )
    return created


def _send_booking_confirmation(booking: dict, email_service: EmailService) -> None:
    """Best-effort confirmation to the person who booked."""
    body = f"""
        <div style="font-family: Arial, sans-serif; padding: 20px;">
            <h2>Your demo class is booked</h2>
            <p>Hi {html.escape(booking['name'])},</p>
            <p><strong>Course:</strong> {html.escape(booking.get('course') or '-')}</p>
            <p><strong>Date:</strong> {booking['date'].strftime('%d %b %Y')}</p>
            <p><strong>Time:</strong> {html.escape(booking['timeSlot'])}</p>
        </div>
    """
    try:
        email_service.send(booking["email"], "Demo class confirmed", body)
    except Exception:
        logger.exception("Failed to send demo confirmation to %s", booking["email"])


@router.post("/book", status_code=201)
async def book_demo(data: DemoBookingCreate, email_service: EmailService = Depends(get_email_service)):
    """
    Book a demo class.

    If a managed slot exists for that day and time it is claimed first with a
    single conditional update; when it is already taken the booking is
    rejected (409). Bookings for times without a managed slot are accepted as
    free-form requests.
    """
    slots = DemoSlotService()
    booking = data.to_document()
    booking["date"] = start_of_day(data.date)

    slot = slots.claim(data.date, data.time_slot)
    if slot is None and slots.exists(data.date, data.time_slot):
        raise HTTPException(status_code=409, detail="This slot has already been booked")

    slot_id = slot["_id"] if slot else None
    try:
        saved = DemoBookingService().insert(booking, slot_id=slot_id)
    except Exception:
        if slot_id is not None:
            slots.release(slot_id)
        raise

    await run_in_threadpool(_send_booking_confirmation, booking, email_service)
    return saved


@router.get("/bookings")
async def list_bookings(admin: dict = Depends(get_current_admin)):
    return DemoBookingService().list_all()


@router.delete("/slots/{slot_id}", response_model=MessageResponse)
async def delete_slot(slot_id: str, admin: dict = Depends(get_current_admin)):
    if not DemoSlotService().delete(slot_id):
        raise HTTPException(status_code=404, detail="Slot not found")
    return MessageResponse(message="Slot deleted")
