"""
Meeting notification fan-out.

After a meeting is stored, every recipient trainer gets an in-app
notification and an email. Each recipient is handled independently: a
failure is logged and the loop moves on, so one bad address never blocks
the others or the API response.
"""
import html
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List

from app.services.email_service import EmailService
from app.services.mongo_service import NotificationService, TrainerService
from app.schemas.schemas import ALL_ATTENDEES

logger = logging.getLogger(__name__)


@dataclass
class FanOutResult:
    recipients: int = 0
    notified: int = 0
    emailed: int = 0


def format_meeting_date(value: datetime) -> str:
    return value.strftime("%d %b %Y")


def resolve_recipients(attendees: List[str], trainers: TrainerService) -> List[dict]:
    """Explicit trainer ids, or every active trainer when "ALL" is present."""
    if not attendees or ALL_ATTENDEES in attendees:
        return trainers.find_active()
    return trainers.find_active(attendees)


def build_meeting_email(meeting: dict) -> str:
    title = html.escape(meeting["title"])
    link = html.escape(meeting.get("link") or "")
    description = html.escape(meeting.get("description") or "")
    return f"""
        <div style="font-family: Arial, sans-serif; padding: 20px;">
            <h2>New Meeting Scheduled</h2>
            <p><strong>Topic:</strong> {title}</p>
            <p><strong>Date:</strong> {format_meeting_date(meeting["date"])}</p>
            <p><strong>Time:</strong> {html.escape(meeting["time"])}</p>
            <p><strong>Link:</strong> <a href="{link}">{link}</a></p>
            <p>{description}</p>
        </div>
    """


def notify_trainers_of_meeting(
    meeting: dict,
    email_service: EmailService,
    trainers: TrainerService = None,
    notifications: NotificationService = None,
) -> FanOutResult:
    trainers = trainers or TrainerService()
    notifications = notifications or NotificationService()

    recipients = resolve_recipients(meeting.get("attendees") or [], trainers)
    result = FanOutResult(recipients=len(recipients))

    subject = f"New Meeting: {meeting['title']}"
    message = (
        f"You have a new meeting scheduled for {format_meeting_date(meeting['date'])} "
        f"at {meeting['time']}."
    )
    body = build_meeting_email(meeting)

    for trainer in recipients:
        try:
            notifications.insert(
                recipient=trainer["_id"],
                title=subject,
                message=message,
                link=meeting.get("link") or "/dashboard",
            )
            result.notified += 1
        except Exception:
            logger.exception("Failed to store meeting notification for trainer %s", trainer["_id"])

        try:
            if email_service.send(trainer["email"], subject, body):
                result.emailed += 1
        except Exception:
            logger.exception("Failed to email %s", trainer["email"])

    logger.info(
        "Meeting %s fan-out: %d recipients, %d notified, %d emailed",
        meeting.get("_id"), result.recipients, result.notified, result.emailed
    )
    return result
