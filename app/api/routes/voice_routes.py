"""
Voice Interview Routes

POST /voice/start-interview - Check the daily quota and hand out the agent id
POST /voice/vapi-webhook - Voice agent callback (end-of-call report)
GET /voice/history/{student_id} - Past interviews, newest first
"""

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Request
from fastapi.concurrency import run_in_threadpool
from pymongo.errors import DuplicateKeyError

from app.core.config import get_settings
from app.services.llm_client import LLMClient, get_llm_client
from app.services.mongo_service import InterviewService, StudentService
from app.services.rate_limiter import get_interview_rate_limiter
from app.schemas.schemas import (
    StartInterviewRequest, StartInterviewResponse, VapiWebhookPayload, VapiMessage, InterviewStatus
)

settings = get_settings()
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/voice", tags=["Voice Interviews"])

END_OF_CALL_REPORT = "end-of-call-report"
DEFAULT_SCORE = 5
MIN_SCORE, MAX_SCORE = 0, 10


@router.post("/start-interview", response_model=StartInterviewResponse)
async def start_interview(data: StartInterviewRequest, limiter=Depends(get_interview_rate_limiter)):
    """
    Start a mock interview session.

    The student may start `interview_daily_limit` interviews per calendar day.
    """
    if not data.student_id:
        raise HTTPException(status_code=400, detail="Student ID is required")

    if not limiter.hit(data.student_id):
        limit = settings.interview_daily_limit
        raise HTTPException(
            status_code=429,
            detail=f"Daily interview limit reached ({limit} per day). Please try again tomorrow."
        )

    name = data.name
    if not name:
        student = StudentService().get_by_id(data.student_id)
        name = student.get("name") if student else None

    return StartInterviewResponse(
        message="Interview session initialized",
        agent_id=settings.vapi_agent_id,
        student_name=name
    )


def verify_webhook_secret(request: Request) -> None:
    """Shared-secret header check; skipped when no secret is configured."""
    secret = settings.vapi_webhook_secret
    if not secret:
        return
    provided = request.headers.get("x-vapi-secret") or request.headers.get("x-vapi-signature") or ""
    if not hmac.compare_digest(provided.encode(), secret.encode()):
        raise HTTPException(status_code=401, detail="Invalid signature")


def clamp_score(value) -> int:
    try:
        score = int(round(float(value)))
    except (TypeError, ValueError):
        return DEFAULT_SCORE
    return max(MIN_SCORE, min(MAX_SCORE, score))


def format_feedback(analysis: dict) -> str:
    return (
        f"**Strengths:** {analysis.get('strengths', '')}\n\n"
        f"**Weaknesses:** {analysis.get('weaknesses', '')}\n\n"
        f"**Feedback:** {analysis.get('feedback', '')}"
    )


def build_feedback(message: VapiMessage, llm: Optional[LLMClient]) -> tuple:
    """
    Returns (feedback, score).
    Falls back to the agent's own summary when the model is missing or fails.
    """
    transcript = message.resolved_transcript
    summary = message.agent_summary

    if not transcript:
        return summary or "No summary available.", DEFAULT_SCORE

    if llm is None:
        return summary or "AI Analysis unavailable (Missing API Key).", DEFAULT_SCORE

    try:
        analysis = llm.analyze_interview(transcript)
        if not isinstance(analysis, dict):
            raise ValueError(f"Expected a JSON object, got {type(analysis).__name__}")
        return format_feedback(analysis), clamp_score(analysis.get("score", DEFAULT_SCORE))
    except Exception:
        logger.exception("Interview analysis failed for call %s", message.call.get("id"))
        return summary or "Analysis failed.", DEFAULT_SCORE


@router.post("/vapi-webhook")
async def vapi_webhook(
    payload: VapiWebhookPayload,
    request: Request,
    llm: Optional[LLMClient] = Depends(get_llm_client)
):
    """
    Store one Interview per finished call.

    Calls without a studentId in their metadata are dropped; a redelivered
    report for a stored callId is acknowledged without a second record.
    Every other message type is acknowledged and ignored.
    """
    verify_webhook_secret(request)
    message = payload.message

    if message.type != END_OF_CALL_REPORT:
        return {"success": True}

    student_id = message.student_id
    call_id = message.call.get("id")
    if not student_id:
        logger.warning("Dropping call %s: no studentId in call metadata", call_id)
        return {"success": True}

    feedback, score = await run_in_threadpool(build_feedback, message, llm)

    interview = {
        "studentId": str(student_id),
        "transcript": message.resolved_transcript,
        "summary": message.agent_summary,
        "feedback": feedback,
        "score": score,
        "duration": message.duration_seconds,
        "recordingUrl": message.resolved_recording_url,
        "status": InterviewStatus.completed.value
    }
    if call_id:
        interview["callId"] = call_id
    try:
        InterviewService().insert(interview)
    except DuplicateKeyError:
        logger.info("Call %s already stored; ignoring redelivery", call_id)

    return {"success": True}


@router.get("/history/{student_id}")
async def interview_history(student_id: str):
    return {"success": True, "data": InterviewService().list_for_student(student_id)}
