"""
Typing Routes

Typing trainer (typing_histories):
POST /typing/submit - Save a session (+ mirror into the legacy collection)
GET /typing/sessions/{student_id} - Sessions + summary (limit, mode)
GET /typing/last/{student_id} - Last session + personal best
GET /typing/lessons - Lesson library
GET /typing/lessons/{lesson_id} - One lesson ("beginner-0"); also /typing/lesson/{lesson_id}

Legacy typing practice (typing_progresses):
POST /typing/save
GET /typing/history/{student_id}
GET /typing/analytics
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from app.data.typing_lessons import list_lessons, get_lesson
from app.services.mongo_service import TypingHistoryService, TypingProgressService
from app.schemas.schemas import TypingSubmitRequest, TypingSaveRequest, TypingMode

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/typing", tags=["Typing"])


@router.post("/submit", status_code=201)
async def submit_typing_result(data: TypingSubmitRequest):
    """
    Save a typing trainer session.

    The legacy typing_progresses mirror is best-effort: its failure is logged
    and the request still succeeds.
    """
    session = data.to_document()
    session["mode"] = data.mode.value
    saved = TypingHistoryService().insert(session)

    try:
        TypingProgressService().insert(
            student_id=data.student_id,
            wpm=data.wpm,
            accuracy=data.accuracy,
            error_count=data.incorrect_chars,
            mode=data.mode.value,
            lesson=data.lesson_title,
            time_taken=data.duration,
            error_map=data.errors
        )
    except Exception:
        logger.exception("Legacy typing mirror write failed for student %s", data.student_id)

    return saved


@router.get("/sessions/{student_id}")
async def get_typing_sessions(
    student_id: str,
    limit: int = Query(50, ge=1, le=500),
    mode: Optional[TypingMode] = Query(None)
):
    """Latest sessions plus summary stats computed over the returned page."""
    service = TypingHistoryService()
    sessions = service.list_for_student(student_id, limit=limit, mode=mode.value if mode else None)
    return {"sessions": sessions, "summary": service.summarize(sessions)}


@router.get("/last/{student_id}")
async def get_last_result(student_id: str):
    service = TypingHistoryService()
    last = service.last(student_id)
    if not last:
        raise HTTPException(status_code=404, detail="No typing sessions found for this student")
    return {"last": last, "best": service.best(student_id)}


@router.get("/lessons")
async def get_lessons():
    return list_lessons()


@router.get("/lessons/{lesson_id}")
@router.get("/lesson/{lesson_id}", include_in_schema=False)
async def get_lesson_by_id(lesson_id: str):
    lesson = get_lesson(lesson_id)
    if not lesson:
        raise HTTPException(status_code=404, detail="Lesson not found")
    return lesson


# ── Legacy typing practice ───────────────────────────────────

@router.post("/save", status_code=201)
async def save_typing_progress(data: TypingSaveRequest):
    return TypingProgressService().insert(
        student_id=data.student_id,
        wpm=data.wpm,
        accuracy=data.accuracy,
        error_count=data.errors,
        mode=data.mode,
        lesson=data.lesson,
        time_taken=data.time
    )


@router.get("/history/{student_id}")
async def get_typing_history(student_id: str):
    return TypingProgressService().list_for_student(student_id, limit=50)


@router.get("/analytics")
async def get_typing_analytics():
    service = TypingProgressService()
    return {"topSpeeds": service.top_speeds(10), "stats": service.stats()}
