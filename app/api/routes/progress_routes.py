"""
Course Progress Routes (student app)

POST /student/progress/update - Record progress on one topic
GET /student/progress/stats/{student_id} - Completion of the current course
GET /student/progress/{course_id}/{student_id} - Topic records for a course
GET /students/{student_id}/eligibility - Whether the student may apply for jobs
"""

import logging

from fastapi import APIRouter, HTTPException

from app.services.mongo_service import CourseProgressService, JOB_ELIGIBILITY_PERCENT, to_object_id
from app.schemas.schemas import ProgressUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Course Progress"])


@router.post("/student/progress/update")
async def update_progress(data: ProgressUpdateRequest):
    """
    Upsert the student's record for one topic, then refresh the overall
    percentage on the student profile. A failed refresh is logged only.
    """
    course_id = to_object_id(data.course_id)
    topic_id = to_object_id(data.topic_id)
    if course_id is None or topic_id is None:
        raise HTTPException(status_code=400, detail="Invalid courseId or topicId")

    service = CourseProgressService()
    progress = service.update(
        data.student_id,
        course_id,
        topic_id,
        completed=data.completed,
        watched_duration=data.watched_duration
    )

    try:
        percent = service.sync_student_percent(data.student_id, course_id)
        logger.info("Student %s progress is now %d%%", data.student_id, percent)
    except Exception:
        logger.exception("Could not refresh overall progress for student %s", data.student_id)

    return {"success": True, "progress": progress}


@router.get("/student/progress/stats/{student_id}")
async def completion_stats(student_id: str):
    return {"success": True, "stats": CourseProgressService().completion_stats(student_id)}


@router.get("/student/progress/{course_id}/{student_id}")
async def course_progress(course_id: str, student_id: str):
    course_oid = to_object_id(course_id)
    if course_oid is None:
        return {"success": True, "progress": []}
    return {"success": True, "progress": CourseProgressService().list_for_course(student_id, course_oid)}


@router.get("/students/{student_id}/eligibility")
async def job_eligibility(student_id: str):
    completion = CourseProgressService().completion_percent(student_id)
    return {"eligible": completion >= JOB_ELIGIBILITY_PERCENT, "completion": completion}
