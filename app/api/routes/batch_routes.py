"""
Batch Routes

POST /batches - Create a batch for a course (admin)
GET /batches - List batches with course title and head count (?courseId=)
GET /batches/{batch_id} - Get one batch
PUT /batches/{batch_id} - Update a batch (admin)
DELETE /batches/{batch_id} - Delete a batch and its enrollments (admin)

POST /batches/{batch_id}/assign - Put a student in the batch (admin)
PUT /batches/student/change-batch - Move a student to another batch of the same course (admin)
GET /batches/{batch_id}/students - Students in a batch, latest enrollment first
GET /batches/student/{student_id}/enrollment - A student's enrollments
DELETE /batches/{batch_id}/students/{student_id} - Remove a student from a batch (admin)
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query

from app.core.auth import get_current_admin, get_current_user
from app.services.mongo_service import (
    BatchService, BatchStudentService, CourseService, StudentService, to_object_id, to_naive_utc
)
from app.schemas.schemas import (
    BatchCreate, BatchUpdate, BatchAssignRequest, ChangeBatchRequest, MessageResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/batches", tags=["Batches"])


def _get_batch_or_404(batch_id: str, detail: str = "Batch not found") -> dict:
    batch = BatchService().get_raw(batch_id)
    if not batch:
        raise HTTPException(status_code=404, detail=detail)
    return batch


def _ensure_room(batch: dict, student_id: str) -> None:
    if BatchStudentService().count_others(batch["_id"], student_id) >= batch["maxStudents"]:
        raise HTTPException(status_code=400, detail="Batch is full")


@router.post("", status_code=201)
async def create_batch(data: BatchCreate, admin: dict = Depends(get_current_admin)):
    course_id = to_object_id(data.course_id)
    if course_id is None or CourseService().get(course_id) is None:
        raise HTTPException(status_code=404, detail="Course not found")
    if to_naive_utc(data.end_date) < to_naive_utc(data.start_date):
        raise HTTPException(status_code=400, detail="End date must be after the start date")

    batch = data.to_document()
    batch["courseId"] = course_id
    return {"success": True, "batch": BatchService().insert(batch)}


@router.get("")
async def list_batches(
    course_id: Optional[str] = Query(None, alias="courseId"),
    user: dict = Depends(get_current_user)
):
    if course_id is None:
        return {"success": True, "batches": BatchService().list_all()}

    course_oid = to_object_id(course_id)
    if course_oid is None:
        return {"success": True, "batches": []}
    return {"success": True, "batches": BatchService().list_all(course_oid)}


@router.put("/student/change-batch")
async def change_batch(data: ChangeBatchRequest, admin: dict = Depends(get_current_admin)):
    new_batch = _get_batch_or_404(data.new_batch_id, detail="Target batch not found")
    _ensure_room(new_batch, data.student_id)

    enrollment = BatchStudentService().change_batch(data.student_id, new_batch)
    if not enrollment:
        raise HTTPException(status_code=404, detail="Student enrollment not found for this course")

    logger.info("Moved student %s to batch %s", data.student_id, new_batch["_id"])
    return {"success": True, "enrollment": enrollment}


@router.get("/student/{student_id}/enrollment")
async def student_enrollments(student_id: str):
    return {"success": True, "enrollments": BatchStudentService().list_for_student(student_id)}


@router.get("/{batch_id}")
async def get_batch(batch_id: str, user: dict = Depends(get_current_user)):
    batch = BatchService().get(batch_id)
    if not batch:
        raise HTTPException(status_code=404, detail="Batch not found")
    return {"success": True, "batch": batch}


@router.put("/{batch_id}")
async def update_batch(batch_id: str, data: BatchUpdate, admin: dict = Depends(get_current_admin)):
    changes = data.to_document(exclude_unset=True)
    if data.status is not None:
        changes["status"] = data.status.value

    batch = BatchService().update(batch_id, changes)
    if not batch:
        raise HTTPException(status_code=404, detail="Batch not found")
    return {"success": True, "batch": batch}


@router.delete("/{batch_id}", response_model=MessageResponse)
async def delete_batch(batch_id: str, admin: dict = Depends(get_current_admin)):
    if not BatchService().delete(batch_id):
        raise HTTPException(status_code=404, detail="Batch not found")
    return MessageResponse(message="Batch deleted")


@router.post("/{batch_id}/assign")
async def assign_student(batch_id: str, data: BatchAssignRequest, admin: dict = Depends(get_current_admin)):
    """
    Enroll a student in this batch.

    A student already in another batch of the same course is moved here.
    """
    batch = _get_batch_or_404(batch_id)
    if not StudentService().get_by_id(data.student_id):
        raise HTTPException(status_code=404, detail="Student not found")
    _ensure_room(batch, data.student_id)

    enrollment = BatchStudentService().assign(batch, data.student_id, data.enrollment_date)
    return {"success": True, "enrollment": enrollment}


@router.get("/{batch_id}/students")
async def batch_students(batch_id: str, user: dict = Depends(get_current_user)):
    batch = _get_batch_or_404(batch_id)
    return {"success": True, "students": BatchStudentService().list_for_batch(batch["_id"])}


@router.delete("/{batch_id}/students/{student_id}", response_model=MessageResponse)
async def remove_student(batch_id: str, student_id: str, admin: dict = Depends(get_current_admin)):
    batch = _get_batch_or_404(batch_id)
    BatchStudentService().remove(batch["_id"], student_id)
    return MessageResponse(message="Student removed from batch")
