"""
Job Routes

GET /jobs - Active jobs (?type=student|client)
GET /jobs/fetch/student - Student-only jobs, company masked until eligible (?studentId=)
GET /jobs/fetch/client - Jobs that are not student-only
GET /jobs/{job_id} - Get job details
POST /jobs - Create job, optional `companyLogo` upload (admin)
PUT /jobs/{job_id} - Update job (admin)
DELETE /jobs/{job_id} - Delete job (admin)
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Depends, Query, Request
from fastapi.concurrency import run_in_threadpool

from app.core.auth import get_current_admin
from app.services.image_storage import ImageStorage, ImageStorageError, get_image_storage
from app.services.mongo_service import JobService, CourseProgressService, JOB_ELIGIBILITY_PERCENT
from app.utils.file_upload import read_payload, read_image
from app.schemas.schemas import JobCreate, JobUpdate, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["Jobs"])

LOGO_FIELD = "companyLogo"
LOGO_FOLDER = "companies"
JOB_TYPES = {"student": True, "client": False}


def is_eligible(student_id: str) -> bool:
    try:
        return CourseProgressService().completion_percent(student_id) >= JOB_ELIGIBILITY_PERCENT
    except Exception:
        logger.exception("Eligibility check failed for student %s, masking company details", student_id)
        return False


def mask_company(job: dict) -> dict:
    """Hide who is hiring; the last 4 id characters stay as a reference."""
    masked = dict(job)
    masked["company"] = f"Company ID: {str(job['_id'])[-4:].upper()}"
    masked["companyLogo"] = ""
    masked["companyWebsite"] = ""
    masked["companyLinkedin"] = ""
    return masked


async def _read_job_payload(request: Request, storage: ImageStorage, model):
    """Validate the body and store the logo (if any). Returns the document fields."""
    fields, file = await read_payload(request, LOGO_FIELD)
    fields.pop(LOGO_FIELD, None)
    data = model.model_validate(fields)
    doc = data.to_document(exclude_unset=model is JobUpdate)

    if file is not None:
        content = await read_image(file)
        try:
            stored = await run_in_threadpool(
                storage.upload, content, file.filename, file.content_type, folder=LOGO_FOLDER
            )
        except ImageStorageError:
            logger.exception("Company logo upload failed")
            raise HTTPException(status_code=500, detail="Image upload failed")
        doc["companyLogo"] = stored.secure_url
    return doc


@router.get("")
async def list_jobs(type: Optional[str] = Query(None, description="student | client")):
    return JobService().list_active(student_only=JOB_TYPES.get(type))


@router.get("/fetch/student")
async def list_student_jobs(student_id: Optional[str] = Query(None, alias="studentId")):
    """
    Student-only jobs.

    Without a studentId (admin preview) jobs are returned as stored. With one,
    company details are masked unless the student has completed enough of
    their current course.
    """
    jobs: List[dict] = JobService().list_active(student_only=True)
    logger.info("Found %d student jobs", len(jobs))

    if not student_id or is_eligible(student_id):
        return jobs
    return [mask_company(job) for job in jobs]


@router.get("/fetch/client")
async def list_client_jobs():
    return JobService().list_active(student_only=False)


@router.get("/{job_id}")
async def get_job(job_id: str):
    job = JobService().get(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


@router.post("", status_code=201)
async def create_job(
    request: Request,
    admin: dict = Depends(get_current_admin),
    storage: ImageStorage = Depends(get_image_storage)
):
    """Create a job. Accepts JSON or multipart (list fields as JSON or comma strings)."""
    doc = await _read_job_payload(request, storage, JobCreate)
    doc.setdefault("companyLogo", "")
    return JobService().insert(doc)


@router.put("/{job_id}")
async def update_job(
    job_id: str,
    request: Request,
    admin: dict = Depends(get_current_admin),
    storage: ImageStorage = Depends(get_image_storage)
):
    service = JobService()
    if not service.get(job_id):
        raise HTTPException(status_code=404, detail="Job not found")

    changes = await _read_job_payload(request, storage, JobUpdate)
    return service.update(job_id, changes)


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(job_id: str, admin: dict = Depends(get_current_admin)):
    if not JobService().delete(job_id):
        raise HTTPException(status_code=404, detail="Job not found")
    return MessageResponse(message="Job removed")
