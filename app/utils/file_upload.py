"""
Upload helpers for multipart endpoints (review photos, company logos).

Supported image formats: JPG, JPEG, PNG, WEBP, GIF
Max file size: 5MB

Endpoints that take an optional image accept either multipart/form-data or a
plain JSON body, so `read_payload` returns the fields plus the file (if any).
"""

from typing import Optional, Tuple
from fastapi import HTTPException, Request
from starlette.datastructures import UploadFile


MAX_FILE_SIZE_MB = 5
MAX_FILE_SIZE_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024
ALLOWED_IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.webp', '.gif'}
FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


async def read_payload(request: Request, file_field: str) -> Tuple[dict, Optional[UploadFile]]:
    """
    Read a JSON or form body.

    Returns:
        Tuple of (fields, uploaded file or None)
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        fields = {}
        upload = None
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key == file_field and value.filename:
                    upload = value
                continue
            fields[key] = value
        return fields, upload

    body = await request.body()
    if not body:
        return {}, None
    try:
        data = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body must be valid JSON")
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    return data, None


async def read_image(file: UploadFile) -> bytes:
    """
    Validate and read an uploaded image.

    Raises:
        HTTPException on validation errors
    """
    ext = get_file_extension(file.filename or "")
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type '{ext}'. Allowed: {', '.join(sorted(ALLOWED_IMAGE_EXTENSIONS))}"
        )

    content = await file.read()

    if len(content) > MAX_FILE_SIZE_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {MAX_FILE_SIZE_MB}MB"
        )
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    return content
