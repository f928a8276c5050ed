"""
Review Routes

GET /reviews - List reviews (filters, sort, pagination)
GET /reviews/{review_id} - Get one review
POST /reviews - Create review, optional `studentImage` upload (admin)
PUT /reviews/{review_id} - Update review / replace image (admin)
DELETE /reviews/{review_id} - Delete review and its remote image (admin)

POST/PUT accept multipart/form-data (with the image) or a JSON body.
"""

import logging
import re
from typing import List, Tuple

from fastapi import APIRouter, HTTPException, Depends, Request
from fastapi.concurrency import run_in_threadpool

from app.core.auth import get_current_admin
from app.services.image_storage import ImageStorage, ImageStorageError, get_image_storage
from app.services.mongo_service import ReviewService, serialize_doc
from app.utils.file_upload import read_payload, read_image
from app.schemas.schemas import ReviewCreate, ReviewUpdate, DEFAULT_STUDENT_IMAGE, parse_bool

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["Reviews"])

IMAGE_FIELD = "studentImage"
IMAGE_FOLDER = "reviews"
RESERVED_PARAMS = {"select", "sort", "page", "limit"}
QUERY_OPERATORS = {"gt", "gte", "lt", "lte", "in", "ne"}
# e.g. rating[gte]=4
OPERATOR_PARAM = re.compile(r"^(?P<field>\w+)\[(?P<op>\w+)\]$")
NUMERIC_FIELDS = {"rating"}
BOOLEAN_FIELDS = {"isApproved"}
FILTERABLE_FIELDS = {"studentName", "role", "courseTaken"} | NUMERIC_FIELDS | BOOLEAN_FIELDS
SORTABLE_FIELDS = FILTERABLE_FIELDS | {"createdAt", "updatedAt"}


def _check_filter_field(field: str) -> None:
    # only plain review fields reach the Mongo filter, never operators like $where
    if field not in FILTERABLE_FIELDS:
        raise HTTPException(status_code=400, detail=f"Cannot filter reviews by '{field}'")


def _coerce(field: str, value: str):
    if field in BOOLEAN_FIELDS:
        return parse_bool(value)
    if field in NUMERIC_FIELDS:
        try:
            return float(value)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"'{field}' must be a number")
    return value


def build_review_query(params) -> dict:
    """Translate query params (isApproved=true, rating[gte]=4, role[in]=a,b) into a Mongo filter."""
    query = {}
    for key, value in params.items():
        if key in RESERVED_PARAMS:
            continue
        match = OPERATOR_PARAM.match(key)
        if match:
            field, op = match.group("field"), match.group("op")
            _check_filter_field(field)
            if op not in QUERY_OPERATORS:
                raise HTTPException(status_code=400, detail=f"Unsupported operator '{op}'")
            if op == "in":
                operand = [_coerce(field, part.strip()) for part in value.split(",")]
            else:
                operand = _coerce(field, value)
            query.setdefault(field, {})[f"${op}"] = operand
        else:
            _check_filter_field(key)
            query[key] = _coerce(key, value)
    return query


def build_sort(sort_param: str) -> List[Tuple[str, int]]:
    """Parse e.g. "-rating,createdAt" into [("rating", -1), ("createdAt", 1)]."""
    if not sort_param:
        return [("createdAt", -1)]
    sort = []
    for part in sort_param.split(","):
        part = part.strip()
        if not part:
            continue
        field, direction = (part[1:], -1) if part.startswith("-") else (part, 1)
        if field not in SORTABLE_FIELDS:
            raise HTTPException(status_code=400, detail=f"Cannot sort reviews by '{field}'")
        sort.append((field, direction))
    return sort or [("createdAt", -1)]


def _positive_int(value, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


async def _upload_review_image(file, storage: ImageStorage):
    content = await read_image(file)
    try:
        return await run_in_threadpool(
            storage.upload, content, file.filename, file.content_type, folder=IMAGE_FOLDER
        )
    except ImageStorageError:
        logger.exception("Review image upload failed")
        raise HTTPException(status_code=500, detail="Image upload failed")


def _delete_remote_image(public_id: str, storage: ImageStorage) -> None:
    """Best-effort; a dangling remote image is preferable to a failed request."""
    try:
        storage.delete(public_id)
    except ImageStorageError:
        logger.exception("Failed to delete remote image %s", public_id)


@router.get("")
async def list_reviews(request: Request):
    """
    List reviews, newest first by default.

    Query: any review field (isApproved=true, rating[gte]=4), sort=-rating,
    page (default 1), limit (default 100).
    """
    params = request.query_params
    page = _positive_int(params.get("page"), 1)
    limit = _positive_int(params.get("limit"), 100)
    start = (page - 1) * limit

    reviews, total = ReviewService().list(
        query=build_review_query(params),
        sort=build_sort(params.get("sort")),
        skip=start,
        limit=limit
    )

    pagination = {}
    if page * limit < total:
        pagination["next"] = {"page": page + 1, "limit": limit}
    if start > 0:
        pagination["prev"] = {"page": page - 1, "limit": limit}

    return {"success": True, "count": len(reviews), "pagination": pagination, "data": reviews}


@router.get("/{review_id}")
async def get_review(review_id: str):
    review = ReviewService().get_raw(review_id)
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")
    return {"success": True, "data": serialize_doc(review)}


@router.post("", status_code=201)
async def create_review(
    request: Request,
    admin: dict = Depends(get_current_admin),
    storage: ImageStorage = Depends(get_image_storage)
):
    """Create a review. Image upload failure aborts the creation."""
    fields, file = await read_payload(request, IMAGE_FIELD)
    data = ReviewCreate.model_validate(fields)

    review = data.to_document()
    review["studentImage"] = DEFAULT_STUDENT_IMAGE
    review["imagePublicId"] = None

    if file is not None:
        stored = await _upload_review_image(file, storage)
        review["studentImage"] = stored.secure_url
        review["imagePublicId"] = stored.public_id

    return {"success": True, "data": ReviewService().insert(review)}


@router.put("/{review_id}")
async def update_review(
    review_id: str,
    request: Request,
    admin: dict = Depends(get_current_admin),
    storage: ImageStorage = Depends(get_image_storage)
):
    """
    Partial update. A new image is uploaded first; the previous remote image
    is deleted only once the new one is stored.
    """
    service = ReviewService()
    existing = service.get_raw(review_id)
    if not existing:
        raise HTTPException(status_code=404, detail="Review not found")

    fields, file = await read_payload(request, IMAGE_FIELD)
    changes = ReviewUpdate.model_validate(fields).to_document(exclude_unset=True)

    if file is not None:
        stored = await _upload_review_image(file, storage)
        changes["studentImage"] = stored.secure_url
        changes["imagePublicId"] = stored.public_id

        old_public_id = existing.get("imagePublicId")
        if old_public_id:
            await run_in_threadpool(_delete_remote_image, old_public_id, storage)

    review = service.update(existing["_id"], changes)
    return {"success": True, "data": review}


@router.delete("/{review_id}")
async def delete_review(
    review_id: str,
    admin: dict = Depends(get_current_admin),
    storage: ImageStorage = Depends(get_image_storage)
):
    service = ReviewService()
    review = service.get_raw(review_id)
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")

    if review.get("imagePublicId"):
        await run_in_threadpool(_delete_remote_image, review["imagePublicId"], storage)

    service.delete(review["_id"])
    return {"success": True, "data": {}}
