"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from app.api.routes.auth_routes import router as auth_router
from app.api.routes.trainer_routes import admin_router as trainer_admin_router
from app.api.routes.trainer_routes import trainer_router
from app.api.routes.meeting_routes import router as meeting_router
from app.api.routes.review_routes import router as review_router
from app.api.routes.typing_routes import router as typing_router
from app.api.routes.demo_routes import router as demo_router
from app.api.routes.voice_routes import router as voice_router
from app.api.routes.job_routes import router as job_router
from app.api.routes.batch_routes import router as batch_router
from app.api.routes.progress_routes import router as progress_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(trainer_admin_router)
api_router.include_router(trainer_router)
api_router.include_router(meeting_router)
api_router.include_router(review_router)
api_router.include_router(typing_router)
# the admin portal and the public site call /demos, older pages /demo
api_router.include_router(demo_router, prefix="/demo")
api_router.include_router(demo_router, prefix="/demos", include_in_schema=False)
api_router.include_router(voice_router)
api_router.include_router(job_router)
api_router.include_router(batch_router)
api_router.include_router(progress_router)
