"""
Career Institute Platform - Main Application

FastAPI backend with:
- MongoDB for every collection
- SMTP email for meeting invites and demo confirmations
- S3 compatible storage for review photos and company logos
- OpenAI compatible model for mock interview feedback
- JWT authentication (admin + trainers)

Run: uvicorn app.main:app --reload
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import api_router
from app.core.config import get_settings
from app.core.errors import register_exception_handlers
from app.db.mongodb import init_mongo_indexes, test_mongo_connection

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Career Institute Platform",
    description="""
    Backend for the marketing site, the admin back-office and the trainer portal.

    ## Features
    - **Meetings**: Admin schedules meetings, trainers get notified by app + email
    - **Reviews**: Testimonial moderation with photo upload
    - **Typing**: Typing trainer sessions, lessons and analytics
    - **Demo classes**: Slot management and public booking
    - **Voice interviews**: Daily quota + voice agent webhook with AI feedback
    - **Jobs**: Student-only and client job boards
    """,
    version="1.0.0",
    debug=settings.debug,
    docs_url="/docs",
    redoc_url="/redoc"
)

register_exception_handlers(app)

# CORS middleware (the three portals run on their own origins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes on startup."""
    try:
        init_mongo_indexes()
    except Exception:
        logger.exception("MongoDB index initialization failed")


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "Career Institute Platform", "message": "API is running."}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
