"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.

Python attributes are snake_case; the wire format (and the stored MongoDB
documents) use camelCase, which is what the portals consume.
"""

import json
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum


# ============================================================
# BASE + SHARED PARSERS
# ============================================================

class CamelModel(BaseModel):
    """Base for every schema: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self, exclude_unset: bool = False) -> dict:
        """Dump to a camelCase dict ready to be stored."""
        return self.model_dump(by_alias=True, exclude_unset=exclude_unset)


TRUE_STRINGS = {"true", "1", "yes", "on"}
FALSE_STRINGS = {"false", "0", "no", "off", ""}


def parse_bool(value: Any) -> Any:
    """
    Normalize booleans that arrive either as JSON booleans or as form strings.
    Unknown values are passed through so pydantic reports them.
    """
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
    return value


def parse_str_list(value: Any) -> Any:
    """Accept a list, a JSON-encoded list, or a comma separated string."""
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError:
            return [part.strip() for part in value.split(",") if part.strip()]
        if isinstance(decoded, list):
            return decoded
        return [str(decoded)]
    return value


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    admin = "admin"
    trainer = "trainer"


class TrainerStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class TypingMode(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class InterviewStatus(str, Enum):
    completed = "completed"
    failed = "failed"
    processing = "processing"


ALL_ATTENDEES = "ALL"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class LoginRequest(CamelModel):
    email: EmailStr
    password: str

class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    role: UserRole
    user_id: str


# ============================================================
# TRAINER + NOTIFICATION SCHEMAS
# ============================================================

class TrainerCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8)
    status: TrainerStatus = TrainerStatus.active

class TrainerStatusUpdate(CamelModel):
    status: TrainerStatus


# ============================================================
# MEETING SCHEMAS
# ============================================================

class MeetingCreate(CamelModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    date: datetime
    time: str = Field(..., min_length=1, description='e.g. "10:00 AM"')
    link: Optional[str] = None
    attendees: List[str] = Field(default_factory=lambda: [ALL_ATTENDEES])

    @field_validator("attendees", mode="before")
    @classmethod
    def default_to_all(cls, value):
        # an empty or missing list means everybody
        if not value:
            return [ALL_ATTENDEES]
        return value


# ============================================================
# REVIEW SCHEMAS
# ============================================================

DEFAULT_STUDENT_IMAGE = "no-photo.jpg"

class ReviewCreate(CamelModel):
    student_name: str = Field(..., min_length=1, max_length=100)
    role: Optional[str] = None
    course_taken: Optional[str] = None
    review_text: str = Field(..., min_length=1, max_length=1000)
    rating: float = Field(..., ge=0, le=5)
    is_approved: bool = False

    parse_approved = field_validator("is_approved", mode="before")(parse_bool)

class ReviewUpdate(CamelModel):
    student_name: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[str] = None
    course_taken: Optional[str] = None
    review_text: Optional[str] = Field(None, min_length=1, max_length=1000)
    rating: Optional[float] = Field(None, ge=0, le=5)
    is_approved: Optional[bool] = None

    parse_approved = field_validator("is_approved", mode="before")(parse_bool)


# ============================================================
# TYPING SCHEMAS
# ============================================================

class TypingSubmitRequest(CamelModel):
    student_id: str = Field(..., min_length=1)
    mode: TypingMode = TypingMode.beginner
    lesson_title: str = "Free Typing"
    wpm: float = Field(..., ge=0)
    accuracy: float = Field(..., ge=0, le=100)
    duration: float = 60
    correct_chars: int = Field(0, ge=0)
    incorrect_chars: int = Field(0, ge=0)
    errors: Dict[str, int] = Field(default_factory=dict)

    @field_validator("mode", "lesson_title", "duration", "errors", mode="before")
    @classmethod
    def empty_means_default(cls, value, info):
        # falsy values fall back to the defaults, 0 seconds included
        if value is None or value == "" or value == 0 or value == {}:
            return typing_default(info.field_name)
        return value


def typing_default(field_name: str) -> Any:
    defaults = {
        "mode": TypingMode.beginner,
        "lesson_title": "Free Typing",
        "duration": 60,
        "errors": {},
    }
    return defaults[field_name]

class TypingSaveRequest(CamelModel):
    """Legacy typing-practice payload (mirror collection shape)."""
    student_id: str = Field(..., min_length=1)
    wpm: float
    accuracy: float
    errors: int = 0
    mode: str = "time"
    lesson: str = Field(..., min_length=1)
    time: float


# ============================================================
# DEMO SCHEMAS
# ============================================================

class DemoSlotIn(CamelModel):
    date: datetime
    time: str = Field(..., min_length=1)

class DemoSlotBulkCreate(CamelModel):
    slots: List[DemoSlotIn] = Field(..., min_length=1)

class DemoBookingCreate(CamelModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=5)
    course: Optional[str] = None
    education: Optional[str] = None
    date: datetime
    time_slot: str = Field(..., min_length=1)


# ============================================================
# VOICE INTERVIEW SCHEMAS
# ============================================================

class StartInterviewRequest(CamelModel):
    student_id: Optional[str] = None
    name: Optional[str] = None

class StartInterviewResponse(CamelModel):
    success: bool = True
    message: str
    agent_id: str
    student_name: Optional[str] = None

class VapiMessage(CamelModel):
    """Subset of the voice agent's webhook message we rely on."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    type: str
    call: Dict[str, Any] = Field(default_factory=dict)
    analysis: Optional[Dict[str, Any]] = None
    artifact: Optional[Dict[str, Any]] = None
    transcript: Optional[str] = None
    recording_url: Optional[str] = None

    @property
    def student_id(self) -> Optional[str]:
        metadata = self.call.get("metadata")
        if not isinstance(metadata, dict):
            return None
        return metadata.get("studentId")

    @property
    def duration_seconds(self) -> Optional[float]:
        # the call object carries it; older payloads sent it on the message
        duration = self.call.get("durationSeconds")
        if duration is None and self.model_extra:
            duration = self.model_extra.get("durationSeconds")
        return duration

    @property
    def resolved_transcript(self) -> Optional[str]:
        return self.transcript or (self.artifact or {}).get("transcript")

    @property
    def resolved_recording_url(self) -> Optional[str]:
        return self.recording_url or (self.artifact or {}).get("recordingUrl")

    @property
    def agent_summary(self) -> Optional[str]:
        return (self.analysis or {}).get("summary")

class VapiWebhookPayload(CamelModel):
    message: VapiMessage


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(CamelModel):
    title: str = Field(..., min_length=2, max_length=200)
    company: str = Field(..., min_length=1)
    location: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    salary: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    responsibilities: List[str] = Field(default_factory=list)
    requirements: List[str] = Field(default_factory=list)
    company_website: Optional[str] = None
    company_linkedin: Optional[str] = None
    is_student_only: bool = False
    is_active: bool = True

    parse_flags = field_validator("is_student_only", "is_active", mode="before")(parse_bool)
    parse_lists = field_validator("skills", "responsibilities", "requirements", mode="before")(parse_str_list)

class JobUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=2, max_length=200)
    company: Optional[str] = None
    location: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    salary: Optional[str] = None
    skills: Optional[List[str]] = None
    responsibilities: Optional[List[str]] = None
    requirements: Optional[List[str]] = None
    company_website: Optional[str] = None
    company_linkedin: Optional[str] = None
    is_student_only: Optional[bool] = None
    is_active: Optional[bool] = None

    parse_flags = field_validator("is_student_only", "is_active", mode="before")(parse_bool)
    parse_lists = field_validator("skills", "responsibilities", "requirements", mode="before")(parse_str_list)


# ============================================================
# BATCH SCHEMAS
# ============================================================

class BatchStatus(str, Enum):
    active = "active"
    upcoming = "upcoming"
    completed = "completed"


class BatchCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    course_id: str = Field(..., min_length=1)
    start_date: datetime
    end_date: datetime
    max_students: int = Field(30, ge=1)
    description: str = ""

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return value.strip()

class BatchUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    max_students: Optional[int] = Field(None, ge=1)
    description: Optional[str] = None
    status: Optional[BatchStatus] = None

class BatchAssignRequest(CamelModel):
    student_id: str = Field(..., min_length=1)
    enrollment_date: Optional[datetime] = None

class ChangeBatchRequest(CamelModel):
    student_id: str = Field(..., min_length=1)
    new_batch_id: str = Field(..., min_length=1)


# ============================================================
# COURSE PROGRESS SCHEMAS
# ============================================================

class ProgressUpdateRequest(CamelModel):
    """One topic of the course player; omitted fields keep their stored value."""
    student_id: str = Field(..., min_length=1)
    course_id: str = Field(..., min_length=1)
    topic_id: str = Field(..., min_length=1)
    completed: Optional[bool] = None
    watched_duration: Optional[float] = Field(None, ge=0)

    parse_completed = field_validator("completed", mode="before")(parse_bool)


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
