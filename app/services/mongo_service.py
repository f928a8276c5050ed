"""
MongoDB Service - CRUD operations for the platform collections.

Collections in this database:
1. meetings / notifications / trainers / students
2. reviews                - testimonials shown on the marketing site
3. typing_histories       - typing trainer sessions (rich per-key errors)
4. typing_progresses      - legacy typing practice shape (mirror target)
5. demo_slots / demo_bookings
6. interviews             - AI mock interview results
7. jobs                   - job board
8. batches / batch_students - course cohorts and enrollments
9. progresses             - course player topic progress (+ read-only courses/modules/topics)

Documents are stored with camelCase keys because the portals read them as-is.
"""

from datetime import datetime, time, timedelta, timezone
from typing import Optional, List, Dict, Any, Tuple
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import BulkWriteError

from app.db.mongodb import get_collection, COLLECTIONS


# ============================================================
# HELPERS: ObjectId / datetime handling
# ============================================================

def serialize_doc(doc: dict) -> dict:
    """Convert MongoDB document to JSON-serializable dict (ObjectIds become strings)."""
    if doc is None:
        return None
    return {key: _serialize_value(value) for key, value in doc.items()}


def _serialize_value(value):
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return serialize_doc(value)
    if isinstance(value, list):
        return [_serialize_value(item) for item in value]
    return value


def serialize_docs(docs) -> list:
    """Convert list of MongoDB documents to JSON-serializable list."""
    return [serialize_doc(doc) for doc in docs]


def to_object_id(value: str) -> Optional[ObjectId]:
    """Parse an id from a URL/body; malformed ids yield None (treated as not found)."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def to_naive_utc(value: datetime) -> datetime:
    """MongoDB stores UTC; keep everything naive UTC in Python."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def start_of_day(value: datetime) -> datetime:
    """Calendar day of the value as sent by the client, at midnight."""
    return datetime.combine(value.date(), time.min)


def day_range(value: datetime) -> Dict[str, datetime]:
    start = start_of_day(value)
    return {"$gte": start, "$lt": start + timedelta(days=1)}


# ============================================================
# TRAINERS COLLECTION
# ============================================================

class TrainerService:
    """Trainer accounts; notification fan-out targets active trainers."""

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["trainers"])

    def insert(self, name: str, email: str, password_hash: str, status: str) -> dict:
        doc = {
            "name": name,
            "email": email.lower(),
            "passwordHash": password_hash,
            "status": status,
            "createdAt": datetime.utcnow()
        }
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    def list_all(self) -> List[dict]:
        cursor = self.collection.find({}, {"passwordHash": 0}).sort("name", ASCENDING)
        return serialize_docs(cursor)

    def get_by_email(self, email: str) -> Optional[dict]:
        return self.collection.find_one({"email": email.lower()})

    def update_status(self, trainer_id: str, status: str) -> Optional[dict]:
        oid = to_object_id(trainer_id)
        if oid is None:
            return None
        doc = self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": {"status": status}},
            projection={"passwordHash": 0},
            return_document=ReturnDocument.AFTER
        )
        return serialize_doc(doc)

    def find_active(self, trainer_ids: Optional[List[str]] = None) -> List[dict]:
        """
        Active trainers, optionally restricted to the given ids.
        Malformed ids are ignored.
        """
        query: Dict[str, Any] = {"status": "active"}
        if trainer_ids is not None:
            oids = [oid for oid in (to_object_id(tid) for tid in trainer_ids) if oid is not None]
            query["_id"] = {"$in": oids}
        return list(self.collection.find(query, {"passwordHash": 0}))


# ============================================================
# STUDENTS COLLECTION (owned by the student app)
# ============================================================

class StudentService:
    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["students"])

    def get_by_id(self, student_id: str) -> Optional[dict]:
        oid = to_object_id(student_id)
        if oid is None:
            return None
        return serialize_doc(self.collection.find_one({"_id": oid}))


# ============================================================
# NOTIFICATIONS COLLECTION
# ============================================================

class NotificationService:
    """In-app notifications shown in the trainer portal."""

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["notifications"])

    def insert(self, recipient: ObjectId, title: str, message: str, link: str,
               recipient_model: str = "Trainer", type_: str = "alert") -> str:
        doc = {
            "recipient": recipient,
            "recipientModel": recipient_model,
            "title": title,
            "message": message,
            "type": type_,
            "link": link,
            "isRead": False,
            "createdAt": datetime.utcnow()
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def list_for_recipient(self, recipient_id: str, limit: int = 50) -> List[dict]:
        oid = to_object_id(recipient_id)
        cursor = self.collection.find({"recipient": oid}).sort("createdAt", DESCENDING).limit(limit)
        return serialize_docs(cursor)

    def mark_read(self, notification_id: str, recipient_id: str) -> bool:
        oid = to_object_id(notification_id)
        if oid is None:
            return False
        result = self.collection.update_one(
            {"_id": oid, "recipient": to_object_id(recipient_id)},
            {"$set": {"isRead": True}}
        )
        return result.matched_count > 0


# ============================================================
# MEETINGS COLLECTION
# ============================================================

class MeetingService:
    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["meetings"])

    def insert(self, meeting: dict, created_by: Optional[str] = None) -> dict:
        doc = dict(meeting)
        doc["date"] = to_naive_utc(doc["date"])
        doc["createdBy"] = created_by
        doc["createdAt"] = datetime.utcnow()
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    def list_all(self) -> List[dict]:
        return serialize_docs(self.collection.find().sort("date", DESCENDING))

    def delete(self, meeting_id: str) -> bool:
        oid = to_object_id(meeting_id)
        if oid is None:
            return False
        return self.collection.delete_one({"_id": oid}).deleted_count > 0


# ============================================================
# REVIEWS COLLECTION
# ============================================================

class ReviewService:
    """Testimonials with an optional remote image handle (studentImage + imagePublicId)."""

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["reviews"])

    def list(self, query: dict, sort: List[Tuple[str, int]], skip: int, limit: int) -> Tuple[List[dict], int]:
        """Returns (page of reviews, total matching)."""
        total = self.collection.count_documents(query)
        cursor = self.collection.find(query).sort(sort).skip(skip).limit(limit)
        return serialize_docs(cursor), total

    def get_raw(self, review_id: str) -> Optional[dict]:
        oid = to_object_id(review_id)
        if oid is None:
            return None
        return self.collection.find_one({"_id": oid})

    def insert(self, review: dict) -> dict:
        now = datetime.utcnow()
        doc = dict(review, createdAt=now, updatedAt=now)
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return serialize_doc(doc)

    def update(self, review_id: ObjectId, fields: dict) -> Optional[dict]:
        doc = self.collection.find_one_and_update(
            {"_id": review_id},
            {"$set": dict(fields, updatedAt=datetime.utcnow())},
            return_document=ReturnDocument.AFTER
        )
        return serialize_doc(doc)

    def delete(self, review_id: ObjectId) -> bool:
        return self.collection.delete_one({"_id": review_id}).deleted_count > 0


# ============================================================
# TYPING HISTORY COLLECTION
# Typing trainer sessions, appended once and never mutated
# ============================================================

def round_half_up(value: float) -> int:
    return int(value + 0.5)


class TypingHistoryService:
    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["typing_history"])

    def insert(self, session: dict) -> dict:
        now = datetime.utcnow()
        doc = dict(session, createdAt=now, updatedAt=now)
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return serialize_doc(doc)

    def list_for_student(self, student_id: str, limit: int = 50, mode: Optional[str] = None) -> List[dict]:
        query = {"studentId": student_id}
        if mode:
            query["mode"] = mode
        cursor = self.collection.find(query).sort("createdAt", DESCENDING).limit(limit)
        return serialize_docs(cursor)

    def last(self, student_id: str) -> Optional[dict]:
        return serialize_doc(self.collection.find_one({"studentId": student_id}, sort=[("createdAt", DESCENDING)]))

    def best(self, student_id: str) -> Optional[dict]:
        """Personal best = highest wpm."""
        return serialize_doc(self.collection.find_one({"studentId": student_id}, sort=[("wpm", DESCENDING)]))

    @staticmethod
    def summarize(sessions: List[dict]) -> dict:
        """Summary over an already fetched page (not an aggregation pipeline)."""
        total = len(sessions)
        if not total:
            return {"totalSessions": 0, "avgWpm": 0, "avgAccuracy": 0, "bestWpm": 0}
        return {
            "totalSessions": total,
            "avgWpm": round_half_up(sum(s["wpm"] for s in sessions) / total),
            "avgAccuracy": round_half_up(sum(s["accuracy"] for s in sessions) / total),
            "bestWpm": max(s["wpm"] for s in sessions)
        }


# ============================================================
# TYPING PROGRESS COLLECTION (legacy)
# ============================================================

class TypingProgressService:
    """Legacy typing practice records; also receives mirror writes."""

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["typing_progress"])

    def insert(self, student_id: str, wpm: float, accuracy: float, error_count: int, mode: str,
               lesson: str, time_taken: float, error_map: Optional[Dict[str, int]] = None) -> dict:
        doc = {
            "studentId": student_id,
            "wpm": wpm,
            "accuracy": accuracy,
            "errorCount": error_count,
            "errorMap": error_map or {},
            "mode": mode,
            "lesson": lesson,
            "time": time_taken,
            "createdAt": datetime.utcnow()
        }
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return serialize_doc(doc)

    def list_for_student(self, student_id: str, limit: int = 50) -> List[dict]:
        cursor = self.collection.find({"studentId": student_id}).sort("createdAt", DESCENDING).limit(limit)
        return serialize_docs(cursor)

    def top_speeds(self, limit: int = 10) -> List[dict]:
        return serialize_docs(self.collection.find().sort("wpm", DESCENDING).limit(limit))

    def stats(self) -> dict:
        pipeline = [
            {"$group": {
                "_id": None,
                "avgWpm": {"$avg": "$wpm"},
                "avgAccuracy": {"$avg": "$accuracy"},
                "totalTests": {"$sum": 1}
            }}
        ]
        rows = list(self.collection.aggregate(pipeline))
        if not rows:
            return {}
        row = rows[0]
        row.pop("_id", None)
        return row


# ============================================================
# DEMO SLOTS / BOOKINGS COLLECTIONS
# ============================================================

class DemoSlotService:
    """Bookable demo-class slots, unique per (day, time)."""

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["demo_slots"])

    def list_available(self, day: Optional[datetime] = None) -> List[dict]:
        query: Dict[str, Any] = {"isBooked": False}
        if day is not None:
            query["date"] = day_range(day)
        else:
            query["date"] = {"$gte": start_of_day(datetime.utcnow())}
        cursor = self.collection.find(query).sort([("date", ASCENDING), ("time", ASCENDING)])
        return serialize_docs(cursor)

    def insert_many(self, slots: List[dict]) -> Tuple[List[dict], Optional[str]]:
        """
        Unordered bulk insert. Duplicates are rejected by the unique index while
        the remaining slots are still inserted.
        Returns (created slots, error message or None).
        """
        docs = [
            {"date": start_of_day(slot["date"]), "time": slot["time"], "isBooked": False}
            for slot in slots
        ]
        try:
            self.collection.insert_many(docs, ordered=False)
        except BulkWriteError as exc:
            failed = {err["index"] for err in exc.details.get("writeErrors", [])}
            created = [doc for index, doc in enumerate(docs) if index not in failed]
            return serialize_docs(created), str(exc)
        return serialize_docs(docs), None

    def claim(self, day: datetime, time_slot: str) -> Optional[dict]:
        """Flip a free slot on that day/time to booked in one conditional update."""
        return self.collection.find_one_and_update(
            {"date": day_range(day), "time": time_slot, "isBooked": False},
            {"$set": {"isBooked": True}},
            return_document=ReturnDocument.AFTER
        )

    def exists(self, day: datetime, time_slot: str) -> bool:
        return self.collection.find_one({"date": day_range(day), "time": time_slot}, {"_id": 1}) is not None

    def release(self, slot_id: ObjectId) -> None:
        self.collection.update_one({"_id": slot_id}, {"$set": {"isBooked": False}})

    def delete(self, slot_id: str) -> bool:
        oid = to_object_id(slot_id)
        if oid is None:
            return False
        return self.collection.delete_one({"_id": oid}).deleted_count > 0


class DemoBookingService:
    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["demo_bookings"])

    def insert(self, booking: dict, slot_id: Optional[ObjectId] = None) -> dict:
        doc = dict(booking, slotId=slot_id, createdAt=datetime.utcnow())
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return serialize_doc(doc)

    def list_all(self) -> List[dict]:
        return serialize_docs(self.collection.find().sort("createdAt", DESCENDING))


# ============================================================
# INTERVIEWS COLLECTION
# ============================================================

class InterviewService:
    """One document per completed voice call; callId is unique."""

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["interviews"])

    def insert(self, interview: dict) -> str:
        """Raises pymongo DuplicateKeyError when the callId is already stored."""
        doc = dict(interview, createdAt=datetime.utcnow())
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def list_for_student(self, student_id: str) -> List[dict]:
        cursor = self.collection.find({"studentId": student_id}).sort("createdAt", DESCENDING)
        return serialize_docs(cursor)


# ============================================================
# JOBS COLLECTION
# ============================================================

class JobService:
    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["jobs"])

    def list_active(self, student_only: Optional[bool] = None) -> List[dict]:
        """
        student_only=True  -> student-only jobs
        student_only=False -> everything that is not student-only
        None               -> all active jobs
        """
        query: Dict[str, Any] = {"isActive": True}
        if student_only is True:
            query["isStudentOnly"] = True
        elif student_only is False:
            query["isStudentOnly"] = {"$ne": True}
        return serialize_docs(self.collection.find(query).sort("postedAt", DESCENDING))

    def get(self, job_id: str) -> Optional[dict]:
        oid = to_object_id(job_id)
        if oid is None:
            return None
        return serialize_doc(self.collection.find_one({"_id": oid}))

    def insert(self, job: dict) -> dict:
        doc = dict(job, postedAt=datetime.utcnow())
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return serialize_doc(doc)

    def update(self, job_id: str, fields: dict) -> Optional[dict]:
        oid = to_object_id(job_id)
        if oid is None:
            return None
        if not fields:
            return serialize_doc(self.collection.find_one({"_id": oid}))
        doc = self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": fields},
            return_document=ReturnDocument.AFTER
        )
        return serialize_doc(doc)

    def delete(self, job_id: str) -> bool:
        oid = to_object_id(job_id)
        if oid is None:
            return False
        return self.collection.delete_one({"_id": oid}).deleted_count > 0


# ============================================================
# COURSES COLLECTION (owned by the course builder)
# ============================================================

class CourseService:
    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["courses"])

    def get(self, course_id: ObjectId) -> Optional[dict]:
        return self.collection.find_one({"_id": course_id})

    def titles(self, course_ids: List[ObjectId]) -> Dict[ObjectId, str]:
        cursor = self.collection.find({"_id": {"$in": list(course_ids)}}, {"title": 1})
        return {course["_id"]: course.get("title", "") for course in cursor}


# ============================================================
# BATCHES / BATCH STUDENTS COLLECTIONS
# ============================================================

BATCH_STUDENT_FIELDS = {"name": 1, "email": 1, "phone": 1, "status": 1, "courseName": 1, "profilePicture": 1}
ENROLLMENT_BATCH_FIELDS = {"name": 1, "startDate": 1, "endDate": 1, "status": 1}


class BatchService:
    """Course cohorts; each listing carries the course title and current head count."""

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["batches"])
        self.enrollments: Collection = get_collection(COLLECTIONS["batch_students"])

    def _with_details(self, batches: List[dict]) -> List[dict]:
        titles = CourseService().titles({batch["courseId"] for batch in batches})
        detailed = []
        for batch in batches:
            doc = serialize_doc(batch)
            doc["courseTitle"] = titles.get(batch["courseId"], "")
            doc["studentCount"] = self.enrollments.count_documents({"batchId": batch["_id"]})
            detailed.append(doc)
        return detailed

    def insert(self, batch: dict) -> dict:
        doc = dict(batch, status="active", createdAt=datetime.utcnow())
        doc["startDate"] = to_naive_utc(doc["startDate"])
        doc["endDate"] = to_naive_utc(doc["endDate"])
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return self._with_details([doc])[0]

    def list_all(self, course_id: Optional[ObjectId] = None) -> List[dict]:
        query = {"courseId": course_id} if course_id is not None else {}
        return self._with_details(list(self.collection.find(query).sort("createdAt", DESCENDING)))

    def get_raw(self, batch_id: str) -> Optional[dict]:
        oid = to_object_id(batch_id)
        if oid is None:
            return None
        return self.collection.find_one({"_id": oid})

    def get(self, batch_id: str) -> Optional[dict]:
        batch = self.get_raw(batch_id)
        return self._with_details([batch])[0] if batch else None

    def update(self, batch_id: str, fields: dict) -> Optional[dict]:
        oid = to_object_id(batch_id)
        if oid is None:
            return None
        for key in ("startDate", "endDate"):
            if fields.get(key) is not None:
                fields[key] = to_naive_utc(fields[key])
        if not fields:
            batch = self.collection.find_one({"_id": oid})
        else:
            batch = self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": fields},
                return_document=ReturnDocument.AFTER
            )
        return self._with_details([batch])[0] if batch else None

    def delete(self, batch_id: str) -> bool:
        """Deletes the batch together with its enrollments."""
        batch = self.get_raw(batch_id)
        if not batch:
            return False
        self.enrollments.delete_many({"batchId": batch["_id"]})
        self.collection.delete_one({"_id": batch["_id"]})
        return True


class BatchStudentService:
    """Enrollments: one batch per (student, course)."""

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["batch_students"])

    def count_others(self, batch_id: ObjectId, student_id: str) -> int:
        """Head count of the batch, not counting the given student."""
        return self.collection.count_documents({"batchId": batch_id, "studentId": {"$ne": student_id}})

    def assign(self, batch: dict, student_id: str, enrollment_date: Optional[datetime] = None) -> dict:
        """Puts the student in this batch, replacing their batch for the same course."""
        now = datetime.utcnow()
        doc = self.collection.find_one_and_update(
            {"studentId": student_id, "courseId": batch["courseId"]},
            {
                "$set": {
                    "batchId": batch["_id"],
                    "enrollmentDate": to_naive_utc(enrollment_date) if enrollment_date else now,
                    "status": "active",
                    "updatedAt": now
                },
                "$setOnInsert": {"createdAt": now}
            },
            upsert=True,
            return_document=ReturnDocument.AFTER
        )
        return serialize_doc(doc)

    def change_batch(self, student_id: str, new_batch: dict) -> Optional[dict]:
        """Moves an existing enrollment; None when the student is not enrolled in that course."""
        now = datetime.utcnow()
        doc = self.collection.find_one_and_update(
            {"studentId": student_id, "courseId": new_batch["courseId"]},
            {"$set": {"batchId": new_batch["_id"], "enrollmentDate": now, "updatedAt": now}},
            return_document=ReturnDocument.AFTER
        )
        return serialize_doc(doc)

    def list_for_batch(self, batch_id: ObjectId) -> List[dict]:
        enrollments = list(self.collection.find({"batchId": batch_id}).sort("enrollmentDate", DESCENDING))
        student_oids = [oid for oid in (to_object_id(e["studentId"]) for e in enrollments) if oid is not None]
        students = get_collection(COLLECTIONS["students"])
        by_id = {
            str(student["_id"]): serialize_doc(student)
            for student in students.find({"_id": {"$in": student_oids}}, BATCH_STUDENT_FIELDS)
        }
        docs = []
        for enrollment in enrollments:
            doc = serialize_doc(enrollment)
            doc["student"] = by_id.get(enrollment["studentId"])
            docs.append(doc)
        return docs

    def list_for_student(self, student_id: str) -> List[dict]:
        enrollments = list(self.collection.find({"studentId": student_id}))
        batches = get_collection(COLLECTIONS["batches"])
        by_id = {
            batch["_id"]: serialize_doc(batch)
            for batch in batches.find({"_id": {"$in": [e["batchId"] for e in enrollments]}}, ENROLLMENT_BATCH_FIELDS)
        }
        titles = CourseService().titles({e["courseId"] for e in enrollments})
        docs = []
        for enrollment in enrollments:
            doc = serialize_doc(enrollment)
            doc["batch"] = by_id.get(enrollment["batchId"])
            doc["courseTitle"] = titles.get(enrollment["courseId"], "")
            docs.append(doc)
        return docs

    def remove(self, batch_id: ObjectId, student_id: str) -> bool:
        return self.collection.delete_one({"batchId": batch_id, "studentId": student_id}).deleted_count > 0


# ============================================================
# COURSE PROGRESS COLLECTION
# Written by the course player, one record per (student, topic)
# ============================================================

# Share of the current course a student must finish before job details are shown
JOB_ELIGIBILITY_PERCENT = 75


class CourseProgressService:
    """Topic progress and completion of the course a student is currently taking."""

    def __init__(self):
        self.progress: Collection = get_collection(COLLECTIONS["progress"])
        self.modules: Collection = get_collection(COLLECTIONS["modules"])
        self.topics: Collection = get_collection(COLLECTIONS["topics"])

    def update(self, student_id: str, course_id: ObjectId, topic_id: ObjectId,
               completed: Optional[bool] = None, watched_duration: Optional[float] = None) -> dict:
        """
        Upsert one topic record. Fields left as None keep their stored value;
        completedAt is stamped the first time the topic is completed.
        """
        now = datetime.utcnow()
        key = {"studentId": student_id, "topicId": topic_id}
        existing = self.progress.find_one(key, {"completedAt": 1}) or {}

        changes: Dict[str, Any] = {"updatedAt": now}
        if completed is not None:
            changes["completed"] = completed
        if watched_duration is not None:
            changes["watchedDuration"] = watched_duration
        if completed and not existing.get("completedAt"):
            changes["completedAt"] = now

        defaults = {"courseId": course_id, "createdAt": now}
        for field, value in (("completed", False), ("watchedDuration", 0)):
            if field not in changes:
                defaults[field] = value

        doc = self.progress.find_one_and_update(
            key,
            {"$set": changes, "$setOnInsert": defaults},
            upsert=True,
            return_document=ReturnDocument.AFTER
        )
        return serialize_doc(doc)

    def list_for_course(self, student_id: str, course_id: ObjectId) -> List[dict]:
        return serialize_docs(self.progress.find({"studentId": student_id, "courseId": course_id}))

    def topic_counts(self, student_id: str, course_id: ObjectId) -> Tuple[int, int]:
        """Returns (completed topics, total topics) of the course."""
        module_ids = [m["_id"] for m in self.modules.find({"courseId": course_id}, {"_id": 1})]
        total_topics = self.topics.count_documents({"moduleId": {"$in": module_ids}})
        completed = self.progress.count_documents({
            "studentId": student_id,
            "courseId": course_id,
            "completed": True
        })
        return completed, total_topics

    def current_course(self, student_id: str) -> Optional[ObjectId]:
        """Course of the student's most recently updated progress record."""
        latest = self.progress.find_one(
            {"studentId": student_id},
            sort=[("updatedAt", DESCENDING)],
            projection={"courseId": 1}
        )
        return latest.get("courseId") if latest else None

    def course_percent(self, student_id: str, course_id: ObjectId) -> int:
        completed, total_topics = self.topic_counts(student_id, course_id)
        if total_topics == 0:
            return 0
        return min(round_half_up(completed / total_topics * 100), 100)

    def completion_percent(self, student_id: str) -> int:
        course_id = self.current_course(student_id)
        if course_id is None:
            return 0
        return self.course_percent(student_id, course_id)

    def completion_stats(self, student_id: str) -> dict:
        course_id = self.current_course(student_id)
        if course_id is None:
            return {"completionPercentage": 0, "completedTopics": 0, "totalTopics": 0, "enrolled": False}

        completed, total_topics = self.topic_counts(student_id, course_id)
        course = CourseService().get(course_id) or {}
        return {
            "completionPercentage": self.course_percent(student_id, course_id),
            "completedTopics": completed,
            "totalTopics": total_topics,
            "enrolled": True,
            "courseName": course.get("title", "")
        }

    def sync_student_percent(self, student_id: str, course_id: ObjectId) -> int:
        """Copies the course percentage onto the student record the dashboards read."""
        percent = self.course_percent(student_id, course_id)
        oid = to_object_id(student_id)
        if oid is not None:
            get_collection(COLLECTIONS["students"]).update_one({"_id": oid}, {"$set": {"progress": percent}})
        return percent
