# tests/test_progress.py
import pytest
from bson import ObjectId


@pytest.fixture
def course(db):
    """A course of 4 topics over two modules; returns (course id, [topic ids])."""
    course_id = db.courses.insert_one({"title": "Data Science"}).inserted_id
    topic_ids = []
    for module_title in ("Basics", "Pandas"):
        module_id = db.modules.insert_one({"courseId": course_id, "title": module_title}).inserted_id
        topic_ids += db.topics.insert_many(
            [{"moduleId": module_id, "title": f"{module_title} {i}"} for i in range(2)]
        ).inserted_ids
    return course_id, topic_ids


@pytest.fixture
def student_id(db):
    return str(db.students.insert_one({"name": "Asha", "progress": 0}).inserted_id)


def update(client, student_id, course_id, topic_id, **fields):
    payload = {"studentId": student_id, "courseId": str(course_id), "topicId": str(topic_id)}
    payload.update(fields)
    return client.post("/api/student/progress/update", json=payload)


def test_first_update_creates_record(client, db, course, student_id):
    course_id, topics = course

    resp = update(client, student_id, course_id, topics[0], watchedDuration=42.5)

    assert resp.status_code == 200
    progress = resp.json()["progress"]
    assert progress["completed"] is False
    assert progress["watchedDuration"] == 42.5
    assert progress["courseId"] == str(course_id)
    assert "completedAt" not in progress


def test_completion_stamp_is_kept(client, db, course, student_id):
    course_id, topics = course
    update(client, student_id, course_id, topics[0], completed=True)
    first_stamp = db.progresses.find_one({"topicId": topics[0]})["completedAt"]

    resp = update(client, student_id, course_id, topics[0], watchedDuration=300)

    progress = resp.json()["progress"]
    assert progress["completed"] is True
    assert progress["watchedDuration"] == 300
    assert db.progresses.find_one({"topicId": topics[0]})["completedAt"] == first_stamp
    assert db.progresses.count_documents({"studentId": student_id}) == 1


def test_update_refreshes_student_percentage(client, db, course, student_id):
    course_id, topics = course

    update(client, student_id, course_id, topics[0], completed="true")
    update(client, student_id, course_id, topics[1], completed=True)
    update(client, student_id, course_id, topics[2], completed=True)

    assert db.students.find_one({"_id": ObjectId(student_id)})["progress"] == 75


def test_update_validation(client, course, student_id):
    course_id, topics = course

    resp = client.post("/api/student/progress/update", json={"studentId": student_id})
    assert resp.status_code == 400
    assert set(resp.json()["fields"]) == {"courseId", "topicId"}

    resp = update(client, student_id, "not-an-id", topics[0])
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid courseId or topicId"


def test_course_progress_lists_topic_records(client, course, student_id):
    course_id, topics = course
    update(client, student_id, course_id, topics[0], completed=True)
    update(client, student_id, course_id, topics[1])
    update(client, "someone-else", course_id, topics[2], completed=True)

    body = client.get(f"/api/student/progress/{course_id}/{student_id}").json()

    assert body["success"] is True
    assert {p["topicId"] for p in body["progress"]} == {str(topics[0]), str(topics[1])}


def test_completion_stats(client, course, student_id):
    course_id, topics = course
    update(client, student_id, course_id, topics[0], completed=True)

    stats = client.get(f"/api/student/progress/stats/{student_id}").json()["stats"]

    assert stats == {
        "completionPercentage": 25,
        "completedTopics": 1,
        "totalTopics": 4,
        "enrolled": True,
        "courseName": "Data Science",
    }


def test_completion_stats_without_progress(client):
    stats = client.get("/api/student/progress/stats/new-student").json()["stats"]

    assert stats == {"completionPercentage": 0, "completedTopics": 0, "totalTopics": 0, "enrolled": False}


def test_job_eligibility(client, course, student_id):
    course_id, topics = course
    for topic_id in topics[:2]:
        update(client, student_id, course_id, topic_id, completed=True)

    assert client.get(f"/api/students/{student_id}/eligibility").json() == {"eligible": False, "completion": 50}

    update(client, student_id, course_id, topics[2], completed=True)
    assert client.get(f"/api/students/{student_id}/eligibility").json() == {"eligible": True, "completion": 75}
