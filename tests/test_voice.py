# tests/test_voice.py
from datetime import datetime, timedelta

from bson import ObjectId

from app.main import app
from app.services.llm_client import get_llm_client


def end_of_call(call_id="call-1", student_id="stu-1", **extra):
    message = {
        "type": "end-of-call-report",
        "call": {"id": call_id, "metadata": {"studentId": student_id} if student_id else {}},
        "analysis": {"summary": "Candidate was confident."},
        "artifact": {"transcript": "AI: Tell me about yourself. User: ...", "recordingUrl": "https://rec.test/1.mp3"},
        "durationSeconds": 312,
    }
    message.update(extra)
    return {"message": message}


def test_start_interview_requires_student(client, limiter):
    resp = client.post("/api/voice/start-interview", json={"name": "Asha"})

    assert resp.status_code == 400
    assert resp.json()["message"] == "Student ID is required"


def test_fourth_interview_same_day_is_rejected(client, limiter, clock):
    for _ in range(3):
        resp = client.post("/api/voice/start-interview", json={"studentId": "stu-1", "name": "Asha"})
        assert resp.status_code == 200

    resp = client.post("/api/voice/start-interview", json={"studentId": "stu-1", "name": "Asha"})
    assert resp.status_code == 429
    assert resp.json()["message"] == "Daily interview limit reached (3 per day). Please try again tomorrow."

    # another student is unaffected
    assert client.post("/api/voice/start-interview", json={"studentId": "stu-2"}).status_code == 200

    clock.today += timedelta(days=1)
    resp = client.post("/api/voice/start-interview", json={"studentId": "stu-1", "name": "Asha"})
    assert resp.status_code == 200


def test_start_interview_response(client, db, limiter, settings, monkeypatch):
    monkeypatch.setattr(settings, "vapi_agent_id", "agent-123")
    student_id = db.students.insert_one({"name": "Asha Verma", "email": "asha@example.com"}).inserted_id

    body = client.post("/api/voice/start-interview", json={"studentId": str(student_id)}).json()

    assert body["success"] is True
    assert body["agentId"] == "agent-123"
    assert body["studentName"] == "Asha Verma"


def test_webhook_stores_interview_with_model_feedback(client, db, llm):
    resp = client.post("/api/voice/vapi-webhook", json=end_of_call())

    assert resp.json() == {"success": True}
    interview = db.interviews.find_one({"callId": "call-1"})
    assert interview["studentId"] == "stu-1"
    assert interview["score"] == 7
    assert interview["feedback"] == (
        "**Strengths:** Clear answers\n\n**Weaknesses:** Rushed the intro\n\n**Feedback:** Slow down"
    )
    assert interview["recordingUrl"] == "https://rec.test/1.mp3"
    assert interview["duration"] == 312
    assert interview["status"] == "completed"
    assert llm.transcripts == ["AI: Tell me about yourself. User: ..."]


def test_webhook_without_student_creates_nothing(client, db, llm):
    resp = client.post("/api/voice/vapi-webhook", json=end_of_call(student_id=None))

    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert db.interviews.count_documents({}) == 0
    assert llm.transcripts == []


def test_webhook_redelivery_is_ignored(client, db, llm):
    client.post("/api/voice/vapi-webhook", json=end_of_call())
    resp = client.post("/api/voice/vapi-webhook", json=end_of_call())

    assert resp.json() == {"success": True}
    assert db.interviews.count_documents({"callId": "call-1"}) == 1


def test_score_is_clamped(client, db, llm):
    llm.analysis["score"] = 14
    client.post("/api/voice/vapi-webhook", json=end_of_call())

    llm.analysis["score"] = "not a number"
    client.post("/api/voice/vapi-webhook", json=end_of_call(call_id="call-2"))

    assert db.interviews.find_one({"callId": "call-1"})["score"] == 10
    assert db.interviews.find_one({"callId": "call-2"})["score"] == 5


def test_model_failure_falls_back_to_summary(client, db, llm):
    llm.error = RuntimeError("model down")

    client.post("/api/voice/vapi-webhook", json=end_of_call())

    interview = db.interviews.find_one()
    assert interview["feedback"] == "Candidate was confident."
    assert interview["score"] == 5


def test_without_model_uses_agent_summary(client, db):
    app.dependency_overrides[get_llm_client] = lambda: None
    try:
        client.post("/api/voice/vapi-webhook", json=end_of_call(analysis={}))
    finally:
        app.dependency_overrides.pop(get_llm_client, None)

    assert db.interviews.find_one()["feedback"] == "AI Analysis unavailable (Missing API Key)."


def test_other_message_types_are_acknowledged(client, db, llm):
    resp = client.post("/api/voice/vapi-webhook", json={"message": {"type": "status-update", "status": "ringing"}})

    assert resp.json() == {"success": True}
    assert db.interviews.count_documents({}) == 0


def test_webhook_secret(client, db, llm, settings, monkeypatch):
    monkeypatch.setattr(settings, "vapi_webhook_secret", "s3cret")

    resp = client.post("/api/voice/vapi-webhook", json=end_of_call(), headers={"x-vapi-secret": "wrong"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid signature"

    resp = client.post("/api/voice/vapi-webhook", json=end_of_call(), headers={"x-vapi-secret": "s3cret"})
    assert resp.status_code == 200
    assert db.interviews.count_documents({}) == 1


def test_history_newest_first(client, db):
    base = datetime(2026, 3, 10, 9, 0)
    db.interviews.insert_many([
        {"studentId": "stu-1", "callId": "a", "score": 6, "createdAt": base},
        {"studentId": "stu-1", "callId": "c", "score": 8, "createdAt": base + timedelta(hours=2)},
        {"studentId": "stu-1", "callId": "b", "score": 7, "createdAt": base + timedelta(hours=1)},
        {"studentId": "stu-2", "callId": "d", "score": 9, "createdAt": base + timedelta(hours=3)},
    ])

    body = client.get("/api/voice/history/stu-1").json()

    assert body["success"] is True
    assert [item["callId"] for item in body["data"]] == ["c", "b", "a"]
    assert all(ObjectId.is_valid(item["_id"]) for item in body["data"])


def test_start_interview_message(client, limiter):
    body = client.post("/api/voice/start-interview", json={"studentId": "stu-1", "name": "Asha"}).json()

    assert body["message"] == "Interview session initialized"
    assert body["studentName"] == "Asha"


def test_duration_read_from_call(client, db, llm):
    payload = end_of_call()
    payload["message"].pop("durationSeconds")
    payload["message"]["call"]["durationSeconds"] = 200

    client.post("/api/voice/vapi-webhook", json=payload)

    assert db.interviews.find_one({"callId": "call-1"})["duration"] == 200


def test_non_object_model_reply_falls_back_to_summary(client, db, llm):
    llm.analysis = ["Clear answers", 7]

    resp = client.post("/api/voice/vapi-webhook", json=end_of_call())

    assert resp.status_code == 200
    interview = db.interviews.find_one({"callId": "call-1"})
    assert interview["feedback"] == "Candidate was confident."
    assert interview["score"] == 5


def test_non_object_metadata_is_treated_as_missing(client, db, llm):
    resp = client.post(
        "/api/voice/vapi-webhook",
        json=end_of_call(call={"id": "call-1", "metadata": "stu-1"}),
    )

    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert db.interviews.count_documents({}) == 0
    assert llm.transcripts == []
