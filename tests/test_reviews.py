# tests/test_reviews.py
from bson import ObjectId

REVIEW = {
    "studentName": "Priya",
    "role": "Data Analyst",
    "courseTaken": "Data Science",
    "reviewText": "Great mentors and projects.",
    "rating": 5,
}

PNG = ("photo.png", b"\x89PNG fake image bytes", "image/png")


def create_review(client, headers, **overrides):
    resp = client.post("/api/reviews", json=dict(REVIEW, **overrides), headers=headers)
    assert resp.status_code == 201
    return resp.json()["data"]


def test_create_review_without_image(client, admin_headers, s3):
    review = create_review(client, admin_headers)

    assert review["studentImage"] == "no-photo.jpg"
    assert review["imagePublicId"] is None
    assert review["isApproved"] is False
    assert s3.calls == []


def test_create_review_with_image(client, db, admin_headers, s3):
    form = {k: str(v) for k, v in REVIEW.items()}
    form["isApproved"] = "true"

    resp = client.post("/api/reviews", data=form, files={"studentImage": PNG}, headers=admin_headers)

    assert resp.status_code == 201
    review = resp.json()["data"]
    assert review["imagePublicId"].startswith("reviews/")
    assert review["studentImage"] == f"https://cdn.test/{review['imagePublicId']}"
    assert review["isApproved"] is True
    assert review["rating"] == 5
    assert review["imagePublicId"] in s3.objects

    stored = db.reviews.find_one({"_id": ObjectId(review["_id"])})
    assert stored["isApproved"] is True


def test_create_review_missing_fields(client, admin_headers, s3):
    resp = client.post("/api/reviews", json={"rating": 4}, headers=admin_headers)

    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert set(body["fields"]) == {"studentName", "reviewText"}


def test_create_review_upload_failure_persists_nothing(client, db, admin_headers, s3):
    s3.fail_put = True
    form = {k: str(v) for k, v in REVIEW.items()}

    resp = client.post("/api/reviews", data=form, files={"studentImage": PNG}, headers=admin_headers)

    assert resp.status_code == 500
    assert resp.json()["message"] == "Image upload failed"
    assert db.reviews.count_documents({}) == 0


def test_create_review_rejects_unsupported_file(client, admin_headers, s3):
    form = {k: str(v) for k, v in REVIEW.items()}

    resp = client.post(
        "/api/reviews", data=form, files={"studentImage": ("cv.pdf", b"%PDF", "application/pdf")}, headers=admin_headers
    )

    assert resp.status_code == 400


def test_update_with_new_image_deletes_old_after_upload(client, db, admin_headers, s3):
    form = {k: str(v) for k, v in REVIEW.items()}
    created = client.post("/api/reviews", data=form, files={"studentImage": PNG}, headers=admin_headers).json()["data"]
    old_key = created["imagePublicId"]

    resp = client.put(
        f"/api/reviews/{created['_id']}",
        data={"studentName": "Priya S."},
        files={"studentImage": ("new.jpg", b"jpeg bytes", "image/jpeg")},
        headers=admin_headers,
    )

    assert resp.status_code == 200
    updated = resp.json()["data"]
    new_key = updated["imagePublicId"]
    assert new_key != old_key
    assert updated["studentName"] == "Priya S."
    assert updated["reviewText"] == REVIEW["reviewText"]
    # new upload happens before the old image is removed
    assert s3.calls[-2:] == [("put", new_key), ("delete", old_key)]
    assert old_key not in s3.objects
    assert new_key in s3.objects


def test_update_upload_failure_keeps_old_record_and_image(client, db, admin_headers, s3):
    form = {k: str(v) for k, v in REVIEW.items()}
    created = client.post("/api/reviews", data=form, files={"studentImage": PNG}, headers=admin_headers).json()["data"]
    old_key = created["imagePublicId"]
    s3.fail_put = True

    resp = client.put(
        f"/api/reviews/{created['_id']}",
        data={"studentName": "Changed"},
        files={"studentImage": ("new.jpg", b"jpeg bytes", "image/jpeg")},
        headers=admin_headers,
    )

    assert resp.status_code == 500
    stored = db.reviews.find_one({"_id": ObjectId(created["_id"])})
    assert stored["studentName"] == "Priya"
    assert stored["imagePublicId"] == old_key
    assert old_key in s3.objects
    assert ("delete", old_key) not in s3.calls


def test_update_old_image_delete_failure_is_not_fatal(client, admin_headers, s3):
    form = {k: str(v) for k, v in REVIEW.items()}
    created = client.post("/api/reviews", data=form, files={"studentImage": PNG}, headers=admin_headers).json()["data"]
    s3.fail_delete = True

    resp = client.put(
        f"/api/reviews/{created['_id']}",
        files={"studentImage": ("new.jpg", b"jpeg bytes", "image/jpeg")},
        headers=admin_headers,
    )

    assert resp.status_code == 200
    assert resp.json()["data"]["imagePublicId"] != created["imagePublicId"]


def test_update_approval_from_json(client, admin_headers, s3):
    created = create_review(client, admin_headers)

    resp = client.put(f"/api/reviews/{created['_id']}", json={"isApproved": "true"}, headers=admin_headers)

    assert resp.json()["data"]["isApproved"] is True


def test_update_unknown_review(client, admin_headers, s3):
    resp = client.put(f"/api/reviews/{ObjectId()}", json={"rating": 3}, headers=admin_headers)
    assert resp.status_code == 404


def test_delete_review_removes_remote_image(client, db, admin_headers, s3):
    form = {k: str(v) for k, v in REVIEW.items()}
    created = client.post("/api/reviews", data=form, files={"studentImage": PNG}, headers=admin_headers).json()["data"]

    resp = client.delete(f"/api/reviews/{created['_id']}", headers=admin_headers)

    assert resp.json() == {"success": True, "data": {}}
    assert created["imagePublicId"] not in s3.objects
    assert db.reviews.count_documents({}) == 0


def test_delete_review_when_image_delete_fails(client, db, admin_headers, s3):
    form = {k: str(v) for k, v in REVIEW.items()}
    created = client.post("/api/reviews", data=form, files={"studentImage": PNG}, headers=admin_headers).json()["data"]
    s3.fail_delete = True

    resp = client.delete(f"/api/reviews/{created['_id']}", headers=admin_headers)

    assert resp.status_code == 200
    assert db.reviews.count_documents({}) == 0


def test_list_filters_and_pagination(client, admin_headers, s3):
    create_review(client, admin_headers, studentName="A", rating=5, isApproved=True)
    create_review(client, admin_headers, studentName="B", rating=3, isApproved=True)
    create_review(client, admin_headers, studentName="C", rating=4, isApproved=False)
    create_review(client, admin_headers, studentName="D", rating=4, isApproved=True)

    resp = client.get("/api/reviews", params={"isApproved": "true", "rating[gte]": "4", "sort": "-rating"})
    body = resp.json()
    assert body["success"] is True
    assert body["count"] == 2
    assert [r["studentName"] for r in body["data"]] == ["A", "D"]
    assert body["pagination"] == {}

    resp = client.get("/api/reviews", params={"sort": "studentName", "page": 2, "limit": 2})
    body = resp.json()
    assert [r["studentName"] for r in body["data"]] == ["C", "D"]
    assert body["pagination"] == {"prev": {"page": 1, "limit": 2}}

    resp = client.get("/api/reviews", params={"sort": "studentName", "limit": 3})
    assert resp.json()["pagination"] == {"next": {"page": 2, "limit": 3}}


def test_get_review(client, admin_headers, s3):
    created = create_review(client, admin_headers)

    resp = client.get(f"/api/reviews/{created['_id']}")
    assert resp.json()["data"]["studentName"] == "Priya"

    assert client.get("/api/reviews/not-an-id").status_code == 404


def test_writes_require_admin(client, s3):
    assert client.post("/api/reviews", json=REVIEW).status_code == 401


def test_list_rejects_mongo_operators_as_fields(client, admin_headers, s3):
    create_review(client, admin_headers)

    for params in ({"$where": "sleep(1000)"}, {"$or": "x"}, {"$where[gt]": "1"}):
        resp = client.get("/api/reviews", params=params)
        assert resp.status_code == 400
        assert resp.json()["success"] is False


def test_list_rejects_unknown_filter_and_sort_fields(client, admin_headers, s3):
    create_review(client, admin_headers)

    assert client.get("/api/reviews", params={"imagePublicId": "x"}).status_code == 400
    assert client.get("/api/reviews", params={"sort": "-$natural"}).status_code == 400

    resp = client.get("/api/reviews", params={"courseTaken": "Data Science", "rating[lte]": "5"})
    assert resp.status_code == 200
    assert resp.json()["count"] == 1
