import pytest
from bson import ObjectId

NEW_CONTEST = {
    "name": "Poster Jam",
    "price": 5,
    "image": "https://img/poster.png",
    "prizeMoney": 250,
    "category": "Image Design",
    "deadline": "2026-11-30T00:00:00Z",
    "taskSubmissionText": "Upload a PNG link",
    "description": "Design a festival poster",
    "creatorInfo": {"email": "maker@example.com", "name": "Maker"},
}


def test_creator_creates_pending_contest(client, login, db):
    login("maker@example.com", "creator")
    resp = client.post("/contests", json=NEW_CONTEST)
    assert resp.status_code == 200
    ack = resp.json()
    assert ack["acknowledged"] is True

    doc = db.contests.find_one({"_id": ObjectId(ack["insertedId"])})
    assert doc["status"] == "pending"
    assert doc["attemptedCount"] == 0
    assert doc["participants"] == []
    assert doc["creatorInfo"]["email"] == "maker@example.com"


def test_plain_user_cannot_create_contest(client, login):
    login("ada@example.com", "none")
    assert client.post("/contests", json=NEW_CONTEST).status_code == 403


def test_contest_requires_valid_fields(client, login):
    login("maker@example.com", "creator")
    resp = client.post("/contests", json={**NEW_CONTEST, "price": -1})
    assert resp.status_code == 400
    assert resp.json()["error"]["details"][0]["field"] == "body.price"


def test_public_listing_shows_only_approved(client, make_contest):
    make_contest(name="Open", status="approved")
    make_contest(name="Waiting", status="pending")

    names = [c["name"] for c in client.get("/contests").json()]
    assert names == ["Open"]


def test_public_listing_filters_by_category(client, make_contest):
    make_contest(name="Essay", category="Article Writing")
    make_contest(name="Logo", category="Design")

    names = [c["name"] for c in client.get("/contests", params={"category": "Design"}).json()]
    assert names == ["Logo"]


def test_all_contests_ignores_status(client, login, make_contest):
    make_contest(name="Open", status="approved")
    make_contest(name="Waiting", status="pending")
    login("root@example.com", "admin")

    names = sorted(c["name"] for c in client.get("/all_contests").json())
    assert names == ["Open", "Waiting"]


def test_pending_contest_appears_after_admin_approval(client, login):
    login("maker@example.com", "creator")
    contest_id = client.post("/contests", json=NEW_CONTEST).json()["insertedId"]
    assert contest_id not in [c["_id"] for c in client.get("/contests").json()]

    login("root@example.com", "admin")
    resp = client.patch(f"/update_contest_status/{contest_id}", json={"status": "approved"})
    assert resp.status_code == 200
    assert resp.json()["modifiedCount"] == 1

    assert contest_id in [c["_id"] for c in client.get("/contests").json()]


def test_status_update_rejects_unknown_state(client, login, make_contest):
    contest_id = make_contest(status="pending")
    login("root@example.com", "admin")
    resp = client.patch(f"/update_contest_status/{contest_id}", json={"status": "rejected"})
    assert resp.status_code == 400


def test_top_contests_sorted_by_attempts_and_limited(client, make_contest):
    for count in [3, 9, 1, 7, 5, 8]:
        make_contest(name=f"c{count}", attemptedCount=count)
    make_contest(name="hidden", attemptedCount=100, status="pending")

    counts = [c["attemptedCount"] for c in client.get("/top_contests").json()]
    assert counts == [9, 8, 7, 5, 3]


def test_get_contest_by_id(client, make_contest):
    contest_id = make_contest(name="Logo Sprint")
    resp = client.get(f"/contest/{contest_id}")
    assert resp.status_code == 200
    assert resp.json()["name"] == "Logo Sprint"
    assert resp.json()["_id"] == contest_id


def test_get_contest_with_malformed_id(client):
    resp = client.get("/contest/not-an-id")
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "INVALID_ID"


def test_get_missing_contest_returns_null(client):
    resp = client.get(f"/contest/{ObjectId()}")
    assert resp.status_code == 200
    assert resp.json() is None


def test_search_is_case_insensitive_substring(client, make_contest):
    make_contest(name="Essay", category="Article Writing")
    make_contest(name="Logo", category="Design")

    names = [c["name"] for c in client.get("/search_contests/article").json()]
    assert names == ["Essay"]


def test_search_treats_pattern_characters_literally(client, make_contest):
    make_contest(name="Essay", category="Article Writing")
    assert client.get("/search_contests/.*").json() == []


def test_creator_lists_own_contests(client, login, make_contest):
    make_contest(name="Mine", creatorInfo={"email": "maker@example.com"})
    make_contest(name="Theirs", creatorInfo={"email": "other@example.com"})
    login("maker@example.com", "creator")

    names = [c["name"] for c in client.get("/contests/maker@example.com").json()]
    assert names == ["Mine"]


def test_creator_updates_contest_fields(client, login, make_contest, db):
    contest_id = make_contest(name="Old", prizeMoney=100)
    login("maker@example.com", "creator")

    resp = client.patch(f"/update_contest/{contest_id}", json={"name": "New"})
    assert resp.status_code == 200
    doc = db.contests.find_one({"_id": ObjectId(contest_id)})
    assert doc["name"] == "New"
    assert doc["prizeMoney"] == 100


def test_delete_contest_by_admin_or_creator(client, login, make_contest, db):
    first = make_contest()
    second = make_contest()

    login("root@example.com", "admin")
    assert client.delete(f"/delete_contest/{first}").json()["deletedCount"] == 1
    login("maker@example.com", "creator")
    assert client.delete(f"/delete_contest/{second}").json()["deletedCount"] == 1
    assert db.contests.count_documents({}) == 0


def test_plain_user_cannot_delete_contest(client, login, make_contest):
    contest_id = make_contest()
    login("ada@example.com", "none")
    assert client.delete(f"/delete_contest/{contest_id}").status_code == 403


def test_status_update_upserts_missing_contest(client, login, db):
    contest_id = ObjectId()
    login("root@example.com", "admin")

    resp = client.patch(f"/update_contest_status/{contest_id}", json={"status": "approved"})
    assert resp.status_code == 200
    ack = resp.json()
    assert ack["matchedCount"] == 0
    assert ack["upsertedCount"] == 1
    assert ack["upsertedId"] == str(contest_id)
    assert db.contests.find_one({"_id": contest_id})["status"] == "approved"


@pytest.mark.parametrize("role", ["none", "creator"])
def test_only_admin_changes_status(client, login, make_contest, db, role):
    contest_id = make_contest(status="pending")
    login("ada@example.com", role)

    resp = client.patch(f"/update_contest_status/{contest_id}", json={"status": "approved"})
    assert resp.status_code == 403
    assert db.contests.find_one({"_id": ObjectId(contest_id)})["status"] == "pending"


@pytest.mark.parametrize("role", ["none", "admin"])
def test_only_creator_edits_contest(client, login, make_contest, db, role):
    contest_id = make_contest(name="Old")
    login("ada@example.com", role)

    resp = client.patch(f"/update_contest/{contest_id}", json={"name": "New"})
    assert resp.status_code == 403
    assert db.contests.find_one({"_id": ObjectId(contest_id)})["name"] == "Old"
