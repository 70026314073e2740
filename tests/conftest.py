"""Shared test configuration.

The environment is seeded before the app is imported so the cached
settings never pick up real secrets. MongoDB is an in-memory mongomock
database injected through the get_db dependency.
"""

import os

os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-secret")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_fake")
os.environ["NODE_ENV"] = "development"
os.environ.setdefault("DB_URI", "mongodb://localhost:27017")

import mongomock
import pytest
from fastapi.testclient import TestClient

from database import CONTESTS, USERS, get_db
from main import app


@pytest.fixture
def db():
    return mongomock.MongoClient()["ContestHubTest"]


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login(client, db):
    """Store a user with the given role and sign the client in as them."""
    def _login(email, role="none"):
        db[USERS].update_one({"email": email}, {"$set": {"role": role}}, upsert=True)
        resp = client.post("/jwt", json={"email": email})
        assert resp.status_code == 200
        return resp
    return _login


@pytest.fixture
def make_contest(db):
    def _make(**fields):
        doc = {
            "name": "Logo Sprint",
            "price": 10.0,
            "prizeMoney": 500.0,
            "category": "Design",
            "deadline": "2026-12-31T00:00:00Z",
            "status": "approved",
            "attemptedCount": 0,
            "participants": [],
            "creatorInfo": {"email": "maker@example.com"},
        }
        doc.update(fields)
        return str(db[CONTESTS].insert_one(doc).inserted_id)
    return _make
