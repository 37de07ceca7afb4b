from datetime import datetime

import mongomock
import pytest
from fastapi.testclient import TestClient

from database import USERS, VIDEOS, create_document, ensure_indexes, get_db
from main import app


@pytest.fixture
def db():
    database = mongomock.MongoClient().videotube_test
    ensure_indexes(database)
    return database


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(username="alice", **extra):
        doc = {
            "username": username,
            "email": f"{username}@example.com",
            "fullName": username.title(),
            "password": "not-a-real-hash",
            "avatar": f"https://img.example.com/{username}.png",
            "coverImage": "",
            "watchHistory": [],
        }
        doc.update(extra)
        return create_document(db, USERS, doc)["_id"]
    return _make


@pytest.fixture
def make_video(db):
    def _make(owner, title="Untitled", views=0, description="", created_at=None, **extra):
        doc = {
            "title": title,
            "description": description,
            "videoFile": f"https://cdn.example.com/{title.replace(' ', '_')}.mp4",
            "thumbnail": "",
            "duration": "01:00",
            "views": views,
            "owner": owner,
            "isPublished": True,
        }
        if created_at is not None:
            doc["createdAt"] = created_at
        doc.update(extra)
        return create_document(db, VIDEOS, doc)["_id"]
    return _make


def auth(user_id):
    return {"X-User-Id": str(user_id)}


@pytest.fixture
def as_user():
    return auth


@pytest.fixture
def fixed_now():
    return datetime(2024, 3, 31, 12, 0, 0)
