"""
MongoDB access for the video platform.

Collections:
- users, videos, comments, likes, subscriptions, playlists, tweets

Uniqueness invariants are enforced by indexes so that toggles and
playlist creation can rely on ``DuplicateKeyError`` instead of a separate
read-then-write check.
"""

import logging
from typing import Optional, Union

from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from config import DATABASE_NAME, DATABASE_URL
from helpers import utcnow

logger = logging.getLogger(__name__)

USERS = "users"
VIDEOS = "videos"
COMMENTS = "comments"
LIKES = "likes"
SUBSCRIPTIONS = "subscriptions"
PLAYLISTS = "playlists"
TWEETS = "tweets"

# MongoClient connects lazily, so importing this module never touches the network
client = MongoClient(DATABASE_URL)
db = client[DATABASE_NAME]


def get_db() -> Database:
    return db


def ensure_indexes(database: Database) -> None:
    database[USERS].create_index([("username", ASCENDING)], unique=True)
    database[USERS].create_index([("email", ASCENDING)], unique=True)
    database[VIDEOS].create_index([("owner", ASCENDING), ("createdAt", DESCENDING)])
    database[COMMENTS].create_index([("video", ASCENDING), ("createdAt", DESCENDING)])
    # a like carries exactly one target, the absent ones index as null
    database[LIKES].create_index(
        [("likedBy", ASCENDING), ("video", ASCENDING), ("comment", ASCENDING), ("tweet", ASCENDING)],
        unique=True,
    )
    database[SUBSCRIPTIONS].create_index(
        [("subscriber", ASCENDING), ("channel", ASCENDING)], unique=True
    )
    database[SUBSCRIPTIONS].create_index([("channel", ASCENDING)])
    database[PLAYLISTS].create_index([("name", ASCENDING), ("owner", ASCENDING)], unique=True)
    database[TWEETS].create_index([("tweetBy", ASCENDING), ("createdAt", DESCENDING)])
    logger.info("Indexes ensured on database %s", database.name)


def create_document(database: Database, collection_name: str, data: Union[BaseModel, dict]) -> dict:
    """Insert a document stamped with createdAt/updatedAt and return it with its _id."""
    if isinstance(data, BaseModel):
        doc = data.model_dump(exclude_none=True)
    else:
        doc = dict(data)
    now = utcnow()
    doc.setdefault("createdAt", now)
    doc["updatedAt"] = now
    doc["_id"] = database[collection_name].insert_one(doc).inserted_id
    logger.debug("Inserted %s into %s", doc["_id"], collection_name)
    return doc


def get_documents(database: Database, collection_name: str, filter_dict: Optional[dict] = None,
                  sort=None, limit: int = 0) -> list:
    cursor = database[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)
