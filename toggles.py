"""
Like and subscription toggles.

A toggle flips the existence of an (actor, target) record. The flip is a
``find_one_and_delete`` on the key followed, when nothing was deleted, by an
insert guarded by the unique index on that key. If the insert loses a race
with a concurrent insert the loop goes back to deleting, so every call is
exactly one flip and at most one record per key ever exists.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from bson import ObjectId
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from config import TOGGLE_MAX_ATTEMPTS
from database import COMMENTS, LIKES, SUBSCRIPTIONS, TWEETS, USERS, VIDEOS
from errors import InvalidArgument, NotFound, Unexpected
from helpers import objid, utcnow
from schemas import Like, Subscription

logger = logging.getLogger(__name__)

LIKE_TARGETS = {
    "video": VIDEOS,
    "comment": COMMENTS,
    "tweet": TWEETS,
}


@dataclass
class ToggleResult:
    active: bool
    record: Optional[dict] = None

    @property
    def state(self) -> str:
        return "active" if self.active else "inactive"


def flip(database: Database, collection_name: str, key: dict,
         attempts: int = TOGGLE_MAX_ATTEMPTS) -> ToggleResult:
    collection = database[collection_name]
    for attempt in range(1, attempts + 1):
        removed = collection.find_one_and_delete(key)
        if removed:
            return ToggleResult(False, removed)
        now = utcnow()
        doc = {**key, "createdAt": now, "updatedAt": now}
        try:
            doc["_id"] = collection.insert_one(doc).inserted_id
        except DuplicateKeyError:
            logger.info("Concurrent toggle on %s %s, retrying (attempt %d)", collection_name, key, attempt)
            continue
        return ToggleResult(True, doc)
    logger.error("Toggle on %s %s did not settle after %d attempts", collection_name, key, attempts)
    raise Unexpected("Could not toggle, please retry")


def toggle_like(database: Database, actor_id: ObjectId, kind: str, target_id) -> ToggleResult:
    collection_name = LIKE_TARGETS.get(kind)
    if collection_name is None:
        raise InvalidArgument(f"Cannot like a '{kind}'")
    target = objid(target_id, f"{kind} id")
    if not database[collection_name].find_one({"_id": target}, {"_id": 1}):
        raise NotFound(f"{kind.capitalize()} not found")

    key = Like(likedBy=actor_id, **{kind: target}).model_dump(exclude_none=True)
    result = flip(database, LIKES, key)
    logger.info("Like %s | user=%s %s=%s", result.state, actor_id, kind, target)
    return result


def count_likes(database: Database, kind: str, target_id: ObjectId) -> int:
    return database[LIKES].count_documents({kind: target_id})


def toggle_subscription(database: Database, subscriber_id: ObjectId, channel_id) -> ToggleResult:
    channel = objid(channel_id, "channel id")
    if channel == subscriber_id:
        raise InvalidArgument("Cannot subscribe to yourself")
    if not database[USERS].find_one({"_id": channel}, {"_id": 1}):
        raise NotFound("Channel not found")

    key = Subscription(subscriber=subscriber_id, channel=channel).model_dump()
    result = flip(database, SUBSCRIPTIONS, key)
    logger.info("Subscription %s | subscriber=%s channel=%s", result.state, subscriber_id, channel)
    return result


def count_subscribers(database: Database, channel_id: ObjectId) -> int:
    return database[SUBSCRIPTIONS].count_documents({"channel": channel_id})
