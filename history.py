import logging
from typing import List

from bson import ObjectId
from pymongo.database import Database

from database import USERS
from errors import NotFound
from helpers import to_jsonable
from queries import user_views, video_docs, video_view

logger = logging.getLogger(__name__)


def record_view(database: Database, user_id: ObjectId, video_id: ObjectId) -> bool:
    """Append video_id to the user's watch history unless already present anywhere in it."""
    # membership guard and append happen in one update
    result = database[USERS].update_one(
        {"_id": user_id, "watchHistory": {"$ne": video_id}},
        {"$push": {"watchHistory": video_id}},
    )
    appended = result.matched_count == 1
    if not appended and not database[USERS].find_one({"_id": user_id}, {"_id": 1}):
        raise NotFound("User not found")
    logger.debug("Watch history user=%s video=%s appended=%s", user_id, video_id, appended)
    return appended


def watch_history(database: Database, user_id: ObjectId) -> List[dict]:
    user = database[USERS].find_one({"_id": user_id}, {"watchHistory": 1})
    if not user:
        raise NotFound("User not found")
    history = user.get("watchHistory", [])
    videos = video_docs(database, history)
    owners = user_views(database, (v.get("owner") for v in videos.values()))
    return [
        to_jsonable(video_view(videos[vid], owners.get(videos[vid].get("owner"))))
        for vid in history
        if vid in videos
    ]
