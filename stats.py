"""
Channel rollups for the dashboard.

Totals cover all time; the daily series cover the trailing window
(``STATS_WINDOW_DAYS``) keyed by UTC calendar date, ascending. Days with
no activity are left out, so consecutive entries are not necessarily
consecutive dates.

``videosLike`` counts likes the channel user has *given* to videos, not
likes received on the channel's videos.
"""

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from bson import ObjectId
from pymongo.database import Database

from config import STATS_WINDOW_DAYS
from database import COMMENTS, LIKES, SUBSCRIPTIONS, USERS, VIDEOS
from errors import NotFound
from helpers import objid, utcnow

logger = logging.getLogger(__name__)


def _totals(database: Database, channel: ObjectId) -> Dict[str, int]:
    rows = list(database[VIDEOS].aggregate([
        {"$match": {"owner": channel}},
        {"$group": {"_id": None, "totalVideos": {"$sum": 1}, "totalViews": {"$sum": "$views"}}},
    ]))
    if not rows:
        return {"totalVideos": 0, "totalViews": 0}
    return {"totalVideos": rows[0]["totalVideos"], "totalViews": rows[0]["totalViews"]}


def daily_series(database: Database, collection_name: str, match: dict, since: datetime,
                 label: str, weight: Optional[str] = None) -> List[dict]:
    """Bucket documents created since ``since`` by day; count them, or sum ``weight`` per day."""
    buckets = Counter()
    projection = {"createdAt": 1, weight: 1} if weight else {"createdAt": 1}
    for doc in database[collection_name].find({**match, "createdAt": {"$gte": since}}, projection):
        day = doc["createdAt"].date().isoformat()
        buckets[day] += (doc.get(weight) or 0) if weight else 1
    return [{"date": day, label: buckets[day]} for day in sorted(buckets)]


def channel_stats(database: Database, channel_id, now: Optional[datetime] = None) -> dict:
    channel = objid(channel_id, "channel id")
    if not database[USERS].find_one({"_id": channel}, {"_id": 1}):
        raise NotFound("Channel not found")
    since = (now or utcnow()) - timedelta(days=STATS_WINDOW_DAYS)

    stats = _totals(database, channel)
    stats["videosLike"] = database[LIKES].count_documents({"likedBy": channel, "video": {"$exists": True}})
    stats["videosComments"] = database[COMMENTS].count_documents({"owner": channel})
    stats["channelSubscribers"] = database[SUBSCRIPTIONS].count_documents({"channel": channel})
    stats["channelSubscribing"] = database[SUBSCRIPTIONS].count_documents({"subscriber": channel})

    stats["channelDailyViews"] = daily_series(database, VIDEOS, {"owner": channel}, since, "views", weight="views")
    stats["channelDailyLikes"] = daily_series(database, LIKES, {"likedBy": channel}, since, "likes")
    stats["channelDailyComments"] = daily_series(database, COMMENTS, {"owner": channel}, since, "comments")
    stats["channelDailySubscribers"] = daily_series(database, SUBSCRIPTIONS, {"channel": channel}, since,
                                                    "subscribers")
    logger.debug("Stats for channel %s: %d videos, %d views", channel, stats["totalVideos"], stats["totalViews"])
    return stats
