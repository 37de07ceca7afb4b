"""
Listing queries over the social graph.

A listing is described by a ``Query``: the collection to read, a filter, a
fully deterministic sort and an optional join step. Joins are explicit
foreign-key lookups: the ids referenced by a batch of documents are read
with one ``$in`` query and merged into reduced views, so no document ever
embeds a live reference to another.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database

from database import COMMENTS, LIKES, PLAYLISTS, SUBSCRIPTIONS, TWEETS, USERS, VIDEOS, get_documents
from errors import InvalidArgument, NotFound
from helpers import objid, to_jsonable

logger = logging.getLogger(__name__)

Join = Callable[[Database, List[dict]], List[dict]]

# duration is stored as "mm:ss" text and would not order numerically
VIDEO_SORT_FIELDS = {"createdAt", "updatedAt", "views", "title"}
SORT_DIRECTIONS = {"asc": ASCENDING, "desc": DESCENDING}

OWNER_FIELDS = ("username", "fullName", "avatar")
VIDEO_SUMMARY_FIELDS = ("title", "description", "thumbnail", "views", "duration")
VIDEO_FIELDS = ("title", "description", "videoFile", "thumbnail", "views", "duration",
                "isPublished", "createdAt", "updatedAt")


@dataclass
class Query:
    collection: str
    match: dict = field(default_factory=dict)
    sort: List[Tuple[str, int]] = field(default_factory=list)
    join: Optional[Join] = None

    def count(self, database: Database) -> int:
        return database[self.collection].count_documents(self.match)

    def fetch(self, database: Database, skip: int = 0, limit: int = 0) -> List[dict]:
        cursor = database[self.collection].find(self.match).sort(stable_sort(*self.sort))
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        docs = list(cursor)
        return self.join(database, docs) if self.join else docs


def stable_sort(*keys: Tuple[str, int]) -> List[Tuple[str, int]]:
    """Append creation time then id as tie-breakers so windows never overlap."""
    sort = list(keys)
    seen = {k for k, _ in sort}
    for tie in (("createdAt", ASCENDING), ("_id", ASCENDING)):
        if tie[0] not in seen:
            sort.append(tie)
    return sort


# -------------------- Lookups --------------------

def _project(doc: dict, fields: Iterable[str]) -> dict:
    view = {"id": doc["_id"]}
    for name in fields:
        view[name] = doc.get(name)
    return view


def subscriber_counts(database: Database, channel_ids: Iterable[ObjectId]) -> Dict[ObjectId, int]:
    ids = list(set(channel_ids))
    if not ids:
        return {}
    rows = database[SUBSCRIPTIONS].aggregate([
        {"$match": {"channel": {"$in": ids}}},
        {"$group": {"_id": "$channel", "count": {"$sum": 1}}},
    ])
    counts = {cid: 0 for cid in ids}
    counts.update({row["_id"]: row["count"] for row in rows})
    return counts


def user_views(database: Database, user_ids: Iterable[ObjectId], fields=OWNER_FIELDS,
               with_subscribers: bool = False) -> Dict[ObjectId, dict]:
    ids = list(set(i for i in user_ids if i is not None))
    if not ids:
        return {}
    users = {u["_id"]: _project(u, fields) for u in database[USERS].find({"_id": {"$in": ids}})}
    if with_subscribers:
        counts = subscriber_counts(database, users.keys())
        for uid, view in users.items():
            view["subscribersCount"] = counts[uid]
    return users


def video_docs(database: Database, video_ids: Iterable[ObjectId]) -> Dict[ObjectId, dict]:
    ids = list(set(video_ids))
    if not ids:
        return {}
    return {v["_id"]: v for v in database[VIDEOS].find({"_id": {"$in": ids}})}


def video_view(video: dict, owner: Optional[dict]) -> dict:
    view = _project(video, VIDEO_FIELDS)
    view["owner"] = owner
    return view


def _join_video_owners(database: Database, videos: List[dict]) -> List[dict]:
    owners = user_views(database, (v.get("owner") for v in videos), with_subscribers=True)
    return [to_jsonable(video_view(v, owners.get(v.get("owner")))) for v in videos]


# -------------------- Listings --------------------

def video_feed(query: Optional[str] = None, sort_by: Optional[str] = None,
               sort_type: Optional[str] = None, user_id: Optional[str] = None) -> Query:
    match = {}
    if query:
        pattern = re.escape(query)
        match["$or"] = [
            {"title": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
        ]
    if user_id:
        match["owner"] = objid(user_id, "user id")

    sort_by = sort_by or "createdAt"
    if sort_by not in VIDEO_SORT_FIELDS:
        raise InvalidArgument(f"Cannot sort videos by '{sort_by}'")
    sort_type = (sort_type or "desc").lower()
    if sort_type not in SORT_DIRECTIONS:
        raise InvalidArgument("sortType must be 'asc' or 'desc'")

    logger.debug("Video feed match=%s sort=%s %s", match, sort_by, sort_type)
    return Query(VIDEOS, match, [(sort_by, SORT_DIRECTIONS[sort_type])], _join_video_owners)


def channel_videos(channel_id) -> Query:
    return Query(VIDEOS, {"owner": objid(channel_id, "channel id")},
                 [("createdAt", DESCENDING)], _join_video_owners)


def _join_commenters(database: Database, comments: List[dict]) -> List[dict]:
    owners = user_views(database, (c.get("owner") for c in comments), fields=("avatar", "username"))
    return [
        to_jsonable({
            "id": c["_id"],
            "content": c.get("content"),
            "createdAt": c.get("createdAt"),
            "updatedAt": c.get("updatedAt"),
            "owner": owners.get(c.get("owner")),
        })
        for c in comments
    ]


def comment_thread(video_id) -> Query:
    return Query(COMMENTS, {"video": objid(video_id, "video id")},
                 [("createdAt", DESCENDING)], _join_commenters)


def _join_tweet_authors(database: Database, tweets: List[dict]) -> List[dict]:
    authors = user_views(database, (t.get("tweetBy") for t in tweets), fields=("username", "avatar"))
    return [
        to_jsonable({
            "id": t["_id"],
            "content": t.get("content"),
            "createdAt": t.get("createdAt"),
            "updatedAt": t.get("updatedAt"),
            "tweetBy": authors.get(t.get("tweetBy")),
        })
        for t in tweets
    ]


def user_tweets(user_id) -> Query:
    return Query(TWEETS, {"tweetBy": objid(user_id, "user id")},
                 [("createdAt", DESCENDING)], _join_tweet_authors)


def playlist_detail(database: Database, playlist_id) -> dict:
    playlist = database[PLAYLISTS].find_one({"_id": objid(playlist_id, "playlist id")})
    if not playlist:
        raise NotFound("Playlist not found")
    stored_ids = playlist.get("videos", [])
    owners = user_views(database, [playlist.get("owner")])
    videos = video_docs(database, stored_ids)
    return to_jsonable({
        "id": playlist["_id"],
        "name": playlist.get("name"),
        "description": playlist.get("description"),
        "createdAt": playlist.get("createdAt"),
        "updatedAt": playlist.get("updatedAt"),
        "owner": owners.get(playlist.get("owner")),
        # stored order, ids of deleted videos are skipped
        "videos": [_project(videos[vid], VIDEO_SUMMARY_FIELDS) for vid in stored_ids if vid in videos],
        "videosCount": len(stored_ids),
    })


def user_playlists(database: Database, user_id) -> List[dict]:
    uid = objid(user_id, "user id")
    if not database[USERS].find_one({"_id": uid}, {"_id": 1}):
        raise NotFound("User not found")
    playlists = get_documents(database, PLAYLISTS, {"owner": uid}, sort=stable_sort(("createdAt", DESCENDING)))
    return [
        to_jsonable({
            "id": p["_id"],
            "name": p.get("name"),
            "description": p.get("description"),
            "videosCount": len(p.get("videos", [])),
            "createdAt": p.get("createdAt"),
        })
        for p in playlists
    ]


def liked_videos(database: Database, user_id) -> List[dict]:
    likes = list(
        database[LIKES]
        .find({"likedBy": objid(user_id, "user id"), "video": {"$exists": True}})
        .sort(stable_sort(("createdAt", DESCENDING)))
    )
    videos = video_docs(database, (like["video"] for like in likes))
    owners = user_views(database, (v.get("owner") for v in videos.values()), fields=("fullName",))
    out = []
    for like in likes:
        video = videos.get(like["video"])
        if not video:
            continue
        view = _project(video, ("title", "thumbnail", "views", "duration", "createdAt"))
        view["owner"] = owners.get(video.get("owner"))
        view["likedAt"] = like.get("createdAt")
        out.append(to_jsonable(view))
    return out


def _subscription_users(database: Database, match: dict, user_field: str) -> List[dict]:
    subs = list(database[SUBSCRIPTIONS].find(match).sort(stable_sort(("createdAt", DESCENDING))))
    users = user_views(database, (s[user_field] for s in subs))
    return [
        to_jsonable({user_field: users[s[user_field]], "subscribedAt": s.get("createdAt")})
        for s in subs
        if s[user_field] in users
    ]


def channel_subscribers(database: Database, channel_id) -> List[dict]:
    return _subscription_users(database, {"channel": objid(channel_id, "channel id")}, "subscriber")


def subscribed_channels(database: Database, user_id) -> List[dict]:
    return _subscription_users(database, {"subscriber": objid(user_id, "user id")}, "channel")


def watch_view(database: Database, video: dict, viewer_id: ObjectId) -> dict:
    """Single-video view for the watch page, with the caller's engagement state."""
    owner_id = video.get("owner")
    owner = user_views(database, [owner_id], with_subscribers=True).get(owner_id)
    view = video_view(video, owner)
    view["isSubscribed"] = database[SUBSCRIPTIONS].find_one(
        {"channel": owner_id, "subscriber": viewer_id}) is not None
    view["likesCount"] = database[LIKES].count_documents({"video": video["_id"]})
    view["isLiked"] = database[LIKES].find_one(
        {"video": video["_id"], "likedBy": viewer_id}) is not None
    return to_jsonable(view)
