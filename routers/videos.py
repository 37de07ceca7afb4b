import logging
from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, Depends
from pymongo import ReturnDocument
from pymongo.database import Database

from database import COMMENTS, LIKES, PLAYLISTS, USERS, VIDEOS, create_document, get_db
from dependencies import ensure_owner, get_current_user_id
from errors import InvalidArgument, NotFound
from helpers import format_duration, objid, to_str_id, utcnow
from history import record_view
from pagination import paginate
from queries import video_feed, watch_view
from schemas import ApiResponse, PublishVideoRequest, UpdateVideoRequest, Video

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/videos", tags=["videos"])


def _owned_video(database: Database, video_id: str, user_id: ObjectId, action: str) -> dict:
    video = database[VIDEOS].find_one({"_id": objid(video_id, "video id")})
    if not video:
        raise NotFound("Video not found")
    ensure_owner(video.get("owner"), user_id, action)
    return video


def purge_video(database: Database, video_id: ObjectId) -> None:
    """Remove everything that points at a deleted video."""
    comment_ids = [c["_id"] for c in database[COMMENTS].find({"video": video_id}, {"_id": 1})]
    likes = database[LIKES].delete_many({"$or": [{"video": video_id}, {"comment": {"$in": comment_ids}}]})
    database[COMMENTS].delete_many({"video": video_id})
    database[PLAYLISTS].update_many({"videos": video_id}, {"$pull": {"videos": video_id}})
    database[USERS].update_many({"watchHistory": video_id}, {"$pull": {"watchHistory": video_id}})
    logger.info("Purged video %s: %d comments, %d likes", video_id, len(comment_ids), likes.deleted_count)


@router.get("")
def list_videos(
    query: Optional[str] = None,
    sortBy: Optional[str] = None,
    sortType: Optional[str] = None,
    userID: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    database: Database = Depends(get_db),
    user_id: ObjectId = Depends(get_current_user_id),
):
    result = paginate(database, video_feed(query, sortBy, sortType, userID), page, limit)
    return ApiResponse(statusCode=200, data=result.to_dict("videos"), message="Videos fetched successfully")


@router.post("/publishVideo", status_code=201)
def publish_video(
    payload: PublishVideoRequest,
    database: Database = Depends(get_db),
    user_id: ObjectId = Depends(get_current_user_id),
):
    video = create_document(database, VIDEOS, Video(
        title=payload.title,
        description=payload.description,
        videoFile=payload.videoFile,
        thumbnail=payload.thumbnail or "",
        duration=format_duration(payload.duration),
        owner=user_id,
    ))
    logger.info("Video published | id=%s owner=%s", video["_id"], user_id)
    return ApiResponse(statusCode=201, data=to_str_id(video), message="Video published successfully")


@router.get("/watch/{videoID}")
def watch_video(
    videoID: str,
    database: Database = Depends(get_db),
    user_id: ObjectId = Depends(get_current_user_id),
):
    video = database[VIDEOS].find_one_and_update(
        {"_id": objid(videoID, "video id")},
        {"$inc": {"views": 1}},
        return_document=ReturnDocument.AFTER,
    )
    if not video:
        raise NotFound("Video not found")
    record_view(database, user_id, video["_id"])
    return ApiResponse(statusCode=200, data=watch_view(database, video, user_id), message="Video found")


@router.patch("/updateVideoData/{videoID}")
def update_video(
    videoID: str,
    payload: UpdateVideoRequest,
    database: Database = Depends(get_db),
    user_id: ObjectId = Depends(get_current_user_id),
):
    fields = {k: v for k, v in payload.model_dump().items() if v}
    if not fields:
        raise InvalidArgument("At least one field is required")
    video = _owned_video(database, videoID, user_id, "update this video")
    fields["updatedAt"] = utcnow()
    updated = database[VIDEOS].find_one_and_update(
        {"_id": video["_id"]}, {"$set": fields}, return_document=ReturnDocument.AFTER
    )
    logger.info("Video updated | id=%s fields=%s", video["_id"], sorted(fields))
    return ApiResponse(statusCode=200, data=to_str_id(updated), message="Video updated successfully")


@router.patch("/togglePublish/{videoID}")
def toggle_publish_status(
    videoID: str,
    database: Database = Depends(get_db),
    user_id: ObjectId = Depends(get_current_user_id),
):
    video = _owned_video(database, videoID, user_id, "change this video")
    updated = database[VIDEOS].find_one_and_update(
        {"_id": video["_id"]},
        {"$set": {"isPublished": not video.get("isPublished", True), "updatedAt": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    return ApiResponse(statusCode=200, data=to_str_id(updated), message="Video status toggled successfully")


@router.delete("/deleteVideo/{videoID}")
def delete_video(
    videoID: str,
    database: Database = Depends(get_db),
    user_id: ObjectId = Depends(get_current_user_id),
):
    video = _owned_video(database, videoID, user_id, "delete this video")
    database[VIDEOS].delete_one({"_id": video["_id"]})
    purge_video(database, video["_id"])
    logger.info("Video deleted | id=%s", video["_id"])
    return ApiResponse(statusCode=200, data=None, message="Video deleted successfully")
