import logging

from bson import ObjectId
from fastapi import APIRouter, Depends
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import PLAYLISTS, VIDEOS, create_document, get_db
from dependencies import ensure_owner, get_current_user_id
from errors import Conflict, InvalidArgument, NotFound
from helpers import objid, to_str_id, utcnow
from queries import playlist_detail, user_playlists
from schemas import ApiResponse, Playlist, PlaylistRequest, PlaylistUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/playlists", tags=["playlists"])

DUPLICATE_NAME = "A playlist with the same name already exists"


def _owned_playlist(database: Database, playlist_id: ObjectId, user_id: ObjectId, action: str) -> dict:
    playlist = database[PLAYLISTS].find_one({"_id": playlist_id})
    if not playlist:
        raise NotFound("Playlist not found")
    ensure_owner(playlist.get("owner"), user_id, action)
    return playlist


@router.post("", status_code=201)
def create_playlist(payload: PlaylistRequest, database: Database = Depends(get_db),
                    user_id: ObjectId = Depends(get_current_user_id)):
    if database[PLAYLISTS].find_one({"name": payload.name, "owner": user_id}, {"_id": 1}):
        raise Conflict(DUPLICATE_NAME)
    try:
        playlist = create_document(database, PLAYLISTS, Playlist(
            name=payload.name, description=payload.description, owner=user_id,
        ))
    except DuplicateKeyError:
        raise Conflict(DUPLICATE_NAME)
    logger.info("Playlist created | id=%s owner=%s", playlist["_id"], user_id)
    return ApiResponse(statusCode=201, data=to_str_id(playlist), message="Playlist created successfully")


@router.get("/user/{userId}")
def get_user_playlists(userId: str, database: Database = Depends(get_db),
                       user_id: ObjectId = Depends(get_current_user_id)):
    return ApiResponse(statusCode=200, data=user_playlists(database, userId), message="Playlists fetched successfully")


@router.get("/{playlistId}")
def get_playlist(playlistId: str, database: Database = Depends(get_db),
                 user_id: ObjectId = Depends(get_current_user_id)):
    return ApiResponse(statusCode=200, data=playlist_detail(database, playlistId), message="Playlist fetched")


@router.patch("/add/{videoId}/{playlistId}")
def add_video_to_playlist(videoId: str, playlistId: str, database: Database = Depends(get_db),
                          user_id: ObjectId = Depends(get_current_user_id)):
    pid = objid(playlistId, "playlist id")
    vid = objid(videoId, "video id")
    if not database[PLAYLISTS].find_one({"_id": pid}, {"_id": 1}):
        raise NotFound("Playlist not found")
    if not database[VIDEOS].find_one({"_id": vid}, {"_id": 1}):
        raise NotFound("Video not found")
    _owned_playlist(database, pid, user_id, "add video to this playlist")

    # guarded push, so a concurrent add of the same video cannot duplicate it
    playlist = database[PLAYLISTS].find_one_and_update(
        {"_id": pid, "owner": user_id, "videos": {"$ne": vid}},
        {"$push": {"videos": vid}, "$set": {"updatedAt": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if not playlist:
        raise Conflict("Video already exists in this playlist")
    logger.info("Playlist %s: added video %s", pid, vid)
    return ApiResponse(statusCode=200, data=to_str_id(playlist), message="Video added to playlist")


@router.patch("/remove/{videoId}/{playlistId}")
def remove_video_from_playlist(videoId: str, playlistId: str, database: Database = Depends(get_db),
                               user_id: ObjectId = Depends(get_current_user_id)):
    pid = objid(playlistId, "playlist id")
    vid = objid(videoId, "video id")
    _owned_playlist(database, pid, user_id, "remove video from this playlist")

    playlist = database[PLAYLISTS].find_one_and_update(
        {"_id": pid, "owner": user_id, "videos": vid},
        {"$pull": {"videos": vid}, "$set": {"updatedAt": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if not playlist:
        raise Conflict("Video not found in this playlist")
    logger.info("Playlist %s: removed video %s", pid, vid)
    return ApiResponse(statusCode=200, data=to_str_id(playlist), message="Video removed from playlist")


@router.patch("/{playlistId}")
def update_playlist(playlistId: str, payload: PlaylistUpdateRequest, database: Database = Depends(get_db),
                    user_id: ObjectId = Depends(get_current_user_id)):
    pid = objid(playlistId, "playlist id")
    fields = {k: v for k, v in payload.model_dump().items() if v}
    if not fields:
        raise InvalidArgument("At least one field is required")
    _owned_playlist(database, pid, user_id, "update this playlist")
    if "name" in fields and database[PLAYLISTS].find_one(
            {"name": fields["name"], "owner": user_id, "_id": {"$ne": pid}}, {"_id": 1}):
        raise Conflict(DUPLICATE_NAME)
    fields["updatedAt"] = utcnow()
    try:
        playlist = database[PLAYLISTS].find_one_and_update(
            {"_id": pid}, {"$set": fields}, return_document=ReturnDocument.AFTER
        )
    except DuplicateKeyError:
        raise Conflict(DUPLICATE_NAME)
    return ApiResponse(statusCode=200, data=to_str_id(playlist), message="Playlist updated successfully")


@router.delete("/{playlistId}")
def delete_playlist(playlistId: str, database: Database = Depends(get_db),
                    user_id: ObjectId = Depends(get_current_user_id)):
    playlist = _owned_playlist(database, objid(playlistId, "playlist id"), user_id, "delete this playlist")
    database[PLAYLISTS].delete_one({"_id": playlist["_id"]})
    logger.info("Playlist deleted | id=%s", playlist["_id"])
    return ApiResponse(statusCode=200, data=None, message="Playlist deleted successfully")
