import logging
from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, Depends
from pymongo import ReturnDocument
from pymongo.database import Database

from database import COMMENTS, LIKES, VIDEOS, create_document, get_db
from dependencies import ensure_owner, get_current_user_id
from errors import NotFound
from helpers import objid, to_str_id, utcnow
from pagination import paginate
from queries import comment_thread
from schemas import ApiResponse, Comment, CommentRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/comments", tags=["comments"])


def _owned_comment(database: Database, comment_id: str, user_id: ObjectId, action: str) -> dict:
    comment = database[COMMENTS].find_one({"_id": objid(comment_id, "comment id")})
    if not comment:
        raise NotFound("Comment not found")
    ensure_owner(comment.get("owner"), user_id, action)
    return comment


@router.get("/{videoId}")
def list_comments(
    videoId: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    database: Database = Depends(get_db),
    user_id: ObjectId = Depends(get_current_user_id),
):
    result = paginate(database, comment_thread(videoId), page, limit)
    return ApiResponse(statusCode=200, data=result.to_dict("comments"), message="Comments fetched successfully")


@router.post("/{videoId}", status_code=201)
def add_comment(
    videoId: str,
    payload: CommentRequest,
    database: Database = Depends(get_db),
    user_id: ObjectId = Depends(get_current_user_id),
):
    video = database[VIDEOS].find_one({"_id": objid(videoId, "video id")}, {"_id": 1})
    if not video:
        raise NotFound("Video not found")
    comment = create_document(database, COMMENTS, Comment(content=payload.content, video=video["_id"], owner=user_id))
    logger.info("Comment posted | id=%s video=%s", comment["_id"], video["_id"])
    return ApiResponse(statusCode=201, data=to_str_id(comment), message="Comment posted successfully")


@router.patch("/{commentId}")
def update_comment(
    commentId: str,
    payload: CommentRequest,
    database: Database = Depends(get_db),
    user_id: ObjectId = Depends(get_current_user_id),
):
    comment = _owned_comment(database, commentId, user_id, "update this comment")
    updated = database[COMMENTS].find_one_and_update(
        {"_id": comment["_id"]},
        {"$set": {"content": payload.content, "updatedAt": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    return ApiResponse(statusCode=200, data=to_str_id(updated), message="Comment updated successfully")


@router.delete("/{commentId}")
def delete_comment(
    commentId: str,
    database: Database = Depends(get_db),
    user_id: ObjectId = Depends(get_current_user_id),
):
    comment = _owned_comment(database, commentId, user_id, "delete this comment")
    database[COMMENTS].delete_one({"_id": comment["_id"]})
    database[LIKES].delete_many({"comment": comment["_id"]})
    logger.info("Comment deleted | id=%s", comment["_id"])
    return ApiResponse(statusCode=200, data=None, message="Comment deleted successfully")
