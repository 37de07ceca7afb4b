from bson import ObjectId
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pymongo.database import Database

from database import get_db
from dependencies import get_current_user_id
from queries import liked_videos
from schemas import ApiResponse
from toggles import count_likes, toggle_like

router = APIRouter(prefix="/likes", tags=["likes"])


def _toggle(database: Database, user_id: ObjectId, kind: str, target_id: str) -> JSONResponse:
    result = toggle_like(database, user_id, kind, target_id)
    target = result.record[kind]
    status = 201 if result.active else 200
    verb = "liked" if result.active else "unliked"
    body = ApiResponse(
        statusCode=status,
        data={"isLiked": result.active, "likesCount": count_likes(database, kind, target)},
        message=f"{kind.capitalize()} {verb} successfully",
    )
    return JSONResponse(status_code=status, content=body.model_dump())


@router.post("/video/{videoId}")
def toggle_video_like(videoId: str, database: Database = Depends(get_db),
                      user_id: ObjectId = Depends(get_current_user_id)):
    return _toggle(database, user_id, "video", videoId)


@router.post("/comment/{commentId}")
def toggle_comment_like(commentId: str, database: Database = Depends(get_db),
                        user_id: ObjectId = Depends(get_current_user_id)):
    return _toggle(database, user_id, "comment", commentId)


@router.post("/tweet/{tweetId}")
def toggle_tweet_like(tweetId: str, database: Database = Depends(get_db),
                      user_id: ObjectId = Depends(get_current_user_id)):
    return _toggle(database, user_id, "tweet", tweetId)


@router.get("/videos")
def get_liked_videos(database: Database = Depends(get_db), user_id: ObjectId = Depends(get_current_user_id)):
    return ApiResponse(statusCode=200, data=liked_videos(database, user_id), message="Liked videos fetched")
