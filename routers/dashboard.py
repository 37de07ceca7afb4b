from bson import ObjectId
from fastapi import APIRouter, Depends
from pymongo.database import Database

from database import USERS, get_db
from dependencies import get_current_user_id
from errors import NotFound
from queries import channel_videos
from schemas import ApiResponse
from stats import channel_stats

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats/{channelId}")
def get_channel_stats(channelId: str, database: Database = Depends(get_db),
                      user_id: ObjectId = Depends(get_current_user_id)):
    return ApiResponse(statusCode=200, data=channel_stats(database, channelId),
                       message="Channel stats fetched successfully")


@router.get("/videos/{channelId}")
def get_channel_videos(channelId: str, database: Database = Depends(get_db),
                       user_id: ObjectId = Depends(get_current_user_id)):
    query = channel_videos(channelId)
    if not database[USERS].find_one({"_id": query.match["owner"]}, {"_id": 1}):
        raise NotFound("Channel not found")
    return ApiResponse(statusCode=200, data=query.fetch(database), message="Channel videos fetched successfully")
