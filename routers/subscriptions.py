from bson import ObjectId
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pymongo.database import Database

from database import get_db
from dependencies import get_current_user_id
from queries import channel_subscribers, subscribed_channels
from schemas import ApiResponse
from toggles import count_subscribers, toggle_subscription

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


@router.post("/channel/{channelID}")
def toggle_channel_subscription(channelID: str, database: Database = Depends(get_db),
                                user_id: ObjectId = Depends(get_current_user_id)):
    result = toggle_subscription(database, user_id, channelID)
    status = 201 if result.active else 200
    body = ApiResponse(
        statusCode=status,
        data={
            "isSubscribed": result.active,
            "subscribersCount": count_subscribers(database, result.record["channel"]),
        },
        message="Channel subscribed successfully" if result.active else "Channel unsubscribed successfully",
    )
    return JSONResponse(status_code=status, content=body.model_dump())


@router.get("/channel/{userID}")
def get_subscribed_channels(userID: str, database: Database = Depends(get_db),
                            user_id: ObjectId = Depends(get_current_user_id)):
    return ApiResponse(statusCode=200, data=subscribed_channels(database, userID),
                       message="Subscribed channels fetched")


@router.get("/user/{channelID}")
def get_channel_subscribers(channelID: str, database: Database = Depends(get_db),
                            user_id: ObjectId = Depends(get_current_user_id)):
    return ApiResponse(statusCode=200, data=channel_subscribers(database, channelID),
                       message="Subscribers fetched")
