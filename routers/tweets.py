import logging

from bson import ObjectId
from fastapi import APIRouter, Depends
from pymongo import ReturnDocument
from pymongo.database import Database

from database import LIKES, TWEETS, USERS, create_document, get_db
from dependencies import ensure_owner, get_current_user_id
from errors import NotFound
from helpers import objid, to_str_id, utcnow
from queries import user_tweets
from schemas import ApiResponse, Tweet, TweetRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tweets", tags=["tweets"])


def _owned_tweet(database: Database, tweet_id: str, user_id: ObjectId, action: str) -> dict:
    tweet = database[TWEETS].find_one({"_id": objid(tweet_id, "tweet id")})
    if not tweet:
        raise NotFound("Tweet not found")
    ensure_owner(tweet.get("tweetBy"), user_id, action)
    return tweet


@router.post("", status_code=201)
def create_tweet(payload: TweetRequest, database: Database = Depends(get_db),
                 user_id: ObjectId = Depends(get_current_user_id)):
    tweet = create_document(database, TWEETS, Tweet(content=payload.content, tweetBy=user_id))
    logger.info("Tweet created | id=%s by=%s", tweet["_id"], user_id)
    return ApiResponse(statusCode=201, data=to_str_id(tweet), message="Tweet created successfully")


@router.get("/user/{userId}")
def get_user_tweets(userId: str, database: Database = Depends(get_db),
                    user_id: ObjectId = Depends(get_current_user_id)):
    query = user_tweets(userId)
    if not database[USERS].find_one({"_id": query.match["tweetBy"]}, {"_id": 1}):
        raise NotFound("User not found")
    return ApiResponse(statusCode=200, data=query.fetch(database), message="User tweets fetched")


@router.patch("/{tweetId}")
def update_tweet(tweetId: str, payload: TweetRequest, database: Database = Depends(get_db),
                 user_id: ObjectId = Depends(get_current_user_id)):
    tweet = _owned_tweet(database, tweetId, user_id, "update this tweet")
    updated = database[TWEETS].find_one_and_update(
        {"_id": tweet["_id"]},
        {"$set": {"content": payload.content, "updatedAt": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    return ApiResponse(statusCode=200, data=to_str_id(updated), message="Tweet updated successfully")


@router.delete("/{tweetId}")
def delete_tweet(tweetId: str, database: Database = Depends(get_db),
                 user_id: ObjectId = Depends(get_current_user_id)):
    tweet = _owned_tweet(database, tweetId, user_id, "delete this tweet")
    database[TWEETS].delete_one({"_id": tweet["_id"]})
    database[LIKES].delete_many({"tweet": tweet["_id"]})
    logger.info("Tweet deleted | id=%s", tweet["_id"])
    return ApiResponse(statusCode=200, data=None, message="Tweet deleted successfully")
