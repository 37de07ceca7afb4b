import logging

from bson import ObjectId
from fastapi import APIRouter, Depends
from passlib.context import CryptContext
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import SUBSCRIPTIONS, USERS, create_document, get_db
from dependencies import get_current_user_id
from errors import Conflict, InvalidArgument, NotFound
from helpers import to_str_id, utcnow
from history import watch_history
from schemas import ApiResponse, ImageRequest, RegisterRequest, UpdateAccountRequest, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


@router.post("/register", status_code=201)
def register(payload: RegisterRequest, database: Database = Depends(get_db)):
    username = payload.username.lower()
    if database[USERS].find_one({"$or": [{"email": payload.email}, {"username": username}]}, {"_id": 1}):
        raise Conflict("User with email or username already exists")
    try:
        user = create_document(database, USERS, User(
            username=username,
            email=payload.email,
            fullName=payload.fullName,
            password=hash_password(payload.password),
            avatar=payload.avatar or "",
            coverImage=payload.coverImage or "",
        ))
    except DuplicateKeyError:
        raise Conflict("User with email or username already exists")
    logger.info("User registered | id=%s username=%s", user["_id"], username)
    return ApiResponse(statusCode=201, data=to_str_id(user), message="User registered successfully")


@router.get("/current")
def get_current_user(database: Database = Depends(get_db), user_id: ObjectId = Depends(get_current_user_id)):
    user = database[USERS].find_one({"_id": user_id}, {"password": 0})
    return ApiResponse(statusCode=200, data=to_str_id(user), message="Current user fetched")


@router.get("/channel/{username}")
def get_channel_profile(username: str, database: Database = Depends(get_db),
                        user_id: ObjectId = Depends(get_current_user_id)):
    channel = database[USERS].find_one({"username": username.strip().lower()}, {"password": 0, "watchHistory": 0})
    if not channel:
        raise NotFound("Channel does not exist")
    profile = to_str_id(channel)
    profile["subscribersCount"] = database[SUBSCRIPTIONS].count_documents({"channel": channel["_id"]})
    profile["channelsSubscribedToCount"] = database[SUBSCRIPTIONS].count_documents({"subscriber": channel["_id"]})
    profile["isSubscribed"] = database[SUBSCRIPTIONS].find_one(
        {"channel": channel["_id"], "subscriber": user_id}) is not None
    return ApiResponse(statusCode=200, data=profile, message="Channel fetched successfully")


@router.get("/history")
def get_watch_history(database: Database = Depends(get_db), user_id: ObjectId = Depends(get_current_user_id)):
    return ApiResponse(statusCode=200, data=watch_history(database, user_id), message="Watch history fetched")


def _set_profile_fields(database: Database, user_id: ObjectId, fields: dict) -> dict:
    fields["updatedAt"] = utcnow()
    try:
        user = database[USERS].find_one_and_update(
            {"_id": user_id}, {"$set": fields}, projection={"password": 0},
            return_document=ReturnDocument.AFTER,
        )
    except DuplicateKeyError:
        raise Conflict("Email is already in use")
    if not user:
        raise NotFound("User not found")
    return to_str_id(user)


@router.patch("/updateAccount")
def update_account(payload: UpdateAccountRequest, database: Database = Depends(get_db),
                   user_id: ObjectId = Depends(get_current_user_id)):
    fields = {k: v for k, v in payload.model_dump().items() if v}
    if not fields:
        raise InvalidArgument("At least one field is required")
    if "email" in fields and database[USERS].find_one(
            {"email": fields["email"], "_id": {"$ne": user_id}}, {"_id": 1}):
        raise Conflict("Email is already in use")
    user = _set_profile_fields(database, user_id, fields)
    logger.info("Account updated | id=%s fields=%s", user_id, sorted(fields))
    return ApiResponse(statusCode=200, data=user, message="Account details updated successfully")


@router.patch("/avatar")
def update_avatar(payload: ImageRequest, database: Database = Depends(get_db),
                  user_id: ObjectId = Depends(get_current_user_id)):
    user = _set_profile_fields(database, user_id, {"avatar": payload.url})
    return ApiResponse(statusCode=200, data=user, message="Avatar updated successfully")


@router.patch("/coverImage")
def update_cover_image(payload: ImageRequest, database: Database = Depends(get_db),
                       user_id: ObjectId = Depends(get_current_user_id)):
    user = _set_profile_fields(database, user_id, {"coverImage": payload.url})
    return ApiResponse(statusCode=200, data=user, message="Cover image updated successfully")
