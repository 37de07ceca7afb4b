"""
Database Schemas for the video platform

Each document model maps to a MongoDB collection (see database.py for the
collection names). Reference fields hold ObjectIds; timestamps
(createdAt/updatedAt) are stamped by ``database.create_document``.

Collections:
- User -> users
- Video -> videos
- Comment -> comments
- Like -> likes
- Subscription -> subscriptions
- Playlist -> playlists
- Tweet -> tweets
"""

from typing import Any, List, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator


class Document(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)


class User(Document):
    username: str = Field(..., min_length=3, max_length=30)
    email: EmailStr
    fullName: str
    password: str = Field(..., description="Bcrypt hash")
    avatar: str = ""
    coverImage: str = ""
    watchHistory: List[ObjectId] = Field(default_factory=list)


class Video(Document):
    title: str
    description: str
    videoFile: str = Field(..., description="URL returned by the media store")
    thumbnail: str = ""
    duration: str = Field("00:00", description="mm:ss")
    views: int = Field(0, ge=0)
    owner: ObjectId
    isPublished: bool = True


class Comment(Document):
    content: str
    video: ObjectId
    owner: ObjectId


class Like(Document):
    likedBy: ObjectId
    video: Optional[ObjectId] = None
    comment: Optional[ObjectId] = None
    tweet: Optional[ObjectId] = None

    @model_validator(mode="after")
    def _exactly_one_target(self):
        targets = [t for t in (self.video, self.comment, self.tweet) if t is not None]
        if len(targets) != 1:
            raise ValueError("A like targets exactly one of video, comment or tweet")
        return self


class Subscription(Document):
    subscriber: ObjectId
    channel: ObjectId


class Playlist(Document):
    name: str
    description: str
    owner: ObjectId
    videos: List[ObjectId] = Field(default_factory=list)


class Tweet(Document):
    content: str
    tweetBy: ObjectId


# -------------------- Requests --------------------

class Request(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class RegisterRequest(Request):
    username: str = Field(..., min_length=3, max_length=30)
    email: EmailStr
    fullName: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)
    avatar: Optional[str] = None
    coverImage: Optional[str] = None


class UpdateAccountRequest(Request):
    fullName: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None


class ImageRequest(Request):
    url: str = Field(..., min_length=1, description="URL returned by the media store")


class PublishVideoRequest(Request):
    title: str = Field(..., min_length=1, max_length=120)
    description: str = Field(..., min_length=1)
    videoFile: str = Field(..., min_length=1)
    thumbnail: Optional[str] = None
    duration: float = Field(0, ge=0, description="Seconds, as reported by the media store")


class UpdateVideoRequest(Request):
    title: Optional[str] = Field(None, max_length=120)
    description: Optional[str] = None
    thumbnail: Optional[str] = None


class CommentRequest(Request):
    content: str = Field(..., min_length=1, max_length=1000)


class PlaylistRequest(Request):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)


class PlaylistUpdateRequest(Request):
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None


class TweetRequest(Request):
    content: str = Field(..., min_length=1, max_length=280)


# -------------------- Responses --------------------

class ApiResponse(BaseModel):
    statusCode: int = 200
    data: Any = None
    message: str = "Success"
    success: bool = True

    @model_validator(mode="after")
    def _derive_success(self):
        self.success = self.statusCode < 400
        return self
