import logging
from typing import Optional

from bson import ObjectId
from fastapi import Depends, Header
from pymongo.database import Database

from database import USERS, get_db
from errors import Forbidden, Unauthorized
from helpers import is_valid_id

logger = logging.getLogger(__name__)


def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
    database: Database = Depends(get_db),
) -> ObjectId:
    """Identity of the caller, already authenticated upstream and forwarded as a header."""
    if not x_user_id:
        raise Unauthorized("Missing X-User-Id header")
    if not is_valid_id(x_user_id):
        raise Unauthorized("Invalid user id")
    user_id = ObjectId(x_user_id)
    if not database[USERS].find_one({"_id": user_id}, {"_id": 1}):
        logger.info("Rejected unknown user %s", x_user_id)
        raise Unauthorized("Invalid user id")
    return user_id


def ensure_owner(owner_id: ObjectId, user_id: ObjectId, action: str) -> None:
    if owner_id != user_id:
        logger.info("Forbidden: user %s tried to %s", user_id, action)
        raise Forbidden(f"Unauthorized to {action}")
