from datetime import datetime
from typing import Any

from bson import ObjectId

from errors import InvalidArgument


def utcnow() -> datetime:
    return datetime.utcnow()


def is_valid_id(value: Any) -> bool:
    if isinstance(value, ObjectId):
        return True
    return isinstance(value, str) and len(value) == 24 and ObjectId.is_valid(value)


def objid(id_str: Any, label: str = "id") -> ObjectId:
    """Parse a path/query identifier, rejecting anything that is not a 24-hex ObjectId."""
    if not is_valid_id(id_str):
        raise InvalidArgument(f"Invalid {label}")
    return ObjectId(id_str)


def to_jsonable(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return to_str_id(value)
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def to_str_id(doc):
    if not doc:
        return doc
    d = {**doc}
    if "_id" in d:
        d["id"] = d.pop("_id")
    # password hashes never leave the store
    d.pop("password", None)
    return {k: to_jsonable(v) for k, v in d.items()}


def format_duration(seconds: float) -> str:
    total = max(int(round(seconds or 0)), 0)
    minutes, secs = divmod(total, 60)
    return f"{minutes:02d}:{secs:02d}"
