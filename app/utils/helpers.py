"""
Helper utility functions
"""
from bson import ObjectId
from fastapi import HTTPException, status
from typing import Any, Dict, List
from datetime import date, datetime, time
import pytz
from app.config.settings import settings

DISPLAY_TZ = pytz.timezone(settings.TIMEZONE)

def serialize_doc(doc: Dict) -> Dict:
    """Convert MongoDB document to JSON-serializable format"""
    if doc is None:
        return None

    for key, value in doc.items():
        doc[key] = _serialize_value(value)

    return doc

def _serialize_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = pytz.utc.localize(value)
        return value.astimezone(DISPLAY_TZ).isoformat()
    if isinstance(value, dict):
        return serialize_doc(value)
    if isinstance(value, list):
        return [_serialize_value(item) for item in value]
    return value

def serialize_docs(docs: List[Dict]) -> List[Dict]:
    """Convert list of MongoDB documents to JSON-serializable format"""
    return [serialize_doc(doc) for doc in docs]

def to_naive_utc(value: Any) -> Any:
    """Normalise datetimes (and bare dates) to naive UTC for storage"""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(pytz.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    return value

def is_valid_object_id(value: Any) -> bool:
    """True when value is a 24-char hex string or an ObjectId"""
    if isinstance(value, ObjectId):
        return True
    return isinstance(value, str) and len(value) == 24 and ObjectId.is_valid(value)

def parse_object_id(value: str, label: str) -> ObjectId:
    """Parse a path identifier, rejecting malformed ones with a 400"""
    if not is_valid_object_id(value):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {label} ID format."
        )
    return ObjectId(value)

def canonical_vehicle_number(number: str) -> str:
    """Vehicle numbers are stored and matched in upper case"""
    return number.strip().upper()

def flatten_update(update_data: Dict, nested_keys: tuple) -> Dict:
    """
    Turn {"driver": {"phone": "x"}} into {"driver.phone": "x"} for the given
    embedded blocks so a partial update merges instead of replacing them.
    """
    flat = {}
    for key, value in update_data.items():
        if key in nested_keys and isinstance(value, dict):
            for sub_key, sub_value in value.items():
                if isinstance(sub_value, dict):
                    for leaf_key, leaf_value in sub_value.items():
                        flat[f"{key}.{sub_key}.{leaf_key}"] = leaf_value
                else:
                    flat[f"{key}.{sub_key}"] = sub_value
        else:
            flat[key] = value
    return flat
