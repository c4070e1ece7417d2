"""
Consumer resolution shared by the booking flow.

A booking names its customer by phone. The consumer with that phone is
returned unchanged when it exists (the submitted name/email do not
overwrite it); otherwise one is created from the submitted details.
"""
import logging
from typing import Dict
from fastapi import HTTPException, status
from pymongo.errors import DuplicateKeyError

from app.config.database import Collections
from app.database.db_operations import db_ops
from app.models.consumer import RUNNING_TOTALS

logger = logging.getLogger(__name__)


async def find_or_create_consumer(name: str, phone: str, email: str) -> Dict:
    """
    Resolve a consumer by phone with a single conditional insert.

    The unique index on consumers.phone turns a concurrent first booking for
    the same phone into a DuplicateKeyError; the loser re-reads the winner's
    record. A DuplicateKeyError that is not about the phone (the email is
    already held by a consumer with another phone) is a conflict.
    """
    defaults = {
        "name": name,
        "phone": phone,
        "email": email,
        "address": "",
        "company": "",
        "type": "new",
        **RUNNING_TOTALS,
    }
    try:
        consumer = await db_ops.find_or_create(Collections.CONSUMERS, {"phone": phone}, defaults)
    except DuplicateKeyError as exc:
        consumer = await db_ops.get_one(Collections.CONSUMERS, {"phone": phone})
        if consumer is None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={
                    "message": "A consumer with this email already exists under a different phone number.",
                    "error": str(exc),
                },
            )
        return consumer

    logger.debug("Resolved consumer %s for phone %s", consumer["_id"], phone)
    return consumer
