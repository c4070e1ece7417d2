"""
Consumer routes
"""
import logging
from fastapi import APIRouter, HTTPException, status
from pymongo.errors import DuplicateKeyError
from app.models.consumer import ConsumerCreate, ConsumerUpdate, RUNNING_TOTALS
from app.database.db_operations import db_ops
from app.config.database import Collections
from app.utils.helpers import serialize_doc, serialize_docs, parse_object_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/consumers", tags=["Consumers"])


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_consumer(consumer: ConsumerCreate):
    """Create a new consumer"""
    existing = await db_ops.get_one(Collections.CONSUMERS, {"phone": consumer.phone})
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A consumer with this phone number already exists."
        )

    consumer_dict = consumer.model_dump()
    consumer_dict.update(RUNNING_TOTALS)
    try:
        created = await db_ops.create(Collections.CONSUMERS, consumer_dict)
    except DuplicateKeyError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": "Duplicate key error. Check unique fields like phone/email.",
                "error": str(e)
            }
        )

    logger.info("👤 Consumer %s created", created["phone"])
    return serialize_doc(created)

@router.get("/")
async def get_consumers():
    """Get all consumers"""
    consumers = await db_ops.get_all(Collections.CONSUMERS)
    return serialize_docs(consumers)

@router.get("/{consumer_id}")
async def get_consumer(consumer_id: str):
    """Get consumer by ID"""
    oid = parse_object_id(consumer_id, "consumer")
    consumer = await db_ops.get_by_id(Collections.CONSUMERS, oid)
    if not consumer:
        raise HTTPException(status_code=404, detail="Consumer not found.")
    return serialize_doc(consumer)

@router.put("/{consumer_id}")
async def update_consumer(consumer_id: str, consumer_update: ConsumerUpdate):
    """Update consumer"""
    oid = parse_object_id(consumer_id, "consumer")
    update_data = consumer_update.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No fields to update")

    try:
        updated = await db_ops.update(Collections.CONSUMERS, oid, update_data)
    except DuplicateKeyError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": "Duplicate phone or email. It is already in use by another consumer.",
                "error": str(e)
            }
        )
    if not updated:
        raise HTTPException(status_code=404, detail="Consumer not found.")

    logger.info("👤 Consumer %s updated", consumer_id)
    return serialize_doc(updated)

@router.delete("/{consumer_id}")
async def delete_consumer(consumer_id: str):
    """Delete consumer"""
    oid = parse_object_id(consumer_id, "consumer")
    deleted = await db_ops.delete(Collections.CONSUMERS, oid)
    if not deleted:
        raise HTTPException(status_code=404, detail="Consumer not found.")

    logger.info("👤 Consumer %s deleted", consumer_id)
    return {"message": "Consumer deleted successfully."}
