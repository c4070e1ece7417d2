"""
Booking lifecycle – create, read, list, status transition and full update.

Every mutation appends exactly one entry to the booking's timeline in the
same write that changes the booking, so the audit log only ever grows.
Customer and vehicle fields are copied into the booking when it is written
and are never refreshed from the live consumer/vehicle records.
"""
import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from bson import ObjectId
from fastapi import HTTPException, status

from app.config.database import Collections
from app.config.settings import settings
from app.database.db_operations import db_ops
from app.models.booking import BookingCreate, BOOKING_STATUSES
from app.services.consumer_service import find_or_create_consumer
from app.utils.auth import SYSTEM_ACTOR
from app.utils.helpers import parse_object_id, is_valid_object_id

logger = logging.getLogger(__name__)

CONSUMER_SUMMARY = {"name": 1, "email": 1}
VEHICLE_SUMMARY = {"type": 1, "number": 1}


# ─── Building blocks ──────────────────────────────────────────────────────────

def generate_booking_number() -> str:
    """BK- followed by 8 upper-case hex chars of a random UUID (best-effort unique)"""
    return f"{settings.BOOKING_NUMBER_PREFIX}{uuid.uuid4().hex[:8].upper()}"


def timeline_entry(action: str, user: Optional[str]) -> Dict:
    return {"action": action, "user": user or SYSTEM_ACTOR, "time": datetime.utcnow()}


def _snapshot_fields(payload: BookingCreate, consumer: Dict) -> Dict:
    """Point-in-time copy of customer and vehicle details plus trip and payment"""
    customer = payload.customer
    vehicle = payload.vehicle
    return {
        "customer": {
            "consumerId": consumer["_id"],
            "name": customer.name,
            "phone": customer.phone,
            "email": customer.email,
        },
        "vehicle": {
            "vehicleId": ObjectId(vehicle.vehicleId),
            "type": vehicle.type,
            "number": vehicle.number,
            "driver": vehicle.driver,
        },
        "trip": payload.trip.model_dump(by_alias=True),
        "payment": payload.payment.model_dump(),
    }


async def expand_references(bookings: List[Dict]) -> List[Dict]:
    """
    Replace customer.consumerId and vehicle.vehicleId with summaries of the
    referenced records, for the response only. Unresolvable references
    become None.
    """
    consumer_ids = {b["customer"]["consumerId"] for b in bookings if is_valid_object_id(b.get("customer", {}).get("consumerId"))}
    vehicle_ids = {b["vehicle"]["vehicleId"] for b in bookings if is_valid_object_id(b.get("vehicle", {}).get("vehicleId"))}

    consumers = {}
    if consumer_ids:
        docs = await db_ops.get_all(Collections.CONSUMERS, {"_id": {"$in": list(consumer_ids)}}, projection=CONSUMER_SUMMARY)
        consumers = {doc["_id"]: doc for doc in docs}

    vehicles = {}
    if vehicle_ids:
        docs = await db_ops.get_all(Collections.VEHICLES, {"_id": {"$in": list(vehicle_ids)}}, projection=VEHICLE_SUMMARY)
        vehicles = {doc["_id"]: doc for doc in docs}

    for booking in bookings:
        if "customer" in booking:
            booking["customer"]["consumerId"] = consumers.get(booking["customer"].get("consumerId"))
        if "vehicle" in booking:
            booking["vehicle"]["vehicleId"] = vehicles.get(booking["vehicle"].get("vehicleId"))
    return bookings


async def _expand_one(booking: Dict) -> Dict:
    expanded = await expand_references([booking])
    return expanded[0]


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")


# ─── Lifecycle operations ─────────────────────────────────────────────────────

async def create_booking(payload: BookingCreate) -> Dict:
    """
    Resolve the consumer, then persist a pending booking with its first
    timeline entry. The consumer write and the booking write are separate;
    a failed booking insert leaves the resolved consumer in place.
    """
    consumer = await find_or_create_consumer(
        payload.customer.name, payload.customer.phone, payload.customer.email
    )

    booking_dict = _snapshot_fields(payload, consumer)
    booking_dict["bookingNumber"] = generate_booking_number()
    booking_dict["status"] = "pending"
    booking_dict["timeline"] = [timeline_entry("Booking created", consumer.get("name"))]

    created = await db_ops.create(Collections.BOOKINGS, booking_dict)
    logger.info("📘 Booking %s created for %s", created["bookingNumber"], payload.customer.phone)

    stored = await db_ops.get_by_id(Collections.BOOKINGS, created["_id"])
    return await _expand_one(stored)


async def get_booking(booking_id: str) -> Dict:
    oid = parse_object_id(booking_id, "booking")
    booking = await db_ops.get_by_id(Collections.BOOKINGS, oid)
    if not booking:
        raise _not_found()
    return await _expand_one(booking)


async def list_bookings() -> List[Dict]:
    """Every booking, newest first"""
    bookings = await db_ops.get_all(Collections.BOOKINGS, sort=[("createdAt", -1), ("_id", -1)])
    return await expand_references(bookings)


async def update_booking_status(booking_id: str, new_status: Optional[str], actor: Optional[str]) -> Dict:
    """Set status and log the transition. The returned booking is not expanded."""
    if new_status not in BOOKING_STATUSES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status")

    oid = parse_object_id(booking_id, "booking")
    updated = await db_ops.update(
        Collections.BOOKINGS,
        oid,
        {"status": new_status},
        push={"timeline": timeline_entry(f"Status updated to {new_status}", actor)},
    )
    if not updated:
        raise _not_found()

    logger.info("📘 Booking %s status -> %s", updated.get("bookingNumber"), new_status)
    return updated


async def update_booking(booking_id: str, payload: BookingCreate) -> Dict:
    """
    Replace customer, vehicle, trip and payment wholesale. Status is left
    as it is.
    """
    oid = parse_object_id(booking_id, "booking")
    if not await db_ops.get_by_id(Collections.BOOKINGS, oid, projection={"_id": 1}):
        raise _not_found()

    consumer = await find_or_create_consumer(
        payload.customer.name, payload.customer.phone, payload.customer.email
    )

    updated = await db_ops.update(
        Collections.BOOKINGS,
        oid,
        _snapshot_fields(payload, consumer),
        push={"timeline": timeline_entry("Booking updated", consumer.get("name"))},
    )
    if not updated:
        raise _not_found()

    logger.info("📘 Booking %s updated", updated.get("bookingNumber"))
    return await _expand_one(updated)
