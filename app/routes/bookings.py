"""
Booking routes
"""
from fastapi import APIRouter, Depends, status
from typing import Dict, Optional
from app.models.booking import BookingCreate, BookingStatusUpdate
from app.services import booking_service
from app.utils.auth import get_optional_user, actor_name
from app.utils.helpers import serialize_doc, serialize_docs

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_booking(booking: BookingCreate):
    """Create a pending booking, resolving the customer by phone"""
    created = await booking_service.create_booking(booking)
    return {
        "message": "Booking created successfully",
        "booking": serialize_doc(created)
    }

@router.get("/{booking_id}")
async def get_booking(booking_id: str):
    """Get booking by ID"""
    booking = await booking_service.get_booking(booking_id)
    return serialize_doc(booking)

@router.patch("/{booking_id}/status")
async def update_booking_status(
    booking_id: str,
    status_update: BookingStatusUpdate,
    current_user: Optional[Dict] = Depends(get_optional_user)
):
    """Move a booking to another status and log who did it"""
    updated = await booking_service.update_booking_status(
        booking_id, status_update.status, actor_name(current_user)
    )
    return {
        "message": "Booking status updated successfully",
        "booking": serialize_doc(updated)
    }

@router.patch("/{booking_id}")
async def update_booking(booking_id: str, booking: BookingCreate):
    """Replace customer, vehicle, trip and payment details of a booking"""
    updated = await booking_service.update_booking(booking_id, booking)
    return {
        "message": "Booking updated successfully",
        "booking": serialize_doc(updated)
    }

@router.get("/")
async def get_bookings():
    """Get all bookings, newest first"""
    bookings = await booking_service.list_bookings()
    return serialize_docs(bookings)
