"""
Vehicle registry – single and bulk registration, lookups, filtered listing,
updates by id or number, compliance expiry window and fleet statistics.

Vehicle numbers are canonical upper-case everywhere: on create (single and
bulk), on lookup by number, on the update identifier and on a new number
supplied in an update.
"""
import logging
import math
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from bson import ObjectId
from fastapi import HTTPException, status
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError

from app.config.database import Collections
from app.database.db_operations import db_ops
from app.models.vehicle import VehicleCreate, VehicleUpdate
from app.utils.helpers import (
    canonical_vehicle_number, flatten_update, is_valid_object_id, parse_object_id
)

logger = logging.getLogger(__name__)

# Nested blocks merged field-by-field on update
NESTED_BLOCKS = ("driver", "compliance", "complianceDocuments", "vendor", "stats")

# Projection for the compliance expiry report
COMPLIANCE_PROJECTION = {
    "number": 1,
    "model": 1,
    "compliance.rcExpiry": 1,
    "compliance.insurance": 1,
    "compliance.fitnessExpiry": 1,
    "compliance.permit": 1,
    "compliance.pocExpiry": 1,
}

EXPIRY_FIELDS = (
    "compliance.rcExpiry",
    "compliance.insurance.expiry",
    "compliance.fitnessExpiry",
    "compliance.permit.expiry",
    "compliance.pocExpiry",
)

SKIP_MISSING_NUMBER = "missing number"
SKIP_EXISTS = "exists in database"
SKIP_DUPLICATE = "duplicate in request"


# ─── Documents & references ───────────────────────────────────────────────────

def to_document(vehicle: VehicleCreate) -> Dict:
    document = vehicle.model_dump()
    vendor_id = document["vendor"].get("vendorId")
    if vendor_id:
        document["vendor"]["vendorId"] = ObjectId(vendor_id)
    return document


async def expand_vendor(vehicles: List[Dict]) -> List[Dict]:
    """Replace vendor.vendorId with the referenced vendor record (None if unresolved)"""
    vendor_ids = {
        v["vendor"]["vendorId"] for v in vehicles
        if is_valid_object_id((v.get("vendor") or {}).get("vendorId"))
    }
    vendors = {}
    if vendor_ids:
        docs = await db_ops.get_all(Collections.VENDORS, {"_id": {"$in": list(vendor_ids)}})
        vendors = {doc["_id"]: doc for doc in docs}

    for vehicle in vehicles:
        vendor = vehicle.get("vendor")
        if isinstance(vendor, dict) and "vendorId" in vendor:
            vendor["vendorId"] = vendors.get(vendor["vendorId"])
    return vehicles


async def _expand_one(vehicle: Dict) -> Dict:
    expanded = await expand_vendor([vehicle])
    return expanded[0]


# ─── Registration ─────────────────────────────────────────────────────────────

async def create_vehicle(vehicle: VehicleCreate) -> Dict:
    existing = await db_ops.get_one(Collections.VEHICLES, {"number": vehicle.number}, projection={"_id": 1})
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A vehicle with this number already exists."
        )

    created = await db_ops.create(Collections.VEHICLES, to_document(vehicle))
    logger.info("🚌 Vehicle %s registered", created["number"])
    return created


def partition_bulk(entries: List[Any], existing_numbers: set) -> tuple:
    """
    Split a bulk request into entries to insert and a skip report, in input
    order. A later entry repeating an earlier number is the one skipped.
    """
    to_create = []
    skipped = []
    seen = set()

    for entry in entries:
        raw_number = entry.get("number") if isinstance(entry, dict) else None
        number = canonical_vehicle_number(raw_number) if isinstance(raw_number, str) else None
        if not number:
            skipped.append({"data": entry, "reason": SKIP_MISSING_NUMBER})
            continue

        if number in existing_numbers:
            skipped.append({"number": number, "reason": SKIP_EXISTS})
        elif number in seen:
            skipped.append({"number": number, "reason": SKIP_DUPLICATE})
        else:
            seen.add(number)
            to_create.append({**entry, "number": number})

    return to_create, skipped


async def create_many_vehicles(entries: Any) -> Dict:
    """Register a batch; partial success with a per-entry skip report"""
    if not isinstance(entries, list) or not entries:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request body must be a non-empty array of vehicle objects."
        )

    incoming = [
        canonical_vehicle_number(e["number"]) for e in entries
        if isinstance(e, dict) and isinstance(e.get("number"), str) and e["number"].strip()
    ]
    existing = await db_ops.get_all(
        Collections.VEHICLES, {"number": {"$in": incoming}}, projection={"number": 1}
    ) if incoming else []
    to_create, skipped = partition_bulk(entries, {v["number"] for v in existing})

    if not to_create:
        return {
            "created": False,
            "message": "No new vehicles were created.",
            "createdCount": 0,
            "skippedCount": len(skipped),
            "skippedVehicles": skipped,
        }

    try:
        documents = [to_document(VehicleCreate(**entry)) for entry in to_create]
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": "An error occurred while creating vehicles.",
                "error": exc.errors(include_url=False, include_context=False),
            },
        )

    created = await db_ops.create_many(Collections.VEHICLES, documents)
    logger.info("🚌 Bulk registered %d vehicle(s), skipped %d", len(created), len(skipped))
    return {
        "created": True,
        "message": f"Operation complete. Successfully created {len(created)} vehicles.",
        "createdCount": len(created),
        "skippedCount": len(skipped),
        "createdVehicles": created,
        "skippedVehicles": skipped,
    }


# ─── Lookups ──────────────────────────────────────────────────────────────────

async def get_vehicle(vehicle_id: str) -> Dict:
    oid = parse_object_id(vehicle_id, "vehicle")
    vehicle = await db_ops.get_by_id(Collections.VEHICLES, oid)
    if not vehicle:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vehicle not found")
    return await _expand_one(vehicle)


async def get_vehicle_by_number(number: str) -> Dict:
    vehicle = await db_ops.get_one(Collections.VEHICLES, {"number": canonical_vehicle_number(number)})
    if not vehicle:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Vehicle with number {number} not found"
        )
    return await _expand_one(vehicle)


async def list_vehicles(
    page: int,
    limit: int,
    vehicle_type: Optional[str] = None,
    vehicle_status: Optional[str] = None,
    ownership: Optional[str] = None,
) -> Dict:
    query = {}
    if vehicle_type:
        query["type"] = vehicle_type
    if vehicle_status:
        query["status"] = vehicle_status
    if ownership:
        query["ownership"] = ownership

    vehicles = await db_ops.get_all(
        Collections.VEHICLES,
        query,
        skip=(page - 1) * limit,
        limit=limit,
        sort=[("createdAt", -1), ("_id", -1)],
    )
    count = await db_ops.count(Collections.VEHICLES, query)

    return {
        "vehicles": await expand_vendor(vehicles),
        "totalPages": math.ceil(count / limit),
        "currentPage": page,
        "totalVehicles": count,
    }


# ─── Update / delete ──────────────────────────────────────────────────────────

def _identifier_query(identifier: str) -> Dict:
    if is_valid_object_id(identifier):
        return {"_id": ObjectId(identifier)}
    return {"number": canonical_vehicle_number(identifier)}


async def update_vehicle(identifier: str, vehicle_update: VehicleUpdate) -> Dict:
    """Partial update of the vehicle named by id or registration number"""
    update_data = vehicle_update.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    query = _identifier_query(identifier)
    target = await db_ops.get_one(Collections.VEHICLES, query, projection={"_id": 1})
    if not target:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vehicle not found to update.")

    if update_data.get("number"):
        clash = await db_ops.get_one(
            Collections.VEHICLES,
            {"number": update_data["number"], "_id": {"$ne": target["_id"]}},
            projection={"_id": 1},
        )
        if clash:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Another vehicle with this number already exists."
            )

    flat = flatten_update(update_data, NESTED_BLOCKS)
    if flat.get("vendor.vendorId"):
        flat["vendor.vendorId"] = ObjectId(flat["vendor.vendorId"])

    try:
        updated = await db_ops.update(Collections.VEHICLES, target["_id"], flat)
    except DuplicateKeyError:
        # Number taken between the clash check and the write
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Another vehicle with this number already exists."
        )
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vehicle not found to update.")

    logger.info("🚌 Vehicle %s updated (%s)", updated["number"], ", ".join(sorted(update_data)))
    return await _expand_one(updated)


async def delete_vehicle(vehicle_id: str) -> None:
    oid = parse_object_id(vehicle_id, "vehicle")
    deleted = await db_ops.delete(Collections.VEHICLES, oid)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vehicle not found to delete.")
    logger.info("🚌 Vehicle %s deleted", vehicle_id)


# ─── Reports ──────────────────────────────────────────────────────────────────

async def vehicles_nearing_expiry(days: int, now: Optional[datetime] = None) -> List[Dict]:
    """Vehicles with any tracked compliance date on or before now + days"""
    cutoff = (now or datetime.utcnow()) + timedelta(days=days)
    query = {"$or": [{field: {"$lte": cutoff}} for field in EXPIRY_FIELDS]}
    return await db_ops.get_all(Collections.VEHICLES, query, projection=COMPLIANCE_PROJECTION)


async def fleet_stats() -> Dict:
    summary = await db_ops.aggregate(Collections.VEHICLES, [
        {
            "$group": {
                "_id": None,
                "totalVehicles": {"$sum": 1},
                "totalTrips": {"$sum": "$stats.totalTrips"},
                "totalKms": {"$sum": "$stats.totalKms"},
                "totalRevenue": {"$sum": "$stats.revenue"},
            }
        },
        {
            "$project": {
                "_id": 0,
                "totalVehicles": 1,
                "totalTrips": 1,
                "totalKms": 1,
                "totalRevenue": 1,
            }
        },
    ])

    by_status = await db_ops.aggregate(Collections.VEHICLES, [
        {"$group": {"_id": "$status", "count": {"$sum": 1}}},
    ])

    return {
        "fleetSummary": summary[0] if summary and summary[0].get("totalVehicles") else {},
        "statusBreakdown": {row["_id"]: row["count"] for row in by_status},
    }
