"""
Vehicle routes

Fixed-segment paths (stats, compliance, number, many) are registered before
the /{vehicle_id} patterns so they are not captured by them.
"""
from fastapi import APIRouter, Body, Query, status
from fastapi.responses import JSONResponse
from typing import Any, Optional
from app.config.settings import settings
from app.models.vehicle import VehicleCreate, VehicleUpdate, VehicleType, VehicleStatus, Ownership
from app.services import vehicle_service
from app.utils.helpers import serialize_doc, serialize_docs

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


@router.get("/stats/overall")
async def get_fleet_stats():
    """Trip, distance and revenue totals plus a count per status"""
    return await vehicle_service.fleet_stats()

@router.get("/compliance/nearing-expiry")
async def get_compliance_nearing_expiry(
    days: int = Query(settings.COMPLIANCE_WINDOW_DAYS, ge=0)
):
    """Vehicles with any compliance document expiring within `days`"""
    vehicles = await vehicle_service.vehicles_nearing_expiry(days)
    if not vehicles:
        return {"message": f"No vehicle compliance documents expiring within the next {days} days."}
    return serialize_docs(vehicles)

@router.get("/number/{number}")
async def get_vehicle_by_number(number: str):
    """Get vehicle by registration number (case-insensitive)"""
    vehicle = await vehicle_service.get_vehicle_by_number(number)
    return serialize_doc(vehicle)

@router.get("/")
async def get_vehicles(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    type: Optional[VehicleType] = Query(None),
    status: Optional[VehicleStatus] = Query(None),
    ownership: Optional[Ownership] = Query(None),
):
    """Get vehicles with optional filtering and pagination"""
    result = await vehicle_service.list_vehicles(page, limit, type, status, ownership)
    result["vehicles"] = serialize_docs(result["vehicles"])
    return result

@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_vehicle(vehicle: VehicleCreate):
    """Register a new vehicle"""
    created = await vehicle_service.create_vehicle(vehicle)
    return serialize_doc(created)

@router.post("/many")
async def create_many_vehicles(vehicles: Any = Body(...)):
    """Register a batch of vehicles, skipping the ones that cannot be created"""
    result = await vehicle_service.create_many_vehicles(vehicles)
    created = result.pop("created")
    if created:
        result["createdVehicles"] = serialize_docs(result["createdVehicles"])
    return JSONResponse(
        status_code=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        content=result
    )

@router.put("/{identifier}")
async def update_vehicle(identifier: str, vehicle_update: VehicleUpdate):
    """Update a vehicle by its ID or registration number"""
    updated = await vehicle_service.update_vehicle(identifier, vehicle_update)
    return serialize_doc(updated)

@router.get("/{vehicle_id}")
async def get_vehicle(vehicle_id: str):
    """Get vehicle by ID"""
    vehicle = await vehicle_service.get_vehicle(vehicle_id)
    return serialize_doc(vehicle)

@router.delete("/{vehicle_id}")
async def delete_vehicle(vehicle_id: str):
    """Delete vehicle"""
    await vehicle_service.delete_vehicle(vehicle_id)
    return {"message": "Vehicle deleted successfully."}
