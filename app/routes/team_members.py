"""
Team member routes
"""
import logging
from fastapi import APIRouter, HTTPException, status
from pymongo.errors import DuplicateKeyError
from app.models.team_member import TeamMemberCreate, TeamMemberUpdate
from app.database.db_operations import db_ops
from app.config.database import Collections
from app.utils.helpers import serialize_doc, serialize_docs, parse_object_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/team", tags=["Team Members"])


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_team_member(member: TeamMemberCreate):
    """Create a new team member"""
    existing = await db_ops.get_one(Collections.TEAM_MEMBERS, {"email": member.email})
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A team member with this email already exists."
        )

    try:
        created = await db_ops.create(Collections.TEAM_MEMBERS, member.model_dump())
    except DuplicateKeyError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "Duplicate email. This email is already in use.", "error": str(e)}
        )

    logger.info("🧑‍💼 Team member %s created", created["email"])
    return serialize_doc(created)

@router.get("/")
async def get_team_members():
    """Get all team members"""
    members = await db_ops.get_all(Collections.TEAM_MEMBERS)
    return serialize_docs(members)

@router.get("/{member_id}")
async def get_team_member(member_id: str):
    """Get team member by ID"""
    oid = parse_object_id(member_id, "team member")
    member = await db_ops.get_by_id(Collections.TEAM_MEMBERS, oid)
    if not member:
        raise HTTPException(status_code=404, detail="Team member not found.")
    return serialize_doc(member)

@router.put("/{member_id}")
async def update_team_member(member_id: str, member_update: TeamMemberUpdate):
    """Update team member"""
    oid = parse_object_id(member_id, "team member")
    update_data = member_update.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No fields to update")

    try:
        updated = await db_ops.update(Collections.TEAM_MEMBERS, oid, update_data)
    except DuplicateKeyError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": "Duplicate email. This email is already in use by another team member.",
                "error": str(e)
            }
        )
    if not updated:
        raise HTTPException(status_code=404, detail="Team member not found.")

    logger.info("🧑‍💼 Team member %s updated", member_id)
    return serialize_doc(updated)

@router.delete("/{member_id}")
async def delete_team_member(member_id: str):
    """Delete team member"""
    oid = parse_object_id(member_id, "team member")
    deleted = await db_ops.delete(Collections.TEAM_MEMBERS, oid)
    if not deleted:
        raise HTTPException(status_code=404, detail="Team member not found.")

    logger.info("🧑‍💼 Team member %s deleted", member_id)
    return {"message": "Team member deleted successfully."}
