# backoffice/services/catalog_services/channel_service.py
import logging

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from backoffice.models.catalog_models import Branch, SalesChannel
from backoffice.schemas.catalog_schemas import (
    BranchCreate,
    BranchOut,
    ChannelCreate,
    ChannelOut,
    ChannelUpdate,
)
from backoffice.utils.activity_helpers import log_actor_activity

logger = logging.getLogger(__name__)


# ---------------------------------------------------
# BRANCHES
# ---------------------------------------------------
async def create_branch(db: AsyncSession, data: BranchCreate, current_user):
    existing = await db.execute(select(Branch).where(Branch.name == data.name))
    if existing.scalars().first():
        raise HTTPException(status_code=400, detail=f"Branch '{data.name}' already exists")

    branch = Branch(**data.model_dump())
    db.add(branch)
    await db.flush()
    await log_actor_activity(db, current_user, f"created branch '{branch.name}' (ID: {branch.id})")
    await db.commit()
    await db.refresh(branch)
    return {"message": "Branch created successfully", "data": BranchOut.model_validate(branch)}


async def list_branches(db: AsyncSession, include_inactive: bool = False):
    query = select(Branch).order_by(Branch.name)
    if not include_inactive:
        query = query.where(Branch.is_active == True)
    result = await db.execute(query)
    return {
        "message": "Branches fetched successfully",
        "data": [BranchOut.model_validate(b) for b in result.scalars().all()],
    }


async def get_branch_or_404(db: AsyncSession, branch_id: int) -> Branch:
    branch = await db.get(Branch, branch_id)
    if not branch:
        raise HTTPException(status_code=404, detail=f"Branch {branch_id} not found")
    return branch


# ---------------------------------------------------
# SALES CHANNELS
# ---------------------------------------------------
async def get_channel_or_404(db: AsyncSession, channel_id: int) -> SalesChannel:
    channel = await db.get(SalesChannel, channel_id)
    if not channel:
        raise HTTPException(status_code=404, detail=f"Channel {channel_id} not found")
    return channel


async def create_channel(db: AsyncSession, data: ChannelCreate, current_user):
    existing = await db.execute(select(SalesChannel).where(SalesChannel.name == data.name))
    if existing.scalars().first():
        raise HTTPException(status_code=400, detail=f"Channel '{data.name}' already exists")

    channel = SalesChannel(**data.model_dump())
    db.add(channel)
    await db.flush()
    await log_actor_activity(db, current_user, f"created channel '{channel.name}' ({channel.type.value})")
    await db.commit()
    await db.refresh(channel)
    return {"message": "Channel created successfully", "data": ChannelOut.model_validate(channel)}


async def list_channels(db: AsyncSession, include_inactive: bool = True):
    query = select(SalesChannel).order_by(SalesChannel.name)
    if not include_inactive:
        query = query.where(SalesChannel.is_active == True)
    result = await db.execute(query)
    return {
        "message": "Channels fetched successfully",
        "data": [ChannelOut.model_validate(c) for c in result.scalars().all()],
    }


async def get_channel(db: AsyncSession, channel_id: int):
    channel = await get_channel_or_404(db, channel_id)
    return {"message": "Channel fetched successfully", "data": ChannelOut.model_validate(channel)}


async def update_channel(db: AsyncSession, channel_id: int, data: ChannelUpdate, current_user):
    try:
        channel = await get_channel_or_404(db, channel_id)

        changes = []
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is None:
                continue
            old_val = getattr(channel, key)
            if old_val != value:
                changes.append(f"{key}: {old_val} → {value}")
                setattr(channel, key, value)

        if changes:
            await log_actor_activity(
                db, current_user, f"updated channel '{channel.name}' (ID: {channel.id}) — {', '.join(changes)}"
            )
            await db.commit()
            await db.refresh(channel)

        return {"message": "Channel updated successfully", "data": ChannelOut.model_validate(channel)}

    except HTTPException:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Channel update failed")
        raise HTTPException(status_code=500, detail=f"Error updating channel: {e}")
