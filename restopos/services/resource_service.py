from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import logfire

from restopos.models.models import InterviewResource, User
from restopos.schemas.resource_schema import (
    ResourceCreate,
    ResourceResponse,
    ResourceStream,
)
from restopos.services.realtime_service import RECENT_LIMIT, manager, merge_by_id

ALL_STREAMS = "All"


async def get_resources(
    db: AsyncSession, stream: ResourceStream | None = None, limit: int | None = None
) -> list[ResourceResponse]:
    """
    Retrieve shared resources, newest first.
    """
    stmt = select(InterviewResource).order_by(
        InterviewResource.created_at.desc(), InterviewResource.title
    )
    if stream is not None:
        stmt = stmt.where(InterviewResource.stream == stream)
    if limit is not None:
        stmt = stmt.limit(limit)

    result = await db.execute(stmt)
    return result.scalars().all()


async def get_snapshot(db: AsyncSession) -> list[dict]:
    """
    The newest saved resources, merged with what this process has broadcast
    since, as sent to a client when it joins the feed.
    """
    rows = await get_resources(db, limit=RECENT_LIMIT)
    snapshot = [
        ResourceResponse.model_validate(row).model_dump(mode="json") for row in rows
    ]
    for resource in reversed(manager.recent):
        snapshot = merge_by_id(snapshot, resource)
    return snapshot[:RECENT_LIMIT]


async def create_resource(
    db: AsyncSession, data: ResourceCreate, current_user: User
) -> ResourceResponse:
    """
    Save a resource and push it to every connected client.
    """
    resource = InterviewResource(
        title=data.title.strip(),
        url=str(data.url),
        stream=data.stream,
        added_by=current_user.id,
    )
    try:
        db.add(resource)
        await db.commit()
        await db.refresh(resource)
    except Exception as e:
        await db.rollback()
        raise Exception(str(e))

    response = ResourceResponse.model_validate(resource)
    try:
        await manager.publish(response.model_dump(mode="json"))
    except Exception as e:
        # The row is saved; clients pick it up on their next fetch.
        logfire.error("failed to publish resource {id}: {error}", id=str(resource.id), error=str(e))

    logfire.info("resource {title} added to {stream}", title=resource.title, stream=data.stream.value)
    return response
