from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from sqlalchemy.ext.asyncio import AsyncSession

from restopos.auth.auth import get_current_user, user_from_token
from restopos.database.database import get_db
from restopos.models.models import User
from restopos.schemas.resource_schema import (
    ResourceCreate,
    ResourceResponse,
    ResourceStream,
)
from restopos.services import resource_service
from restopos.services.realtime_service import manager

router = APIRouter(prefix="/api/resources", tags=["Resources"])


@router.get("", status_code=status.HTTP_200_OK)
async def get_resources(
    stream: str = resource_service.ALL_STREAMS,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[ResourceResponse]:
    try:
        selected = None if stream == resource_service.ALL_STREAMS else ResourceStream(stream)
        return await resource_service.get_resources(db=db, stream=selected)
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_resource(
    data: ResourceCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ResourceResponse:
    try:
        return await resource_service.create_resource(
            db=db, data=data, current_user=current_user
        )
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.websocket("/ws")
async def resource_feed(
    websocket: WebSocket,
    token: str,
    db: AsyncSession = Depends(get_db),
):
    try:
        await user_from_token(token, db)
        snapshot = await resource_service.get_snapshot(db=db)
    except HTTPException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    finally:
        # Return the pooled connection before the socket's long receive loop.
        await db.close()

    await manager.connect(websocket)
    try:
        await websocket.send_json({"event": "SNAPSHOT", "resources": snapshot})
        while True:
            # Clients only listen; anything they send is a keepalive.
            await websocket.receive_text()
    except WebSocketDisconnect:
        manager.disconnect(websocket)
