import asyncio
from contextlib import asynccontextmanager, suppress
from fastapi import FastAPI
import logfire
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.middleware import SlowAPIMiddleware
from slowapi.errors import RateLimitExceeded
from restopos.database.database import create_tables, engine
from restopos.config.config import settings

from restopos.routes import (
    auth_router,
    cart_router,
    inventory_router,
    menu_router,
    report_router,
    resource_router,
    user_router,
)
from restopos.services.realtime_service import manager


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    listener = asyncio.create_task(manager.listen_for_messages())
    yield
    listener.cancel()
    with suppress(asyncio.CancelledError):
        await listener


app = FastAPI(
    title="RestoPOS",
    docs_url="/",
    lifespan=lifespan,
    description="Restaurant point of sale",
    summary="Menu, cart, inventory alerts, sales analytics and a shared resource board",
)


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT],
    enabled=settings.RATE_LIMIT_ENABLED,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


# configure logfire
logfire.configure(
    token=settings.LOGFIRE_TOKEN,
    service_name=settings.APP_NAME,
    send_to_logfire="if-token-present",
)
logfire.instrument_sqlalchemy(engine=engine)
logfire.instrument_fastapi(app, capture_headers=True)


app.include_router(auth_router.router)
app.include_router(user_router.router)
app.include_router(menu_router.router)
app.include_router(cart_router.router)
app.include_router(inventory_router.router)
app.include_router(report_router.router)
app.include_router(resource_router.router)


# Allow requests from your frontend
origins = [
    settings.FRONTEND_URL,
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
