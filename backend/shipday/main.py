"""
FastAPI app entrypoint
- CORS
- Routers (REST under /api, websocket at /ws/realtime)
- Lifespan: tables, AsyncEventBus + realtime channel, push client, mailer
- Domain error → HTTP status mapping
- Health check endpoints
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from shipday.config import settings
from shipday.database import engine, Base, SessionLocal
from shipday.api import admin, auth, drivers, notifications, orders, payments, pricing, shipments
from shipday.api.websocket import router as ws_router, ConnectionManager
from shipday.errors import ShipdayError
from shipday.events.event_bus import AsyncEventBus
from shipday.schemas.common import HealthResponse
from shipday.services.mailer import Mailer
from shipday.services.push import PushClient
from shipday.services.realtime import RealtimeChannel

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the shared handles at startup and release them at shutdown"""

    # ── 1. DB tables ──
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")

    # ── 2. Event bus + realtime channel ──
    bus = AsyncEventBus(settings.REDIS_URL)
    ws_manager = ConnectionManager()
    realtime = RealtimeChannel(bus, ws_manager)
    await realtime.attach()
    await bus.start()
    logger.info("AsyncEventBus started")

    # ── 3. Push + email clients ──
    push_client = PushClient()
    mailer = Mailer()

    app.state.event_bus = bus
    app.state.ws_manager = ws_manager
    app.state.realtime = realtime
    app.state.push_client = push_client
    app.state.mailer = mailer

    yield

    # ── Shutdown ──
    await push_client.aclose()
    await mailer.aclose()
    await bus.stop()
    logger.info("AsyncEventBus stopped")


app = FastAPI(
    title="ShipDay Courier API",
    description="Courier management backend: shipments, drivers, orders, payments, waybills",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ShipdayError)
async def shipday_error_handler(request: Request, exc: ShipdayError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def jsonable_errors(errors: list) -> list:
    return [{"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")} for e in errors]


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{location}: {first.get('msg')}" if location else str(first.get("msg", "Invalid request"))
    return JSONResponse(
        status_code=400,
        content={"detail": message, "errors": jsonable_errors(errors)},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


app.include_router(shipments.router)
app.include_router(admin.router)
app.include_router(drivers.router)
app.include_router(auth.router)
app.include_router(orders.router)
app.include_router(notifications.router)
app.include_router(payments.router)
app.include_router(pricing.router)
app.include_router(ws_router)


def _db_ok() -> bool:
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"Health check: database unavailable ({e})")
        return False
    finally:
        db.close()


@app.get("/healthz")
def liveness():
    return {"status": "ok"}


@app.get("/readyz")
def readiness():
    if not _db_ok():
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return {"status": "ready"}


@app.get("/api/health", response_model=HealthResponse)
def health_check(request: Request):
    """System status"""
    db_ok = _db_ok()
    bus = getattr(request.app.state, "event_bus", None)
    return HealthResponse(
        status="ok" if db_ok else "degraded",
        db_connected=db_ok,
        redis_connected=bus.is_redis if bus else False,
        timestamp=datetime.now(timezone.utc),
    )
