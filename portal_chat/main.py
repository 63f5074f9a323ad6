from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
import time

from .core.config import settings
from .core.database import close_db_connections, create_tables
from .core.error_handlers import register_exception_handlers
from .core.logging import setup_logging
from .services.chat.connection_manager import connection_manager

from .routers import health, chat_router, message_router, last_chats_router, users_router, websocket_router

setup_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting Portal Chat API v{settings.app_version} ({settings.environment})")

    if settings.auto_create_tables:
        await create_tables()
        logger.info("Chat tables created")

    yield

    live = len(connection_manager.active_connections)
    logger.info(f"Stopping Portal Chat API with {live} live chat sessions")
    await close_db_connections()

app = FastAPI(
    title="Portal Chat API",
    description="Private student/teacher chat with real-time delivery for the school portal",
    version=settings.app_version,
    lifespan=lifespan
)

@app.middleware("http")
async def time_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started
    response.headers["X-Process-Time"] = f"{elapsed:.4f}"

    # Health checks hit every few seconds; keep them out of the info log
    log = logger.debug if request.url.path.startswith("/health") else logger.info
    log(f"{request.method} {request.url.path} {response.status_code} in {elapsed:.3f}s")
    return response

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["Authorization", "Content-Type"],
    max_age=3600,
)

register_exception_handlers(app)

app.include_router(health.router)
app.include_router(chat_router)
app.include_router(message_router)
app.include_router(last_chats_router)
app.include_router(users_router)
app.include_router(websocket_router)

@app.get("/")
async def root():
    return {
        "service": "Portal Chat API",
        "version": settings.app_version,
        "websocket": "/ws/chat",
        "api": "/api",
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("portal_chat.main:app", host="0.0.0.0", port=8000, reload=settings.environment == "development")
