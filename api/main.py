"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, WebSocket, WebSocketException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from database.connection import DatabaseConnection
from api.routes import automation_router, news_router
from api.schemas import ErrorResponse
from api.websocket import manager, websocket_endpoint
from pipeline.monitoring import RealtimeMonitor, log_change_event
from shared.config import settings
from shared.errors import ConfigurationError

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

WATCHABLE_TABLES = {"ai_news", "pipeline_logs"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    await DatabaseConnection.init_mongo()
    redis_client = await DatabaseConnection.init_redis()

    # Forward change events to WebSocket clients; the API still serves without them
    monitor = RealtimeMonitor(redis_client, handlers=[log_change_event, manager.broadcast])
    try:
        await monitor.start()
    except Exception as e:
        logger.warning(f"Realtime monitoring unavailable, continuing without it: {e}")

    try:
        yield
    finally:
        # Shutdown
        await monitor.stop()
        await DatabaseConnection.close_connections()


# Create FastAPI app
app = FastAPI(
    title="AI News Pipeline",
    description="Aggregates AI and AI-in-education news from RSS/Atom feeds",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ConfigurationError)
async def configuration_exception_handler(request: Request, exc: ConfigurationError):
    """Missing connection info is reported loudly, not as a generic 500."""
    logger.error(f"Configuration error: {exc}")
    return JSONResponse(
        status_code=503,
        content=ErrorResponse(error="Configuration error", detail=str(exc)).model_dump()
    )


# Exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.error(f"Unhandled error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error="Internal server error", detail=str(exc)).model_dump()
    )


# Include routers
app.include_router(automation_router)
app.include_router(news_router)


# WebSocket endpoints
@app.websocket("/ws")
async def websocket_all(websocket: WebSocket):
    """WebSocket endpoint for all change events."""
    await websocket_endpoint(websocket)


@app.websocket("/ws/{table}")
async def websocket_table(websocket: WebSocket, table: str):
    """WebSocket endpoint for change events of one table."""
    if table not in WATCHABLE_TABLES:
        raise WebSocketException(code=status.WS_1008_POLICY_VIOLATION, reason=f"Unknown table {table}")
    await websocket_endpoint(websocket, table)


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "AI News Pipeline",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug
    )
