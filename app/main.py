# app/main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import logging
from contextlib import asynccontextmanager

from app.api.endpoints import search, health
from app.api.middleware import RequestLoggingMiddleware
from app.config.settings import settings
from app.core.exceptions import CustomHTTPException
from app.core.hub import create_default_hub

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the hub, start health monitoring, and tear both down on exit"""
    logger.info("🚀 Starting Entertainment Intelligence Hub...")
    hub = create_default_hub()
    app.state.hub = hub
    await hub.start()
    logger.info(f"🎉 Startup completed with {len(hub.registry)} sources")

    yield

    logger.info("🔄 Shutting down Entertainment Intelligence Hub...")
    await hub.shutdown()
    app.state.hub = None
    logger.info("👋 Application shutdown completed")

app = FastAPI(
    title="Entertainment Intelligence Hub",
    description="Health-aware federated search over movie and TV metadata providers",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan
)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(search.router, prefix="/api/v1", tags=["search"])
app.include_router(health.router, prefix="/health", tags=["health"])

@app.exception_handler(CustomHTTPException)
async def custom_exception_handler(request: Request, exc: CustomHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.detail,
            "error_code": exc.error_code,
            "request_id": getattr(request.state, "request_id", None)
        }
    )

@app.get("/")
async def root():
    return {"message": "Entertainment Intelligence Hub", "status": "running", "version": "1.0.0"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG
    )
