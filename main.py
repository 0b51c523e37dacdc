from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import os
import time
from dotenv import load_dotenv
import uvicorn

load_dotenv()

from insightflow.routers import analysis, chat, session
from insightflow.core.config import settings
from insightflow.core.logging_config import setup_logging, get_logger
from insightflow.utils.dependencies import get_pdf_backend

# Setup logging
setup_logging(log_level=os.getenv("LOG_LEVEL", settings.LOG_LEVEL), log_dir=settings.LOG_DIR)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.has_openai_credentials:
        logger.warning("OPENAI_API_KEY is not set; analysis requests will fail until it is configured")
    # Warm up the PDF backend once per process
    await get_pdf_backend().ensure_ready()
    yield


app = FastAPI(
    title="InsightFlow API",
    description="AI-generated business dashboards and conversational analysis over uploaded documents",
    version="1.0.0",
    lifespan=lifespan
)

# Request/Response logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests and responses"""
    start_time = time.time()

    logger.info(
        f"Request: {request.method} {request.url.path} - "
        f"Client: {request.client.host if request.client else 'unknown'}"
    )

    try:
        response = await call_next(request)
        process_time = time.time() - start_time

        logger.info(
            f"Response: {request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.3f}s"
        )

        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(
            f"Error: {request.method} {request.url.path} - "
            f"Error: {str(e)} - "
            f"Time: {process_time:.3f}s",
            exc_info=True
        )
        raise

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,  # Cannot use credentials with wildcard origins
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(analysis.router, prefix="/api/analysis", tags=["analysis"])
app.include_router(chat.router, prefix="/api/chat", tags=["chat"])
app.include_router(session.router, prefix="/api/session", tags=["session"])

@app.get("/")
async def root():
    logger.info("Root endpoint accessed")
    return {"message": "InsightFlow API", "status": "running"}

@app.get("/health")
async def health():
    logger.debug("Health check endpoint accessed")
    return {
        "status": "healthy",
        "openai_configured": settings.has_openai_credentials,
        "pdf_backend": get_pdf_backend().engine_name
    }

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
