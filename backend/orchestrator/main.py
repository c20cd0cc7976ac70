"""FastAPI application entry point"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from .config import get_settings
from .exceptions import PipelineError
from .api.routes import review_router
from .services.profiles import PROFILES

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Document Review Orchestrator API",
    description="Chunked two-stage LLM review and generation pipelines for no-code frontends",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["POST", "OPTIONS", "GET"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError):
    """Serialise every pipeline error as {"error": ..., "details": ...}"""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Include routers
app.include_router(review_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Document Review Orchestrator API",
        "version": "1.0.0",
        "status": "running",
        "pipelines": [f"/api/{name}" for name in sorted(PROFILES)]
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


@app.on_event("startup")
async def startup_event():
    """Startup tasks"""
    logger.info("Starting Document Review Orchestrator API")
    logger.info(f"Pipelines: {', '.join(sorted(PROFILES))}")
    logger.info(
        f"Chunking: threshold={settings.chunk_threshold}, chunk_size={settings.chunk_size}, "
        f"inter_call_delay={settings.inter_call_delay}s"
    )
    try:
        settings.validate_provider_keys()
    except PipelineError as e:
        # Requests will fail with a configuration error until this is fixed
        logger.warning(f"{e.message}: {e.details}")


if __name__ == "__main__":
    import uvicorn
    import os
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        "orchestrator.main:app",
        host="0.0.0.0",
        port=port,
    )
