"""FastAPI application for the pool service.

Note: Authentication is not implemented at the application level. Callers
identify themselves in the request body; admin operations are checked
against the pool's role table.
"""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ammpool import __version__
from ammpool.api.endpoints import router
from ammpool.errors import EmptyPool, PoolError, PoolPaused, ReentrantCall, Unauthorized
from ammpool.models.responses import ErrorResponse

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("AMM_HOST", "0.0.0.0")
PORT = int(os.environ.get("AMM_PORT", "8000"))
DEBUG = os.environ.get("AMM_DEBUG", "false").lower() in ("true", "1", "yes")

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024

app = FastAPI(
    title="AMM Pool",
    description="Multi-asset constant-product pool ledger and pricing engine",
    version=__version__,
)


def error_status(err: PoolError) -> int:
    """HTTP status for a pool error."""
    if isinstance(err, Unauthorized):
        return 403
    if isinstance(err, EmptyPool):
        return 404
    if isinstance(err, PoolPaused | ReentrantCall):
        return 409
    return 400


@app.exception_handler(PoolError)
async def pool_error_handler(request: Request, err: PoolError) -> JSONResponse:
    """Map rejected operations to a JSON error body."""
    logger.warning(
        "operation_rejected",
        path=request.url.path,
        error=type(err).__name__,
        detail=str(err),
    )
    return JSONResponse(
        status_code=error_status(err),
        content=ErrorResponse(error=type(err).__name__, detail=str(err)).model_dump(),
    )


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


def run() -> None:
    """Run the pool API server.

    Configuration via environment variables:
    - AMM_HOST: Host to bind to (default: 0.0.0.0)
    - AMM_PORT: Port to bind to (default: 8000)
    - AMM_DEBUG: Enable debug/reload mode (default: false)
    - AMM_ASSETS, AMM_FEE_BPS, AMM_ADMIN: pool configuration (see PoolConfig)
    """
    uvicorn.run(
        "ammpool.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
