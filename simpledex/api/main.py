"""FastAPI application exposing the exchange engine.

Authentication is intentionally not implemented at the application level:
the provider/trader account in each request is trusted. Deploy behind a
gateway that binds accounts to authenticated callers.
"""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from simpledex import __version__
from simpledex.api.endpoints import router
from simpledex.errors import DexError, PoolNotFound
from simpledex.log import configure_logging

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("SIMPLEDEX_HOST", "0.0.0.0")
PORT = int(os.environ.get("SIMPLEDEX_PORT", "8000"))
DEBUG = os.environ.get("SIMPLEDEX_DEBUG", "false").lower() in ("true", "1", "yes")

app = FastAPI(
    title="SimpleDex",
    description="Constant product exchange engine",
    version=__version__,
)


@app.exception_handler(DexError)
async def dex_error_handler(_request: Request, exc: DexError) -> JSONResponse:
    """Engine rejections become 400s (404 for unknown pools)."""
    status_code = 404 if isinstance(exc, PoolNotFound) else 400
    return JSONResponse(status_code=status_code, content={"error": exc.code, "detail": exc.message})


@app.exception_handler(ValueError)
async def value_error_handler(_request: Request, exc: ValueError) -> JSONResponse:
    """Malformed arguments that passed schema validation."""
    return JSONResponse(status_code=422, content={"error": "InvalidArgument", "detail": str(exc)})


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - SIMPLEDEX_HOST: Host to bind to (default: 0.0.0.0)
    - SIMPLEDEX_PORT: Port to bind to (default: 8000)
    - SIMPLEDEX_DEBUG: Enable debug/reload mode (default: false)
    - SIMPLEDEX_LOG_LEVEL: Log level (default: INFO)
    - SIMPLEDEX_ENGINE_ADDRESS: Engine account in the asset ledger
    - SIMPLEDEX_EVENT_LOG_SIZE: Number of events the engine retains
    """
    configure_logging(os.environ.get("SIMPLEDEX_LOG_LEVEL", "INFO"))
    logger.info("starting_api", host=HOST, port=PORT, debug=DEBUG)
    uvicorn.run(
        "simpledex.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
