"""
FastMCP server initialization and configuration.

Sets up the server with metadata, the HTTP liveness route and the
health_check tool that reports backend availability.
"""
from typing import Any

from mcp.server.fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response

from src.cache.connection import ConnectionRegistry, ConnectionRole
from src.config import Settings
from src.models.responses import ErrorResponse, HealthCheckResponse
from src.utils.logger import get_logger

# Initialize logger
logger = get_logger(__name__)

# Server metadata
SERVER_VERSION = "1.0.0"
SERVER_DESCRIPTION = "Service shell with a liveness endpoint and a Redis-backed cache"

LIVENESS_BODY = "working"


def create_mcp_server(settings: Settings, registry: ConnectionRegistry) -> FastMCP:
    """
    Create and configure the FastMCP server instance.

    Args:
        settings: Process settings (name, bind address)
        registry: Connection registry probed by the health check

    Returns:
        Configured FastMCP server with routes and tools registered

    Example:
        >>> server = create_mcp_server(get_settings(), registry)
        >>> await server.run_sse_async()
    """
    mcp = FastMCP(
        name=settings.app_name,
        instructions=SERVER_DESCRIPTION,
        host=settings.host,
        port=settings.port,
    )

    logger.info(
        "mcp_server_initialized",
        name=settings.app_name,
        version=SERVER_VERSION,
        exec_env=settings.exec_env,
    )

    register_liveness_route(mcp)
    register_health_check(mcp, registry)

    return mcp


def liveness_response() -> Response:
    """Build the liveness response; 400 with a JSON body on unexpected failure."""
    try:
        return PlainTextResponse(LIVENESS_BODY, status_code=200)
    except Exception as e:
        logger.error(
            "liveness_check_failed",
            error=str(e),
            error_type=type(e).__name__,
            exc_info=True,
        )
        error = ErrorResponse(
            code=400,
            message="Liveness check failed",
            data={"error_type": type(e).__name__, "reason": str(e)},
        )
        return JSONResponse(error.model_dump(), status_code=400)


def register_liveness_route(mcp: FastMCP) -> None:
    """
    Register GET /liveness on the server's HTTP app.

    Args:
        mcp: FastMCP server instance
    """

    @mcp.custom_route("/liveness", methods=["GET"])
    async def liveness(request: Request) -> Response:
        return liveness_response()


async def check_health(registry: ConnectionRegistry) -> HealthCheckResponse:
    """
    Probe the backend for every role and summarize.

    A primary failure makes the service unhealthy; a reader-only failure
    degrades it.
    """
    primary_ok = await registry.ping(ConnectionRole.PRIMARY)
    reader_ok = await registry.ping(ConnectionRole.READER)

    components = {
        "server": "healthy",
        "redis_primary": "healthy" if primary_ok else "unhealthy",
        "redis_reader": "healthy" if reader_ok else "unhealthy",
    }

    if not primary_ok:
        overall_status = "unhealthy"
    elif not reader_ok:
        overall_status = "degraded"
    else:
        overall_status = "healthy"

    logger.debug("health_check_performed", status=overall_status)

    return HealthCheckResponse(
        status=overall_status,
        version=SERVER_VERSION,
        components=components,
    )


def register_health_check(mcp: FastMCP, registry: ConnectionRegistry) -> None:
    """
    Register the health_check tool.

    Args:
        mcp: FastMCP server instance
        registry: Connection registry to probe
    """

    @mcp.tool()
    async def health_check() -> dict[str, Any]:
        """
        Health check endpoint for monitoring.

        Returns server health status and backend availability.
        """
        response = await check_health(registry)
        return response.model_dump()
