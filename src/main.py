"""
Cache Service - Main Entry Point

Initializes logging, the backend connection registry and the FastMCP
server, then runs the server inside the Apify Actor context.
"""
import asyncio

from apify import Actor
from mcp.server.fastmcp import FastMCP

from src.cache.connection import ConnectionRegistry
from src.config import get_settings
from src.server import SERVER_VERSION, create_mcp_server
from src.utils.logger import get_logger, setup_logging

# Initialize logger (will be reconfigured in main())
logger = get_logger(__name__)


async def run_server(mcp: FastMCP, transport: str) -> None:
    """Run the server on the configured transport until shutdown."""
    if transport == "stdio":
        await mcp.run_stdio_async()
    elif transport == "streamable-http":
        await mcp.run_streamable_http_async()
    else:
        await mcp.run_sse_async()


async def main() -> None:
    """
    Main entry point.

    Initializes:
        1. Structured logging
        2. Backend connection registry
        3. FastMCP server (liveness route + health_check tool)

    Any unrecovered error propagates and the process exits non-zero.
    """
    settings = get_settings()
    setup_logging(
        level=settings.log_level,
        redis_debug=settings.redis_debug_mode,
        dev_mode=settings.environment == "development",
        app_name=settings.app_name,
        exec_env=settings.exec_env,
    )

    logger.info(
        "server_starting",
        app_name=settings.app_name,
        version=SERVER_VERSION,
        exec_env=settings.exec_env,
        environment=settings.environment,
        port=settings.port,
    )

    registry = ConnectionRegistry(settings)
    mcp = create_mcp_server(settings, registry)

    async with Actor:
        logger.info(
            "starting_mcp_server",
            transport=settings.transport,
            host=settings.host,
            port=settings.port,
        )

        try:
            await run_server(mcp, settings.transport)
        except Exception as e:
            logger.error(
                "server_error",
                error=str(e),
                exc_info=True,
            )
            raise
        finally:
            await registry.close()
            logger.info("server_shutdown_complete")


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
