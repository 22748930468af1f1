"""MCP server exposing the timer operations as tools.

Usage::

    tokentimer serve

The store is opened once when the server starts, handed to a
:class:`TimerService`, and closed when the server stops.
"""

from __future__ import annotations

from typing import Annotated, Literal

import structlog
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

from tokentimer.config import Settings
from tokentimer.core.service import TimerService
from tokentimer.core.store import TimerStore

logger = structlog.get_logger(__name__)

SERVER_NAME = "Simple Timer"

INSTRUCTIONS = (
    "Interval timing using token-based time tracking. Start a timer with a "
    "unique token, check how much time has elapsed since it started, delete "
    "it when done, or list all active timers."
)


def create_server(service: TimerService) -> FastMCP:
    """Create a FastMCP server whose tools delegate to *service*."""
    mcp = FastMCP(SERVER_NAME, instructions=INSTRUCTIONS)

    @mcp.tool()
    def start_timer(
        token: Annotated[str, Field(description="A unique string identifier for the timer.")],
    ) -> str:
        """Start a timer for a token. An existing timer is left untouched."""
        return service.start(token).message

    @mcp.tool()
    def check_timer(
        token: Annotated[str, Field(description="The unique string identifier for the timer.")],
        format: Annotated[
            Literal["raw", "human_readable"],
            Field(
                description=(
                    "Format of the elapsed time. 'raw' for milliseconds, "
                    "'human_readable' for a descriptive string."
                )
            ),
        ] = "raw",
    ) -> str:
        """Report the time elapsed since a token's timer was started."""
        return service.check(token, format).message

    @mcp.tool()
    def delete_timer(
        token: Annotated[str, Field(description="The unique string identifier for the timer.")],
    ) -> str:
        """Delete a token's timer."""
        return service.delete(token).message

    @mcp.tool()
    def list_timers() -> list[dict[str, str]]:
        """List all active timers with their ISO-8601 start times."""
        response = service.list_timers()
        if not response.ok:
            raise ToolError(response.message)
        return list(response.entries)

    return mcp


def serve(settings: Settings) -> None:
    """Open the configured store and run the MCP server on stdio."""
    with TimerStore(settings.db_path) as store:
        logger.info("server_starting", name=SERVER_NAME, db_path=store.path)
        create_server(TimerService(store)).run(transport="stdio")
    logger.info("server_stopped", name=SERVER_NAME)
