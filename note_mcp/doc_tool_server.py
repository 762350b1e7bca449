"""MCP Server for Note Translation.

This module provides a FastMCP-based MCP server over a directory of Markdown
notes. It exposes tools for translating notes (with automatic backups) and
for reading and searching them.
"""

import argparse
import json
import logging
import sys

from mcp.server import FastMCP
from starlette.requests import Request
from starlette.responses import Response

from .config import get_settings
from .metrics_config import METRICS_ENABLED
from .metrics_config import ensure_metrics_initialized
from .metrics_config import get_metrics_export
from .metrics_config import get_metrics_summary
from .models import NoteContent
from .models import SearchResult
from .models import TranslationMode
from .models import TranslationOutcome
from .tools import register_note_tools
from .tools import register_translate_tools

logger = logging.getLogger(__name__)

mcp_server = FastMCP(
    name="NoteTranslationTools",
    instructions=(
        "Tools for translating Markdown notes addressed by obsidian://open URLs. "
        "Every translation writes a timestamped backup beside the note first."
    ),
)

# Register tools from modular architecture
register_translate_tools(mcp_server)
register_note_tools(mcp_server)

__all__ = [
    # Models and types
    "NoteContent",
    "SearchResult",
    "TranslationMode",
    "TranslationOutcome",
    # MCP Server (primary export)
    "mcp_server",
]


@mcp_server.custom_route("/health", methods=["GET"], name="health")
async def health_check(request: Request) -> Response:
    """Health check endpoint to verify server readiness."""
    return Response(status_code=200)


@mcp_server.custom_route("/metrics", methods=["GET"], name="metrics")
async def metrics_endpoint(request: Request) -> Response:
    """Prometheus metrics endpoint for tool and translation counters."""
    metrics_data, content_type = get_metrics_export()
    return Response(content=metrics_data, status_code=200, media_type=content_type)


@mcp_server.custom_route("/metrics/summary", methods=["GET"], name="metrics_summary")
async def metrics_summary_endpoint(request: Request) -> Response:
    """JSON summary of the metrics configuration and status."""
    return Response(
        content=json.dumps(get_metrics_summary(), indent=2),
        status_code=200,
        media_type="application/json",
    )


def _echo(message: str) -> None:
    # stdout belongs to the stdio transport
    print(message, file=sys.stderr)


# --- Main Server Execution ---
def main():
    """Run the main entry point for the server with argument parsing."""
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Note Translation MCP Server")
    parser.add_argument(
        "transport",
        choices=["sse", "stdio"],
        default="stdio",
        nargs="?",
        help="Transport: 'sse' for HTTP SSE or 'stdio' for standard I/O (default: stdio)",
    )
    parser.add_argument(
        "--host",
        default=settings.sse_host,
        help=f"Host to bind to for SSE transport (default: {settings.sse_host})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.sse_port,
        help=f"Port to bind to for SSE transport (default: {settings.sse_port})",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level,
        stream=sys.stderr,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        settings.validate_required()
    except ValueError as e:
        _echo(f"Configuration error: {e}")
        sys.exit(1)

    _echo(f"Note tool server starting. Tools exposed by '{mcp_server.name}':")
    _echo(f"Serving notes from: {settings.notes_root_path}")
    _echo(f"Collection: {settings.configured_collection}")
    _echo(f"Backup retention: {settings.backup_retention_days} days")

    if settings.enable_metrics:
        ensure_metrics_initialized()
    status = "enabled" if METRICS_ENABLED and settings.enable_metrics else "disabled"
    _echo(f"Metrics: {status}")

    if args.transport == "stdio":
        _echo("MCP server running with stdio transport. Waiting for client connection...")
        mcp_server.run(transport="stdio")
    else:
        _echo(f"MCP server running with HTTP SSE transport on {args.host}:{args.port}")
        _echo(f"SSE endpoint: http://{args.host}:{args.port}/sse")
        _echo(f"Health endpoint: http://{args.host}:{args.port}/health")
        _echo(f"Metrics endpoint: http://{args.host}:{args.port}/metrics")
        # Update server settings before running
        mcp_server.settings.host = args.host
        mcp_server.settings.port = args.port
        mcp_server.run(transport="sse")


if __name__ == "__main__":
    main()
