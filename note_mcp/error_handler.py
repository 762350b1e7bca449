"""Translation of internal errors into MCP protocol errors.

Client errors (bad URL, foreign collection, unsafe path, missing note,
unknown mode) become ``INVALID_PARAMS``; everything else becomes
``INTERNAL_ERROR``. The message sent to the client is the error's
``user_message`` prefixed with its stable code.
"""

import functools
import inspect

from mcp import McpError
from mcp.types import INTERNAL_ERROR
from mcp.types import INVALID_PARAMS
from mcp.types import ErrorData

from .exceptions import NoteMCPError


def error_code_for(error: Exception) -> int:
    """JSON-RPC error code for an exception raised by a tool."""
    if isinstance(error, NoteMCPError) and error.is_client_error:
        return INVALID_PARAMS
    return INTERNAL_ERROR


def to_mcp_error(error: Exception) -> McpError:
    """Wrap ``error`` in an ``McpError`` carrying the mapped code."""
    if isinstance(error, NoteMCPError):
        message = f"{error.error_code}: {error.user_message}"
        data = error.to_dict()
    else:
        message = f"Unexpected error: {error}"
        data = {"error_type": type(error).__name__}
    return McpError(ErrorData(code=error_code_for(error), message=message, data=data))


def handle_tool_errors(func):
    """Re-raise every ``NoteMCPError`` from an async tool as an ``McpError``."""
    if not inspect.iscoroutinefunction(func):
        raise TypeError("handle_tool_errors only wraps async tools")

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except NoteMCPError as e:
            raise to_mcp_error(e) from e

    return wrapper
