import datetime
import enum
import functools
import inspect
import json
import logging
import os
import traceback
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from .metrics_config import record_tool_call_error
from .metrics_config import record_tool_call_start
from .metrics_config import record_tool_call_success


class ErrorCategory(enum.Enum):
    """Severity classification for structured error logs."""

    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


_CATEGORY_LEVELS = {
    ErrorCategory.CRITICAL: logging.CRITICAL,
    ErrorCategory.ERROR: logging.ERROR,
    ErrorCategory.WARNING: logging.WARNING,
    ErrorCategory.INFO: logging.INFO,
}

# Attributes every LogRecord carries; anything else came in through ``extra``.
_STANDARD_RECORD_ATTRS = set(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


class StructuredLogFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.datetime.fromtimestamp(
                record.created, tz=datetime.timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_"):
                log_entry[key] = value

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            log_entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
            }

        return json.dumps(log_entry, default=str, ensure_ascii=False)


# --- Logging Setup ---
log_dir = Path(os.environ.get("NOTE_MCP_LOG_DIR", Path(__file__).resolve().parent))
log_dir.mkdir(parents=True, exist_ok=True)

mcp_call_logger = logging.getLogger("mcp_call_logger")
mcp_call_logger.setLevel(logging.INFO)
if not mcp_call_logger.handlers:
    # 10MB per file, 5 files kept
    file_handler = RotatingFileHandler(
        log_dir / "mcp_calls.log", maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
    )
    file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    mcp_call_logger.addHandler(file_handler)
mcp_call_logger.propagate = False

error_logger = logging.getLogger("error_logger")
error_logger.setLevel(logging.INFO)
if not error_logger.handlers:
    error_handler = RotatingFileHandler(
        log_dir / "errors.log", maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
    )
    error_handler.setFormatter(StructuredLogFormatter())
    error_logger.addHandler(error_handler)
error_logger.propagate = False


def log_structured_error(
    category: ErrorCategory,
    message: str,
    exception: Exception | None = None,
    context: dict[str, Any] | None = None,
    operation: str | None = None,
    **kwargs,
) -> None:
    """Write a structured entry to the error log.

    ``context`` and any extra keyword arguments are flattened into the JSON
    record so that they can be filtered on directly.
    """
    extra: dict[str, Any] = {"error_category": category.value}
    if operation:
        extra["operation"] = operation
    if context:
        extra.update(context)
    extra.update(kwargs)
    if exception is not None:
        extra.setdefault("exception_type", type(exception).__name__)
        error_code = getattr(exception, "error_code", None)
        if error_code:
            extra.setdefault("error_code", error_code)

    error_logger.log(
        _CATEGORY_LEVELS[category],
        message,
        exc_info=exception,
        extra=extra,
    )


def safe_operation(
    operation_name: str,
    func,
    *args,
    error_category: ErrorCategory = ErrorCategory.ERROR,
    **kwargs,
) -> tuple[bool, Any, Exception | None]:
    """Run ``func`` and report ``(success, result, error)`` instead of raising."""
    try:
        return True, func(*args, **kwargs), None
    except Exception as e:
        log_structured_error(
            category=error_category,
            message=f"Operation '{operation_name}' failed: {e}",
            exception=e,
            operation=operation_name,
        )
        return False, None, e


def _format_value(value: Any) -> str:
    if hasattr(value, "model_dump_json"):
        return value.model_dump_json(indent=None, exclude_none=True)
    return repr(value)


def _format_call(args: tuple, kwargs: dict) -> str:
    try:
        logged_args = [_format_value(arg) for arg in args]
        logged_kwargs = {k: _format_value(v) for k, v in kwargs.items()}
        return f"args={logged_args}, kwargs={logged_kwargs}"
    except Exception as e:
        return f"args/kwargs logging error: {e}"


def _format_result(result: Any) -> str:
    try:
        if isinstance(result, list) and result and hasattr(result[0], "model_dump_json"):
            return "[" + ", ".join(_format_value(item) for item in result) + "]"
        return _format_value(result)
    except Exception as e:
        return f"Result logging error: {e}"


def _result_size(result: Any) -> int:
    if isinstance(result, str):
        return len(result.encode("utf-8"))
    return len(str(result)) if result is not None else 0


def _log_failure(func_name: str, start_time: float | None, e: Exception) -> None:
    record_tool_call_error(func_name, start_time, e)
    mcp_call_logger.error(f"Tool {func_name} raised exception: {e}", exc_info=True)
    log_structured_error(
        category=ErrorCategory.ERROR,
        message=f"Tool {func_name} failed: {e}",
        exception=e,
        operation="tool_execution",
        function=func_name,
    )


# --- Decorator for Logging MCP Calls with Metrics ---
def log_mcp_call(func):
    """Log arguments, results and failures of an MCP tool (sync or async)."""
    func_name = getattr(func, "__name__", "unknown_function")

    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = record_tool_call_start(func_name, args, kwargs)
            mcp_call_logger.info(f"Calling tool: {func_name} with {_format_call(args, kwargs)}")
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                _log_failure(func_name, start_time, e)
                raise
            record_tool_call_success(func_name, start_time, _result_size(result))
            mcp_call_logger.info(f"Tool {func_name} returned: {_format_result(result)}")
            return result

        return async_wrapper

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = record_tool_call_start(func_name, args, kwargs)
        mcp_call_logger.info(f"Calling tool: {func_name} with {_format_call(args, kwargs)}")
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            _log_failure(func_name, start_time, e)
            raise
        record_tool_call_success(func_name, start_time, _result_size(result))
        mcp_call_logger.info(f"Tool {func_name} returned: {_format_result(result)}")
        return result

    return wrapper
