"""Observability helpers for the match-up scout.

Provides structured logging setup (structlog bridged onto stdlib logging)
and the ``trace_adapter`` decorator used on remote calls.
"""

import functools
import inspect
import json
import logging
import re
import sys
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, TypeVar, cast

import structlog
from pydantic import BaseModel, ConfigDict, Field
from structlog.contextvars import bind_contextvars, unbind_contextvars

# Type variable for generic decorator
F = TypeVar("F", bound=Callable[..., Any])

# Sensitive data redaction pattern
_SENSITIVE_KEY_RE = re.compile(
    r"(token|key|secret|password|pass|authorization|auth|client_secret)", re.IGNORECASE
)

_SHARED_PROCESSORS: list[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
]


def configure_logging(level: str = "INFO", *, json_output: bool | None = None) -> None:
    """Route structlog and stdlib logging through one structured pipeline.

    Args:
        level: Root log level name
        json_output: Force JSON rendering; defaults to JSON unless stderr is a TTY
    """
    if json_output is None:
        json_output = not sys.stderr.isatty()
    renderer: Any = (
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())


def _mask_scalar(value: Any) -> Any:
    if value is None:
        return None
    s = str(value)
    if len(s) <= 8:
        return "***"
    return f"{s[:4]}…{s[-3:]}"


def _redact_obj(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {
            k: (_mask_scalar(v) if _SENSITIVE_KEY_RE.search(str(k)) else _redact_obj(v))
            for k, v in obj.items()
        }
    if isinstance(obj, list):
        return [_redact_obj(i) for i in obj]
    return obj


def _serialize_value(value: Any, max_length: int = 1000) -> Any:
    """Safely serialize a value for logging, truncating long output."""
    try:
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json", exclude_unset=True)
        if isinstance(value, list) and value and isinstance(value[0], BaseModel):
            return f"<{len(value)} x {type(value[0]).__name__}>"

        json_str = json.dumps(value, default=str)
        if len(json_str) > max_length:
            return json_str[:max_length] + "..."
        return json.loads(json_str)

    except (TypeError, ValueError):
        str_repr = str(value)
        if len(str_repr) > max_length:
            return str_repr[:max_length] + "..."
        return str_repr


def _safe_serialize_kv(key: str, value: Any, max_length: int) -> Any:
    ser = _serialize_value(value, max_length)
    if _SENSITIVE_KEY_RE.search(str(key)):
        return _redact_obj(ser) if isinstance(ser, dict | list) else _mask_scalar(ser)
    return ser


class FunctionTrace(BaseModel):
    """Model for function execution trace data."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    function_name: str = Field(description="Fully qualified function name")
    execution_id: str = Field(description="Unique execution ID")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    duration_ms: float | None = Field(default=None)
    args: list[Any] = Field(default_factory=list)
    kwargs: dict[str, Any] = Field(default_factory=dict)
    is_success: bool = Field(default=True)
    error_type: str | None = Field(default=None)
    error_message: str | None = Field(default=None)
    metadata: dict[str, Any] = Field(default_factory=dict)


def trace_calls(
    *,
    capture_result: bool = True,
    capture_args: bool = True,
    max_arg_length: int = 1000,
    log_level: str = "DEBUG",
    add_metadata: dict[str, Any] | None = None,
) -> Callable[[F], F]:
    """Decorator for tracing coroutine functions.

    Logs arguments, duration, result and any exception through structlog.
    Exceptions are re-raised unchanged and results are returned unchanged.

    Example:
        >>> @trace_calls(capture_result=False)
        ... async def fetch(player_id: int) -> list: ...
    """

    def decorator(func: F) -> F:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"trace_calls only supports coroutine functions, got {func!r}")

        function_name = f"{func.__module__}.{func.__qualname__}"
        log = structlog.get_logger(func.__module__)

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            execution_id = f"{function_name}_{int(time.time() * 1000000)}"
            trace = FunctionTrace(
                function_name=function_name,
                execution_id=execution_id,
                metadata=add_metadata or {},
            )
            if capture_args:
                # Skip ``self`` for methods
                positional = args[1:] if args and hasattr(args[0], func.__name__) else args
                trace.args = [_serialize_value(arg, max_arg_length) for arg in positional]
                trace.kwargs = {
                    k: _safe_serialize_kv(k, v, max_arg_length) for k, v in kwargs.items()
                }

            bind_contextvars(execution_id=execution_id)
            emit = getattr(log, log_level.lower())
            emit(
                "call_started",
                function_name=function_name,
                args=trace.args if capture_args else None,
                kwargs=trace.kwargs if capture_args else None,
                **trace.metadata,
            )
            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                trace.duration_ms = (time.perf_counter() - start_time) * 1000
                trace.is_success = False
                trace.error_type = type(e).__name__
                trace.error_message = str(e)
                log.warning(
                    "call_failed",
                    function_name=function_name,
                    duration_ms=trace.duration_ms,
                    error_type=trace.error_type,
                    error_message=trace.error_message,
                    **trace.metadata,
                )
                raise
            else:
                trace.duration_ms = (time.perf_counter() - start_time) * 1000
                emit(
                    "call_succeeded",
                    function_name=function_name,
                    duration_ms=trace.duration_ms,
                    result=_redact_obj(_serialize_value(result, max_arg_length))
                    if capture_result
                    else None,
                    **trace.metadata,
                )
                return result
            finally:
                unbind_contextvars("execution_id")

        return cast(F, async_wrapper)

    return decorator


def trace_adapter(func: F) -> F:
    """Decorator specifically for adapter layer functions."""
    return trace_calls(
        capture_result=True,
        capture_args=True,
        log_level="DEBUG",
        add_metadata={"layer": "adapter"},
    )(func)
