from __future__ import annotations

import dataclasses
import inspect
import logging
import reprlib
import time
from functools import wraps
from typing import Any, Callable, Iterable, MutableMapping, Optional, Sequence, Set, TypeVar, Union, cast

import numpy as np

F = TypeVar("F", bound=Callable[..., Any])

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_MAX_ITEMS = 5
_MAX_LENGTH = 400

_short = reprlib.Repr()
_short.maxstring = 80
_short.maxother = 160
_short.maxlist = _MAX_ITEMS
_short.maxtuple = _MAX_ITEMS


def _describe_array(arr: np.ndarray) -> str:
    head = f"ndarray(shape={tuple(arr.shape)}, dtype={arr.dtype})"
    if arr.size == 0:
        return head
    if arr.size <= _MAX_ITEMS:
        return f"{head}, values={_short.repr(arr.tolist())}"
    if not np.issubdtype(arr.dtype, np.number):
        return head
    finite = arr[np.isfinite(arr)]
    summary = [head, f"nan={int(arr.size - finite.size)}"]
    if finite.size:
        summary.append(f"min={float(finite.min()):.6g}")
        summary.append(f"max={float(finite.max()):.6g}")
    return ", ".join(summary)


def _describe_record(value: Any) -> str:
    # scene objects are identified by id; coordinates matter for resolved points
    name = type(value).__name__
    ident = getattr(value, "id", None)
    if hasattr(value, "x") and hasattr(value, "y") and not hasattr(value, "expression"):
        return f"{name}({ident!s}, x={value.x!r}, y={value.y!r})"
    if ident is not None:
        return f"{name}({ident!s})"
    return _short.repr(value)


def _describe(value: Any) -> str:
    """Bounded repr used in call records."""

    if isinstance(value, np.ndarray):
        return _describe_array(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _describe_record(value)
    if isinstance(value, (list, tuple)):
        shown = [_describe(item) for item in value[:_MAX_ITEMS]]
        if len(value) > _MAX_ITEMS:
            shown.append(f"+{len(value) - _MAX_ITEMS} more")
        body = ", ".join(shown)
        return f"({body})" if isinstance(value, tuple) else f"[{body}]"
    if isinstance(value, dict):
        keys = sorted(map(str, value))
        shown = ", ".join(keys[:_MAX_ITEMS])
        more = f", +{len(keys) - _MAX_ITEMS} more" if len(keys) > _MAX_ITEMS else ""
        return f"dict({len(value)} keys: {shown}{more})"
    if isinstance(value, (set, frozenset)):
        return f"{type(value).__name__}(size={len(value)})"
    text = _short.repr(value)
    return text if len(text) <= _MAX_LENGTH else text[:_MAX_LENGTH] + "... (truncated)"


def _describe_call(args: Sequence[Any], kwargs: MutableMapping[str, Any]) -> str:
    described = [_describe(arg) for arg in args]
    described.extend(f"{key}={_describe(val)}" for key, val in kwargs.items())
    return ", ".join(described) if described else "no-args"


def debug_log_call(
    logger: logging.Logger, *, name: Optional[str] = None, log_result: bool = True
) -> Callable[[F], F]:
    """Log entry, exit with elapsed time, and exceptions of ``func`` at DEBUG."""

    def decorator(func: F) -> F:
        if getattr(func, "_debug_logging_wrapped", False):
            return func
        label = name or getattr(func, "__qualname__", func.__name__)

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            if not logger.isEnabledFor(logging.DEBUG):
                return func(*args, **kwargs)
            logger.debug("Entering %s (%s)", label, _describe_call(args, kwargs))
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception:
                logger.exception("Exception in %s", label)
                raise
            elapsed_ms = (time.perf_counter() - started) * 1000.0
            if log_result:
                logger.debug("Exiting %s after %.2f ms -> %s", label, elapsed_ms, _describe(result))
            else:
                logger.debug("Exiting %s after %.2f ms", label, elapsed_ms)
            return result

        wrapper._debug_logging_wrapped = True  # type: ignore[attr-defined]
        return cast(F, wrapper)

    return decorator


def apply_debug_logging(
    namespace: MutableMapping[str, Any],
    *,
    logger: Optional[logging.Logger] = None,
    skip: Optional[Iterable[str]] = None,
) -> None:
    """Wrap the public functions defined in a module namespace (pass ``globals()``)."""

    module_name = namespace.get("__name__")
    target = logger or logging.getLogger(module_name if isinstance(module_name, str) else __name__)
    excluded: Set[str] = set(skip or ())
    for attr, value in list(namespace.items()):
        if attr.startswith("_") or attr in excluded:
            continue
        if not inspect.isfunction(value) or value.__module__ != module_name:
            continue
        namespace[attr] = debug_log_call(target, name=attr)(value)


def configure_logging(level: Union[int, str] = logging.INFO, *, logger_name: str = "geograph") -> logging.Logger:
    """Attach a stream handler to the package logger; repeated calls only change the level."""

    package_logger = logging.getLogger(logger_name)
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"unknown log level {level!r}")
        level = resolved
    package_logger.setLevel(level)
    if not any(getattr(handler, "_geograph_handler", False) for handler in package_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        handler._geograph_handler = True  # type: ignore[attr-defined]
        package_logger.addHandler(handler)
    return package_logger


__all__ = ["apply_debug_logging", "configure_logging", "debug_log_call"]
