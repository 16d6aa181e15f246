"""
Centralized exception handling decorator for API route functions.

The :func:`handle_exceptions` decorator wraps an endpoint handler and turns
uncaught exceptions into :class:`fastapi.HTTPException` responses.
HTTPExceptions raised by the handler pass through untouched.  Engine errors
map onto the status code that describes them:

* :class:`~engine.exceptions.NotFound` -> ``404``
* :class:`~engine.exceptions.InvalidStateTransition` -> ``409``
* :class:`~engine.exceptions.UpstreamUnavailable` -> ``503``

Everything else becomes a ``500`` with the exception message as detail.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import inspect
import logging
from functools import wraps
from typing import Any, Callable, Dict, Type, TypeVar, cast

from fastapi import HTTPException, status

from engine.exceptions import InvalidStateTransition, NotFound, UpstreamUnavailable

log = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

STATUS_BY_ERROR: Dict[Type[Exception], int] = {
    NotFound: status.HTTP_404_NOT_FOUND,
    InvalidStateTransition: status.HTTP_409_CONFLICT,
    UpstreamUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def to_http_exception(exc: Exception) -> HTTPException:
    for error_type, code in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return HTTPException(status_code=code, detail=str(exc))
    log.exception("Unhandled error in route: %s", exc)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def handle_exceptions(func: F) -> F:
    """Decorator that converts uncaught exceptions to HTTP errors.

    Works with both regular and async functions.
    """

    if inspect.iscoroutinefunction(func):
        @wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except HTTPException:
                raise
            except Exception as exc:
                raise to_http_exception(exc) from exc

        return cast(F, async_wrapper)

    @wraps(func)
    def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except HTTPException:
            raise
        except Exception as exc:
            raise to_http_exception(exc) from exc

    return cast(F, sync_wrapper)
