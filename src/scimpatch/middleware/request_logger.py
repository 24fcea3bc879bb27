import json
import time
from typing import Any, Callable, Iterable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from scimpatch.utils import logger


FILTERED = "[FILTERED]"


def filter_parameters(params: Any, filtered_keys: Iterable[str]) -> Any:
    """Mask values whose key looks like a secret, at any depth."""
    keys = {key.lower() for key in filtered_keys}
    if isinstance(params, dict):
        return {
            key: FILTERED if key.lower() in keys else filter_parameters(value, keys)
            for key, value in params.items()
        }
    if isinstance(params, list):
        return [filter_parameters(item, keys) for item in params]
    return params


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path and filtered params of every non-GET request"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method == "GET":
            return await call_next(request)

        start_time = time.time()

        params: Any = dict(request.query_params)
        body = await request.body()
        if body:
            try:
                params = {**params, **json.loads(body)}
            except (json.JSONDecodeError, TypeError, UnicodeDecodeError):
                logger.debug(f"Request body for {request.url.path} is not a JSON object")

        details = {
            "method": request.method,
            "fullpath": str(request.url.path) + (f"?{request.url.query}" if request.url.query else ""),
            "params": filter_parameters(params, request.app.state.settings.filtered_params),
        }
        logger.info(json.dumps(details))

        response = await call_next(request)

        duration = time.time() - start_time
        logger.info(f"← {response.status_code} {request.method} {request.url.path} " f"({duration:.3f}s)")

        return response
