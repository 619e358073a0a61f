import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match


def route_label(request: Request) -> str:
    """Path template of the matched route, so secret event tokens stay out of the logs.

    Requests that match no route are labelled ``<unmatched>``.
    """
    for route in request.app.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", request.url.path)
    return "<unmatched>"


class HTTPLogMiddleware(BaseHTTPMiddleware):
    """Debug log of every request: route template, status and duration."""

    def __init__(self, app, logger_name: str = "datevote.http"):
        super().__init__(app)
        self._logger = logging.getLogger(logger_name)

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        route = route_label(request)
        try:
            response: Response = await call_next(request)
        except Exception as e:
            dur_ms = int((time.perf_counter() - start) * 1000)
            self._logger.warning("request failed %s %s dur_ms=%s err=%r", request.method, route, dur_ms, e)
            raise
        dur_ms = int((time.perf_counter() - start) * 1000)
        level = logging.INFO if response.status_code >= 400 else logging.DEBUG
        self._logger.log(level, "%s %s -> %s dur_ms=%s", request.method, route, response.status_code, dur_ms)
        return response
