from __future__ import annotations

from starlette.requests import Request


def safe_route_label(request: Request) -> str:
    """
    Return the matched route template, or "unmatched".

    Raw paths are never used as labels so arbitrary URLs cannot grow log
    fields or metric cardinality.
    """

    route = request.scope.get("route")
    path = getattr(route, "path", None)
    if isinstance(path, str) and path:
        return path
    return "unmatched"
