"""
Contains custom FastAPI middleware for the payload decoder daemon.

Middleware functions in this module intercept HTTP requests for metrics collection.
"""

import time

from fastapi import Request

from payload_daemon.metrics import HTTP_LATENCY, HTTP_REQUESTS


def _endpoint_label(request: Request) -> str:
    # Route templates keep label cardinality bounded (/api/catalog/{ordinal}).
    route = request.scope.get("route")
    route_path = getattr(route, "path", None)
    return route_path or request.url.path


async def prometheus_http_middleware(request: Request, call_next):
    """
    FastAPI middleware to record Prometheus metrics for HTTP requests.

    Measures the latency of each request and increments a counter labeled by
    method, endpoint (route template when matched, raw path otherwise) and
    status code.

    Args:
        request: The incoming FastAPI Request object.
        call_next: A function to call to process the request and get the response.

    Returns:
        The response object from the next handler in the chain.
    """
    start = time.perf_counter()
    response = await call_next(request)
    latency = time.perf_counter() - start

    endpoint = _endpoint_label(request)
    method = request.method

    HTTP_REQUESTS.labels(method=method, endpoint=endpoint, status_code=response.status_code).inc()
    HTTP_LATENCY.labels(method=method, endpoint=endpoint).observe(latency)
    return response
