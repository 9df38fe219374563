from time import perf_counter
from flask import Blueprint, current_app, g, request, Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

metrics_bp = Blueprint("metrics", __name__)

# HTTP metrics, labelled by Flask endpoint ("api.list_movies") to keep cardinality fixed
REQUEST_COUNT = Counter(
    "moviecatalog_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "http_status"],
)
REQUEST_LATENCY = Histogram(
    "moviecatalog_request_latency_seconds",
    "Latency of HTTP requests in seconds",
    ["endpoint"],
)
ERROR_COUNT = Counter(
    "moviecatalog_errors_total",
    "Total HTTP 5xx responses",
    ["endpoint"],
)

# Catalog metrics, recorded by the movie routes
MOVIE_WRITES = Counter(
    "moviecatalog_movie_writes_total",
    "Committed movie mutations",
    ["operation"],  # create / update / delete
)
LISTING_RESULTS = Histogram(
    "moviecatalog_listing_results",
    "Number of movies returned by a listing call",
    ["sort_by", "filtered"],
    buckets=(0, 1, 5, 10, 25, 50, 100, 250, 1000),
)


@metrics_bp.before_app_request
def _start_timer():
    g._start_time = perf_counter()


@metrics_bp.after_app_request
def _record_metrics(response):
    try:
        endpoint = (request.endpoint or "unknown").lower()
        status_code = response.status_code
        REQUEST_COUNT.labels(request.method, endpoint, status_code).inc()

        start_time = getattr(g, "_start_time", None)
        if start_time is not None:
            REQUEST_LATENCY.labels(endpoint).observe(perf_counter() - start_time)

        if status_code >= 500:
            ERROR_COUNT.labels(endpoint).inc()
    except Exception:
        # metrics must never break the response
        current_app.logger.warning("Failed to record request metrics", exc_info=True)
    return response


@metrics_bp.get("/metrics")
def metrics():
    """Prometheus text exposition of the process-wide registry."""
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
