"""Prometheus metrics definitions for the nightlife busy-ness server.

Exposes metrics for:
1. HTTP API metrics (requests, latency, errors)
2. Live data caches (hits, misses, compute latency)
3. Snapshot store and aggregation
4. SerpAPI client metrics (calls, latency, errors)
5. Background job metrics (runs, duration)
"""
from prometheus_client import Counter, Histogram, Gauge, Info

# =============================================================================
# HTTP API METRICS
# =============================================================================

HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

HTTP_REQUESTS_IN_PROGRESS = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests currently being processed",
    ["method", "endpoint"],
)

HTTP_RESPONSE_SIZE_BYTES = Histogram(
    "http_response_size_bytes",
    "HTTP response body size in bytes",
    ["method", "endpoint"],
    buckets=(100, 500, 1000, 5000, 10000, 50000, 100000, 500000),
)

# =============================================================================
# CACHE METRICS
# =============================================================================

CACHE_REQUESTS_TOTAL = Counter(
    "cache_requests_total",
    "Cache lookups through get_or_compute",
    ["cache", "result"],  # result: hit, miss
)

CACHE_COMPUTE_DURATION_SECONDS = Histogram(
    "cache_compute_duration_seconds",
    "Time spent computing values on cache misses",
    ["cache"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0),
)

CACHE_ENTRIES_PURGED_TOTAL = Counter(
    "cache_entries_purged_total",
    "Expired entries removed by the periodic purge",
    ["cache"],
)

# =============================================================================
# SNAPSHOT STORE & AGGREGATION METRICS
# =============================================================================

SNAPSHOT_STORE_ERRORS_TOTAL = Counter(
    "snapshot_store_errors_total",
    "Snapshot store operations that failed",
    ["operation"],  # operation: fetch, add, count
)

SNAPSHOTS_WRITTEN_TOTAL = Counter(
    "snapshots_written_total",
    "Occupancy snapshots written to the store",
    ["source"],  # source: live, seed, estimated
)

AGGREGATION_DURATION_SECONDS = Histogram(
    "aggregation_duration_seconds",
    "Time spent aggregating a snapshot window",
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
)

AGGREGATION_SNAPSHOTS = Histogram(
    "aggregation_snapshots",
    "Number of snapshots in aggregated windows",
    buckets=(0, 1, 10, 24, 100, 500, 1000, 5000),
)

# =============================================================================
# SERPAPI CLIENT METRICS
# =============================================================================

SERPAPI_API_CALLS_TOTAL = Counter(
    "serpapi_api_calls_total",
    "Total number of SerpAPI calls",
    ["endpoint", "status"],  # status: success, error
)

SERPAPI_API_CALL_DURATION_SECONDS = Histogram(
    "serpapi_api_call_duration_seconds",
    "SerpAPI call latency in seconds",
    ["endpoint"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

SERPAPI_API_ERRORS_TOTAL = Counter(
    "serpapi_api_errors_total",
    "Total number of SerpAPI errors",
    ["endpoint", "error_type"],  # error_type: http_error, timeout, connection_error, quota_exceeded
)

POPULAR_TIMES_RESULTS = Counter(
    "popular_times_results_total",
    "Popular times responses by data source",
    ["source"],  # source: live, estimated
)

# =============================================================================
# BACKGROUND JOB METRICS
# =============================================================================

BACKGROUND_JOB_RUNS_TOTAL = Counter(
    "background_job_runs_total",
    "Total number of background job runs",
    ["job_name", "status"],  # status: success, error
)

BACKGROUND_JOB_DURATION_SECONDS = Histogram(
    "background_job_duration_seconds",
    "Background job execution duration in seconds",
    ["job_name"],
    buckets=(0.001, 0.01, 0.1, 1.0, 5.0, 10.0, 30.0, 60.0),
)

BACKGROUND_JOB_LAST_RUN_TIMESTAMP = Gauge(
    "background_job_last_run_timestamp_seconds",
    "Unix timestamp of the last successful job run",
    ["job_name"],
)

# =============================================================================
# APPLICATION INFO
# =============================================================================

APP_INFO = Info(
    "nightlife",
    "Nightlife busy-ness server information",
)

APP_INFO.info({
    "version": "1.0.0",
    "description": "Venue discovery and occupancy aggregation service",
})
