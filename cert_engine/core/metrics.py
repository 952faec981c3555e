"""Prometheus metric inventory for certificate-service.

Every metric the service exports is declared here so there is one place to
look when building dashboards.  Modules import the metric they own and
increment it at the point of action.

Label values are kept to small closed sets (tier keys, error kinds) so the
series count stays bounded.  Never label by subject, code or number.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by RequestContextMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    # Progress aggregation fans out to seven record stores, so the upper
    # buckets matter more here than for a plain CRUD service.
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Certification metrics
# ---------------------------------------------------------------------------

CREDENTIALS_ISSUED = Counter(
    "credentials_issued_total",
    "Credentials successfully issued",
    ["tier"],
)

CLAIMS_REJECTED = Counter(
    "credential_claims_rejected_total",
    "Credential claims rejected, by error kind",
    ["reason"],  # already_issued|requirements_not_met|invalid_tier|...
)

VERIFICATIONS = Counter(
    "credential_verifications_total",
    "Public verification lookups by result",
    ["result"],  # "valid" or "not_found"
)

IDENTIFIER_CONFLICTS = Counter(
    "identifier_conflicts_total",
    "Unique-index collisions hit while allocating credential identifiers",
    ["field"],  # "verification_code" or "credential_number"
)

PROGRESS_COMPUTATIONS = Histogram(
    "progress_computation_seconds",
    "Time spent aggregating activity records into a progress report",
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)

RATE_LIMIT_HITS = Counter(
    "rate_limit_hits_total",
    "Requests rejected by rate limiting (429s)",
    ["key_type"],  # "user" or "ip"
)
