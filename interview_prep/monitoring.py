# interview_prep/monitoring.py
"""
Centralized monitoring: Prometheus metrics, structured JSON logging, optional Sentry.

Env vars:
- PROMETHEUS_ENABLED (default: true)
- SENTRY_DSN (optional)
- LOG_AS_JSON (default: true)
- LOG_LEVEL (default: INFO)
- ENVIRONMENT (default: development)
"""

import os
import logging
import time
from typing import Tuple

from prometheus_client import (
    Counter, Histogram,
    generate_latest, CONTENT_TYPE_LATEST, REGISTRY,
)

# Optional imports — degrade gracefully if not installed
try:
    from pythonjsonlogger import jsonlogger
    _HAS_JSON_LOGGER = True
except ImportError:
    _HAS_JSON_LOGGER = False

try:
    import sentry_sdk
    _HAS_SENTRY = True
except ImportError:
    _HAS_SENTRY = False

# --- ENV flags
PROMETHEUS_ENABLED = os.getenv("PROMETHEUS_ENABLED", "true").lower() in ("1", "true", "yes")
SENTRY_DSN = os.getenv("SENTRY_DSN", None)
LOG_AS_JSON = os.getenv("LOG_AS_JSON", "true").lower() in ("1", "true", "yes")
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")


# --- Logger setup
def setup_logger(name: str = "interview-prep", level: int = None) -> logging.Logger:
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO")) if level is None else level
    logger = logging.getLogger(name)
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        if LOG_AS_JSON and _HAS_JSON_LOGGER:
            fmt = jsonlogger.JsonFormatter(
                "%(asctime)s %(levelname)s %(name)s %(message)s"
            )
            handler.setFormatter(fmt)
        logger.addHandler(handler)
    return logger


def null_logger(name: str = "interview-prep.null") -> logging.Logger:
    """Logger that drops everything. Handy for tests and embedding."""
    logger = logging.getLogger(name)
    if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
        logger.addHandler(logging.NullHandler())
    logger.propagate = False
    return logger


logger = setup_logger()

# --- Sentry (optional)
if SENTRY_DSN and _HAS_SENTRY:
    sentry_sdk.init(dsn=SENTRY_DSN, environment=ENVIRONMENT)
    logger.info("Sentry initialized")


# --- Prometheus metrics
REQUEST_COUNT = Counter(
    "prep_requests_total",
    "Total API requests",
    ["method", "endpoint", "status"],
)

REQUEST_LATENCY = Histogram(
    "prep_request_latency_seconds",
    "Request latency in seconds",
    ["endpoint"],
)

COMPLETION_COUNTER = Counter(
    "prep_completion_total",
    "Completion proxy outcomes",
    ["outcome"],
)

COMPLETION_LATENCY = Histogram(
    "prep_completion_upstream_latency_seconds",
    "Upstream completion latency",
)

EXTRACTION_SOURCE = Counter(
    "prep_completion_extraction_total",
    "Which envelope field supplied the generated text",
    ["source"],
)

SANITIZER_COUNTER = Counter(
    "prep_sanitizer_total",
    "Question list sanitizer outcomes",
    ["outcome"],
)


# --- Helper wrappers (never crash the app)
def observe_request(start_ts: float, endpoint: str, method: str, status: str):
    try:
        REQUEST_LATENCY.labels(endpoint=endpoint).observe(time.time() - start_ts)
        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status=status).inc()
    except Exception:
        pass


def observe_completion(start_ts: float, outcome: str):
    try:
        COMPLETION_LATENCY.observe(time.time() - start_ts)
        COMPLETION_COUNTER.labels(outcome=outcome).inc()
    except Exception:
        pass


def inc_completion(outcome: str):
    try:
        COMPLETION_COUNTER.labels(outcome=outcome).inc()
    except Exception:
        pass


def inc_extraction_source(source: str):
    try:
        EXTRACTION_SOURCE.labels(source=source).inc()
    except Exception:
        pass


def inc_sanitizer(outcome: str):
    try:
        SANITIZER_COUNTER.labels(outcome=outcome).inc()
    except Exception:
        pass


def prometheus_metrics_response() -> Tuple[bytes, str]:
    """Return (body_bytes, content_type) for Prometheus scrape."""
    try:
        return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
    except Exception:
        return b"", CONTENT_TYPE_LATEST
