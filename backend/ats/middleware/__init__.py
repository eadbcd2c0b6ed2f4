"""
Middleware Package

Contains FastAPI middleware for:
- Prometheus metrics collection
"""

from ats.middleware.metrics import (
    PrometheusMiddleware,
    setup_metrics,
    record_admission_rejection,
    record_cleanup_failure,
)

__all__ = [
    "PrometheusMiddleware",
    "setup_metrics",
    "record_admission_rejection",
    "record_cleanup_failure",
]
