"""
Observability Module for the Archive Service

Provides:
- Structured logging with correlation IDs
- Stage timing helpers for the archive pipeline
"""

from core.observability.logging import (
    configure_logging,
    get_logger,
    CorrelationContext,
    get_correlation_context,
    with_correlation,
    log_stage_start,
    log_stage_complete,
    log_stage_error,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "CorrelationContext",
    "get_correlation_context",
    "with_correlation",
    "log_stage_start",
    "log_stage_complete",
    "log_stage_error",
]
