"""
Core middleware package.

- Error handling that renders every failure as the dashboard's error envelope
- Structured logging with candidate PII masking
"""

from core.middleware.error_handling import (
    ErrorHandlingMiddleware,
    SimulatedFault,
    StorageNotReady,
    setup_error_handlers,
    sanitize_error_message,
)

from core.middleware.logging import (
    StructuredLoggingMiddleware,
    setup_logging,
)

__all__ = [
    # Error handling
    "ErrorHandlingMiddleware",
    "SimulatedFault",
    "StorageNotReady",
    "setup_error_handlers",
    "sanitize_error_message",
    # Logging
    "StructuredLoggingMiddleware",
    "setup_logging",
]
