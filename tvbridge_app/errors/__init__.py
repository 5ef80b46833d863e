"""
Error classification system for the signal staging pipeline.

This module provides a structured exception hierarchy separating ingress
data problems, transient backing-store failures and persistent corruption.
"""

from .data_quality import (
    DataQualityError,
    MissingDataError,
    MalformedDataError,
    AcknowledgeRequestError,
)
from .system_failures import (
    SystemFailureError,
    PersistenceError,
)
from .recovery import (
    RecoverableError,
    StoreUnavailableError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "MissingDataError",
    "MalformedDataError",
    "AcknowledgeRequestError",
    # System Failures
    "SystemFailureError",
    "PersistenceError",
    # Recovery Categories
    "RecoverableError",
    "StoreUnavailableError",
]
