"""
Recovery strategy classifications for error handling.

Errors in this module are transient: the batch processor answers them by
asking the transport to redeliver the message.
"""

from typing import Any, Dict, Optional


class RecoverableError(Exception):
    """Base class for errors that can be recovered from by retrying."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class StoreUnavailableError(RecoverableError):
    """Backing key-value store could not be read or written."""

    def __init__(self, message: str, namespace: Optional[str] = None,
                 operation: Optional[str] = None, key: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.namespace = namespace
        self.operation = operation
        self.key = key
