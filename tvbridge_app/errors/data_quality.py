"""
Data quality error classifications for inbound signal payloads.

These exceptions describe problems with data handed to the pipeline from
outside: webhook payloads, queue message bodies and acknowledge requests.
"""

from typing import Optional, Dict, Any


class DataQualityError(Exception):
    """Base class for data quality issues that can be handled gracefully."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class MissingDataError(DataQualityError):
    """Required fields are missing or blank."""

    def __init__(self, message: str, missing_fields: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.missing_fields = missing_fields or []


class MalformedDataError(DataQualityError):
    """Data exists but is in incorrect format."""

    def __init__(self, message: str, raw_data: Optional[str] = None,
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
        self.expected_format = expected_format


class AcknowledgeRequestError(DataQualityError):
    """Acknowledge batch rejected before touching the store."""

    def __init__(self, message: str, batch_size: int = 0,
                 max_batch_size: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.batch_size = batch_size
        self.max_batch_size = max_batch_size
