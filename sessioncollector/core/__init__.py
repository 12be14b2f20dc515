# ==============================================================================
# Core Domain Logic
# ==============================================================================
"""
Domain logic for the session collector.

This module contains:
- Domain models (IngestRequest, SessionRecord, lifecycle outcomes)
- Collector errors
- Request normalization

The lifecycle state machine lives in sessioncollector.core.lifecycle and is
imported from there, since it depends on the store contract in
sessioncollector.base.
"""

from sessioncollector.core.errors import (
    CollectorError,
    InvalidFingerprintType,
    InvalidRequestBody,
    InvalidWebsiteName,
    MissingFingerprint,
    NoActiveSession,
    SessionAlreadyEnded,
    StoreFailure,
)
from sessioncollector.core.models import (
    Action,
    IngestRequest,
    SessionEnded,
    SessionNotUpdated,
    SessionRecord,
    SessionUpdated,
)
from sessioncollector.core.normalizer import normalize_raw_request, normalize_request

__all__ = [
    "Action",
    "CollectorError",
    "IngestRequest",
    "InvalidFingerprintType",
    "InvalidRequestBody",
    "InvalidWebsiteName",
    "MissingFingerprint",
    "NoActiveSession",
    "SessionAlreadyEnded",
    "SessionEnded",
    "SessionNotUpdated",
    "SessionRecord",
    "SessionUpdated",
    "StoreFailure",
    "normalize_raw_request",
    "normalize_request",
]
