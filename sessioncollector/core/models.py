# ==============================================================================
# Session Collector Domain Models
# ==============================================================================
"""
Pydantic models for collector requests, session records and outcomes.

These models are used for:
- Carrying a normalized request from the normalizer to the lifecycle
- Deserializing session documents read from the store
- Serializing lifecycle outcomes into HTTP response bodies

Attribute names are snake_case; the camelCase aliases match the wire format
of the ingest endpoint and of the stored documents.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Action(str, Enum):
    """Actions a client may request explicitly."""

    APPEND = "append"
    END = "end"


def micros_to_datetime(value: int) -> datetime:
    """Convert a store timestamp (µs since epoch) to an aware UTC datetime."""
    # Integer arithmetic keeps 1µs differences intact
    return EPOCH + timedelta(microseconds=value)


class IngestRequest(BaseModel):
    """
    A request that passed normalization.

    Only the fingerprint is validated; every other field is carried as
    supplied by the client.
    """

    api_key: Any = Field(None, alias="apiKey")
    tiny_code: Any = Field(None, alias="tinyCode")
    fingerprint: str = Field(..., description="Trimmed, non-empty fingerprint")
    data: Any = Field(None, description="Opaque item or batch of items")
    action: Any = Field(None, description="'append', 'end' or anything else")
    website_name: Any = Field(None, alias="websiteName")

    model_config = {"populate_by_name": True}


class SessionRecord(BaseModel):
    """
    One session document under a (website, fingerprint) entry.

    Attributes:
        id: Store-generated identifier
        api_key: Opaque caller tag, stored verbatim
        tiny_code: Opaque caller tag, stored verbatim
        started_at: Server time at creation
        last_activity: Server time of the last append or close
        ended_at: Server time of the close, None while the session is open
        data_batches: Items recorded in arrival order
    """

    id: str
    api_key: Any = Field(None, alias="apiKey")
    tiny_code: Any = Field(None, alias="tinyCode")
    started_at: datetime = Field(..., alias="startedAt")
    last_activity: datetime = Field(..., alias="lastActivity")
    ended_at: Optional[datetime] = Field(None, alias="endedAt")
    data_batches: list[Any] = Field(default_factory=list, alias="dataBatches")

    model_config = {"populate_by_name": True}

    @property
    def is_open(self) -> bool:
        """A session is open until endedAt is set."""
        return self.ended_at is None

    @classmethod
    def from_document(cls, document: dict) -> "SessionRecord":
        """Build a record from a stored document (timestamps in µs)."""
        ended_at = document.get("endedAt")
        return cls(
            id=document["id"],
            apiKey=document.get("apiKey"),
            tinyCode=document.get("tinyCode"),
            startedAt=micros_to_datetime(document["startedAt"]),
            lastActivity=micros_to_datetime(document["lastActivity"]),
            endedAt=micros_to_datetime(ended_at) if ended_at is not None else None,
            dataBatches=document.get("dataBatches", []),
        )

    def to_response(self) -> dict:
        """Serialize for a JSON response body."""
        return self.model_dump(by_alias=True, mode="json")


# ==============================================================================
# Lifecycle Outcomes
# ==============================================================================


class SessionUpdated(BaseModel):
    """Outcome of the append/start branch."""

    success: bool = True
    message: str
    new_session_started: bool
    session_id: str

    def to_payload(self) -> dict:
        return {
            "success": self.success,
            "message": self.message,
            "newSessionStarted": self.new_session_started,
        }


class SessionEnded(BaseModel):
    """Outcome of a successful close, carrying the closed record."""

    message: str
    session: SessionRecord

    def to_payload(self) -> dict:
        return {"message": self.message, "session": self.session.to_response()}


class SessionNotUpdated(BaseModel):
    """Outcome of a request with nothing to do."""

    message: str
    fingerprint: str

    def to_payload(self) -> dict:
        return {"message": self.message, "fingerprint": self.fingerprint}


Outcome = SessionUpdated | SessionEnded | SessionNotUpdated
