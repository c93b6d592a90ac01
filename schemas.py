"""
Journal Schemas

Pydantic models for the journal entries handed to the analytics engine and
for every view the engine derives from them.

Entries arrive already fetched by the storage layer, so the models accept
both the snake_case field names used here and the camelCase names the
mobile app's document store writes (``createdAt``, ``userId`` ...).
Derived models are never persisted; they are rebuilt on every request.
"""

from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


def coerce_timestamp(value: Any) -> Any:
    """
    Normalise the timestamp shapes a storage layer may hand back into
    something pydantic can parse as a datetime:
      - datetime / ISO string / epoch number -> unchanged (pydantic parses them)
      - date -> midnight of that date (local time)
      - objects exposing ToDatetime(), to_datetime() or to_pydatetime()
      - {"seconds": .., "nanoseconds": ..} or {"_seconds": .., "_nanoseconds": ..}
    """
    if value is None or isinstance(value, (datetime, str, int, float)):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)

    # protobuf Timestamp returns naive UTC unless told otherwise
    to_proto_datetime = getattr(value, "ToDatetime", None)
    if callable(to_proto_datetime):
        return to_proto_datetime(tzinfo=timezone.utc)

    for attr in ("to_datetime", "to_pydatetime"):
        converter = getattr(value, attr, None)
        if callable(converter):
            return converter()

    if isinstance(value, dict):
        seconds = value.get("seconds", value.get("_seconds"))
        nanos = value.get("nanoseconds", value.get("_nanoseconds", 0)) or 0
        if seconds is not None:
            return datetime.fromtimestamp(int(seconds) + int(nanos) / 1e9, tz=timezone.utc)

    raise ValueError(f"Unsupported timestamp value: {value!r}")


class EntryType(str, Enum):
    TEXT = "text"
    VOICE = "voice"
    IMAGE = "image"


class InsightType(str, Enum):
    MOOD_TREND = "mood_trend"
    FREQUENT_TAGS = "frequent_tags"
    WRITING_STREAK = "writing_streak"
    REFLECTION_PROMPT = "reflection_prompt"


class Entry(BaseModel):
    """
    One journal entry, owned by the storage layer and read-only here.
    Every entry passed in one call is assumed to belong to the same user.
    """
    id: str = Field(..., description="Opaque unique identifier")
    user_id: str = Field(
        ...,
        validation_alias=AliasChoices("user_id", "userId"),
        description="Owner of the entry",
    )
    content: str = Field("", description="Free-form text content of the entry")
    type: EntryType = Field(EntryType.TEXT, description="text | voice | image")
    mood: int = Field(..., ge=1, le=5, description="Mood score from 1 (very negative) to 5 (very positive)")
    tags: List[str] = Field(default_factory=list, description="Free-form, case-sensitive tags")
    created_at: datetime = Field(
        ...,
        validation_alias=AliasChoices("created_at", "createdAt"),
        description="When the entry was written. Naive values are local time",
    )
    last_reviewed_at: Optional[datetime] = Field(
        None,
        validation_alias=AliasChoices("last_reviewed_at", "lastReviewedAt"),
        description="When the entry was last resurfaced for review",
    )
    context: Optional[str] = Field(None, description="Optional free-form context")

    @field_validator("created_at", "last_reviewed_at", mode="before")
    @classmethod
    def _normalise_timestamp(cls, value: Any) -> Any:
        return coerce_timestamp(value)

    @field_validator("context", mode="before")
    @classmethod
    def _empty_context_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class MoodTrend(BaseModel):
    date: str = Field(..., description="Calendar day as YYYY-MM-DD")
    average_mood: float = Field(..., description="Mean mood of the day rounded to 1 decimal, 0 if no entries")
    entry_count: int


class TagAnalysis(BaseModel):
    tag: str
    count: int = Field(..., description="Number of entries carrying the tag")
    average_mood: float = Field(..., description="Mean mood of those entries rounded to 1 decimal")


class JournalInsight(BaseModel):
    type: InsightType
    title: str
    description: str
    data: Optional[Dict[str, Any]] = Field(None, description="Raw numbers the insight was built from")


class WeeklyStats(BaseModel):
    total_entries: int
    average_mood: float
    top_tags: List[TagAnalysis]
    writing_streak: int = Field(..., description="Computed over all entries, not only this week's")


class QuickStats(BaseModel):
    total_entries: int
    current_streak: int
    average_mood: float
    mood_emoji: str


class StreakResponse(BaseModel):
    streak: int
