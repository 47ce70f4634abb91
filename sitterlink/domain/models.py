"""Domain models for SitterLink.

All models use Pydantic v2 for validation and serialization. Models that
mirror entity store records accept the store's field names (``babysitter_id``,
``start_time``, ``created_date``) as well as the domain names.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from sitterlink.domain.matching_constants import (
    DEFAULT_SHIFT_END,
    DEFAULT_SHIFT_START,
    HOURS_IN_DAY,
)

JSONDict = dict[str, Any]


def hour_of(clock_time: str) -> int:
    """Return the hour component of an ``HH:MM`` string.

    Minutes are ignored: availability is matched at hour granularity.

    Raises:
        ValueError: If the value is not a clock time with an hour in [0, 23]
    """
    head, _, _ = str(clock_time).partition(":")
    try:
        hour = int(head)
    except ValueError as exc:
        raise ValueError(f"Invalid clock time: {clock_time!r}") from exc
    if not 0 <= hour < HOURS_IN_DAY:
        raise ValueError(f"Hour out of range in clock time: {clock_time!r}")
    return hour


def clock_time_of(hour: int) -> str:
    """Format an hour as the ``HH:00`` string the store keeps."""
    return f"{hour:02d}:00"


class UserType(str, Enum):
    """Marketplace role chosen by a user."""

    PARENT = "parent"
    BABYSITTER = "babysitter"


class TimeOfDay(str, Enum):
    """Named time-of-day buckets offered by the search filters."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"
    ANYTIME = "anytime"


class UserProfile(BaseModel):
    """User record as kept by the entity store.

    Profile fields beyond the ones listed are preserved untouched.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    full_name: str | None = None
    email: str | None = None
    user_type: UserType | None = None
    completed_setup: bool = False
    age: int | None = None
    bio: str | None = None
    address: str | None = None
    profile_image_url: str | None = None

    @field_validator("user_type", mode="before")
    @classmethod
    def validate_user_type(cls, v: Any) -> Any:
        """Treat an empty role as not chosen yet."""
        if v == "":
            return None
        return v

    @field_validator("completed_setup", mode="before")
    @classmethod
    def validate_completed_setup(cls, v: Any) -> Any:
        if v is None:
            return False
        return v

    @property
    def is_parent(self) -> bool:
        return self.user_type is UserType.PARENT

    @property
    def is_babysitter(self) -> bool:
        return self.user_type is UserType.BABYSITTER


class AvailabilityEntry(BaseModel):
    """One weekday availability window of a babysitter.

    ``day_of_week`` counts from Sunday (0) to Saturday (6). ``end_hour`` may be
    lower than ``start_hour`` for shifts running past midnight.

    ``start_time``/``end_time`` keep the clock times exactly as entered;
    matching only looks at the derived hours.
    """

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    candidate_id: str
    day_of_week: int = Field(..., ge=0, le=6)
    start_hour: int = Field(..., ge=0, le=23)
    end_hour: int = Field(..., ge=0, le=23)
    start_time: str | None = None
    end_time: str | None = None

    @model_validator(mode="before")
    @classmethod
    def from_store_fields(cls, data: Any) -> Any:
        """Accept ``babysitter_id`` and ``HH:MM`` time strings from store records."""
        if not isinstance(data, dict):
            return data
        values = dict(data)
        if "candidate_id" not in values and "babysitter_id" in values:
            values["candidate_id"] = values["babysitter_id"]
        if "start_hour" not in values and "start_time" in values:
            values["start_hour"] = hour_of(values["start_time"])
        if "end_hour" not in values and "end_time" in values:
            values["end_hour"] = hour_of(values["end_time"])
        return values

    @property
    def start_clock(self) -> str:
        """Start as entered, or ``HH:00`` for entries built from hours."""
        return self.start_time or clock_time_of(self.start_hour)

    @property
    def end_clock(self) -> str:
        return self.end_time or clock_time_of(self.end_hour)

    def to_record(self) -> JSONDict:
        """Serialize to the field set the entity store expects on create."""
        return {
            "babysitter_id": self.candidate_id,
            "day_of_week": self.day_of_week,
            "start_time": self.start_clock,
            "end_time": self.end_clock,
        }


class Candidate(BaseModel):
    """Babysitter under consideration by the matching engine."""

    profile: UserProfile
    availability: list[AvailabilityEntry] = Field(default_factory=list)

    @property
    def id(self) -> str:
        return self.profile.id

    @property
    def age(self) -> int | None:
        return self.profile.age


class Message(BaseModel):
    """Direct message between two users.

    Immutable once created except for the ``read`` flag, which is changed by
    producing an updated copy.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    sender_id: str
    receiver_id: str
    content: str
    thread_id: str
    created_at: datetime = Field(
        ..., validation_alias=AliasChoices("created_at", "created_date")
    )
    read: bool = False

    @field_validator("created_at")
    @classmethod
    def validate_created_at(cls, v: datetime) -> datetime:
        """Assume UTC for naive timestamps so ordering never mixes tz kinds."""
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    @field_validator("read", mode="before")
    @classmethod
    def validate_read(cls, v: Any) -> Any:
        if v is None:
            return False
        return v

    def is_unread_for(self, user_id: str) -> bool:
        """True when the message is addressed to ``user_id`` and not read yet."""
        return self.receiver_id == user_id and not self.read


class ConversationSummary(BaseModel):
    """Latest-message view representing one thread in the conversation list."""

    model_config = ConfigDict(frozen=True)

    thread_id: str
    other_user_id: str
    other_user: UserProfile | None = None
    latest_message: Message
    unread: bool


class MatchQuery(BaseModel):
    """Transient search filter state."""

    model_config = ConfigDict(frozen=True)

    age_min: int
    age_max: int
    day_of_week: int = Field(..., ge=0, le=6)
    time_of_day: TimeOfDay = TimeOfDay.ANYTIME

    @model_validator(mode="after")
    def validate_age_bounds(self) -> "MatchQuery":
        if self.age_min > self.age_max:
            raise ValueError(
                f"age_min ({self.age_min}) must not exceed age_max ({self.age_max})"
            )
        return self


class ScheduleDay(BaseModel):
    """One row of the weekly availability editor."""

    day_of_week: int = Field(..., ge=0, le=6)
    available: bool = False
    start_time: str = DEFAULT_SHIFT_START
    end_time: str = DEFAULT_SHIFT_END
    id: str | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_clock_time(cls, v: str) -> str:
        hour_of(v)
        return v

    def to_entry(self, candidate_id: str) -> AvailabilityEntry:
        return AvailabilityEntry(
            candidate_id=candidate_id,
            day_of_week=self.day_of_week,
            start_hour=hour_of(self.start_time),
            end_hour=hour_of(self.end_time),
            start_time=self.start_time,
            end_time=self.end_time,
        )


class SearchResult(BaseModel):
    """Result of a babysitter search."""

    query: MatchQuery
    candidates: list[Candidate]
    total_candidates: int

    @property
    def matched(self) -> int:
        return len(self.candidates)


class AvailabilityReplaceResult(BaseModel):
    """Result of replacing a babysitter's weekly availability."""

    deleted: int
    created: int
    expected_created: int
    ok: bool
    error: str | None = None


class MarkReadResult(BaseModel):
    """Result of marking a thread's unread messages as read."""

    thread_id: str
    marked: int
    failed: int

    @property
    def ok(self) -> bool:
        return self.failed == 0
