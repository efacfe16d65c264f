"""Record models and collection kinds."""

from datetime import date as Date, datetime, timezone
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..utils.ids import generate_id


def _now_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


class MediaCategory(str, Enum):
    INTERVIEW = "interview"
    BALLOON = "balloon"
    PROFILE = "profile"
    BIRTHDAY_MEDIA = "birthday-media"


class RecordModel(BaseModel):
    """Base for stored records.

    Field names are snake_case in Python and camelCase on disk. Unknown
    fields are kept so data written by newer app versions round-trips.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id: str = Field(default_factory=generate_id)

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Child(RecordModel):
    name: str
    birthday: Date
    emoji: str = "🎈"
    photo_uri: Optional[str] = None


class Interview(RecordModel):
    child_id: str
    year: int
    age: int
    date: str = Field(default_factory=_now_iso)
    questions: list[str] = Field(default_factory=list)
    answers: dict[str, Any] = Field(default_factory=dict)
    video_uri: Optional[str] = None
    created_at: str = Field(default_factory=_now_iso)
    transcription: Optional[Any] = None
    spotify: Optional[Any] = None
    enrichment: Optional[Any] = None
    question_timestamps: Optional[dict[str, Any]] = None


class BalloonRun(RecordModel):
    child_id: str
    year: int
    age: int
    video_uri: Optional[str] = None
    playback_rate: float = 0.5
    created_at: str = Field(default_factory=_now_iso)


class BirthdayMedia(RecordModel):
    child_id: str
    year: int
    age: int
    uri: Optional[str] = None


class RecordKind(str, Enum):
    CHILDREN = "children"
    INTERVIEWS = "interviews"
    BALLOON_RUNS = "balloonRuns"
    BIRTHDAY_MEDIA = "birthdayMedia"

    @property
    def storage_key(self) -> str:
        return _STORAGE_KEYS[self]

    @property
    def file_field(self) -> str:
        return _FILE_FIELDS[self]

    @property
    def category(self) -> MediaCategory:
        return _CATEGORIES[self]

    @property
    def model(self) -> type[RecordModel]:
        return _MODELS[self]


_STORAGE_KEYS = {
    RecordKind.CHILDREN: "@birthday_interview_children",
    RecordKind.INTERVIEWS: "@birthday_interview_sessions",
    RecordKind.BALLOON_RUNS: "@birthday_interview_balloon_runs",
    RecordKind.BIRTHDAY_MEDIA: "@birthday_interview_birthday_media",
}

_FILE_FIELDS = {
    RecordKind.CHILDREN: "photoUri",
    RecordKind.INTERVIEWS: "videoUri",
    RecordKind.BALLOON_RUNS: "videoUri",
    RecordKind.BIRTHDAY_MEDIA: "uri",
}

_CATEGORIES = {
    RecordKind.CHILDREN: MediaCategory.PROFILE,
    RecordKind.INTERVIEWS: MediaCategory.INTERVIEW,
    RecordKind.BALLOON_RUNS: MediaCategory.BALLOON,
    RecordKind.BIRTHDAY_MEDIA: MediaCategory.BIRTHDAY_MEDIA,
}

_MODELS: dict[RecordKind, type[RecordModel]] = {
    RecordKind.CHILDREN: Child,
    RecordKind.INTERVIEWS: Interview,
    RecordKind.BALLOON_RUNS: BalloonRun,
    RecordKind.BIRTHDAY_MEDIA: BirthdayMedia,
}

# Order in which collections are scanned for media files.
MANIFEST_ORDER = (
    RecordKind.INTERVIEWS,
    RecordKind.BALLOON_RUNS,
    RecordKind.CHILDREN,
    RecordKind.BIRTHDAY_MEDIA,
)

# Children first so dependent records never reference a missing child.
ALL_KINDS = (
    RecordKind.CHILDREN,
    RecordKind.INTERVIEWS,
    RecordKind.BALLOON_RUNS,
    RecordKind.BIRTHDAY_MEDIA,
)


def calculate_age(birthday: Date, on: Optional[Date] = None) -> int:
    """Whole years between birthday and `on` (today by default)."""
    today = on or Date.today()
    age = today.year - birthday.year
    if (today.month, today.day) < (birthday.month, birthday.day):
        age -= 1
    return age


class YearAnswer(BaseModel):
    interview_id: str
    year: int
    age: Optional[int] = None
    answer: Optional[Any] = None


class QuestionComparison(BaseModel):
    question_id: str
    text: str
    category: str
    answers: list[YearAnswer] = Field(default_factory=list)
