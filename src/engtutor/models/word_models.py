"""Models for word, session and activity data structures.

Every persisted record converts to and from the JSON layout of the stored
document. Keys are camelCase in JSON and snake_case in Python.
"""
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from engtutor.config import STORAGE_VERSION


class WordStatus(Enum):
    """Learning status of a word in the bank."""
    UNSEEN = "unseen"  # Never answered
    LEARNED = "learned"  # Answered correctly
    WRONG = "wrong"  # Answered incorrectly, waiting for review


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM-DD string, keeping None."""
    if value is None:
        return None
    return date.fromisoformat(value)


def format_date(value: Optional[date]) -> Optional[str]:
    """Format a date as YYYY-MM-DD, keeping None."""
    return value.isoformat() if value is not None else None


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


@dataclass(frozen=True)
class WordRecord:
    """A word fetched from the word source, translated to Korean."""
    word: str
    korean: str
    part_of_speech: Optional[str] = None
    english: Optional[str] = None  # dictionary definition
    example: Optional[str] = None


@dataclass
class WordProgress:
    """Learning progress of a single word in the bank."""
    word: str
    korean: str
    english: Optional[str] = None
    part_of_speech: Optional[str] = None
    example: Optional[str] = None
    status: WordStatus = WordStatus.UNSEEN
    last_studied: Optional[date] = None
    wrong_count: int = 0
    learned_date: Optional[date] = None

    @classmethod
    def from_record(cls, record: WordRecord) -> "WordProgress":
        """Create an unseen bank entry from a fetched word."""
        return cls(
            word=record.word,
            korean=record.korean,
            english=record.english,
            part_of_speech=record.part_of_speech,
            example=record.example,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "word": self.word,
            "korean": self.korean,
            "english": self.english,
            "partOfSpeech": self.part_of_speech,
            "example": self.example,
            "status": self.status.value,
            "lastStudied": format_date(self.last_studied),
            "wrongCount": self.wrong_count,
            "learnedDate": format_date(self.learned_date),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WordProgress":
        wrong_count = int(data.get("wrongCount", 0))
        if wrong_count < 0:
            raise ValueError(f"Negative wrongCount for word {data['word']!r}")
        return cls(
            word=str(data["word"]),
            korean=str(data.get("korean", "")),
            english=data.get("english"),
            part_of_speech=data.get("partOfSpeech"),
            example=data.get("example"),
            status=WordStatus(data.get("status", WordStatus.UNSEEN.value)),
            last_studied=parse_date(data.get("lastStudied")),
            wrong_count=wrong_count,
            learned_date=parse_date(data.get("learnedDate")),
        )


@dataclass
class StudySession:
    """Words chosen for study on one calendar day."""
    date: date
    words_loaded: List[str] = field(default_factory=list)
    completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "wordsLoaded": list(self.words_loaded),
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StudySession":
        words = data.get("wordsLoaded", [])
        if not isinstance(words, list):
            raise ValueError("wordsLoaded must be a list")
        return cls(
            date=date.fromisoformat(data["date"]),
            words_loaded=[str(w) for w in words],
            completed=bool(data.get("completed", False)),
        )


@dataclass
class AppSettings:
    """User-editable settings."""
    daily_limit: int = 10

    def to_dict(self) -> Dict[str, Any]:
        return {"dailyLimit": self.daily_limit}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], default_limit: int = 10) -> "AppSettings":
        limit = int(data.get("dailyLimit", default_limit))
        if limit < 1:
            raise ValueError("dailyLimit must be positive")
        return cls(daily_limit=limit)


@dataclass
class ActivityRecord:
    """An entry of the learned or wrong activity bucket."""
    word: str
    korean: str
    saved_at: datetime
    review_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "word": self.word,
            "korean": self.korean,
            "savedAt": self.saved_at.isoformat(),
        }
        if self.review_count is not None:
            data["reviewCount"] = self.review_count
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActivityRecord":
        review_count = data.get("reviewCount")
        return cls(
            word=str(data["word"]),
            korean=str(data.get("korean", "")),
            saved_at=parse_timestamp(data["savedAt"]),
            review_count=int(review_count) if review_count is not None else None,
        )


@dataclass
class ActivityBuckets:
    """The append-only learned and wrong logs."""
    learned: List[ActivityRecord] = field(default_factory=list)
    wrong: List[ActivityRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "learned": [r.to_dict() for r in self.learned],
            "wrong": [r.to_dict() for r in self.wrong],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActivityBuckets":
        return cls(
            learned=[ActivityRecord.from_dict(r) for r in data.get("learned", [])],
            wrong=[ActivityRecord.from_dict(r) for r in data.get("wrong", [])],
        )


@dataclass
class StorageData:
    """The whole persisted document."""
    settings: AppSettings
    word_bank: List[WordProgress]
    current_session: StudySession
    activity: ActivityBuckets = field(default_factory=ActivityBuckets)
    version: str = STORAGE_VERSION

    @classmethod
    def default(cls, today: date, daily_limit: int = 10) -> "StorageData":
        """Empty document with a fresh session for today."""
        return cls(
            settings=AppSettings(daily_limit=daily_limit),
            word_bank=[],
            current_session=StudySession(date=today),
        )

    def find_word(self, word: str) -> Optional[WordProgress]:
        for entry in self.word_bank:
            if entry.word == word:
                return entry
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "settings": self.settings.to_dict(),
            "wordBank": [w.to_dict() for w in self.word_bank],
            "currentSession": self.current_session.to_dict(),
            "activity": self.activity.to_dict(),
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], default_limit: int = 10) -> "StorageData":
        bank = data["wordBank"]
        if not isinstance(bank, list):
            raise ValueError("wordBank must be a list")
        return cls(
            settings=AppSettings.from_dict(data["settings"], default_limit),
            word_bank=[WordProgress.from_dict(w) for w in bank],
            current_session=StudySession.from_dict(data["currentSession"]),
            activity=ActivityBuckets.from_dict(data.get("activity") or {}),
            version=str(data.get("version", STORAGE_VERSION)),
        )


@dataclass
class Statistics:
    """Word bank summary."""
    total: int
    learned: int
    wrong: int
    unseen: int
    today_progress: int  # words loaded for today
    today_limit: int


@dataclass
class TodayProgress:
    """Progress through today's session."""
    total: int
    completed: int
    remaining: int
    percentage: int
    is_complete: bool


@dataclass
class BasicStats:
    """Totals derived from the activity log."""
    total_learned: int
    total_wrong: int
    total_reviews: int
    success_rate: int


@dataclass
class DailyStat:
    """Activity counts for one calendar day."""
    date: date
    learned: int
    wrong: int
    total: int
    date_label: str


@dataclass
class DistributionItem:
    """One slice of the learned/wrong distribution."""
    name: str
    value: int
    label: str
    color: str


@dataclass
class AnswerResult:
    """Outcome of answering a card."""
    word: str
    status: Optional[WordStatus]
    persisted: bool
    remaining: int = 0
