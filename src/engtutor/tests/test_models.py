"""Tests for data models."""
from datetime import UTC, date, datetime

import pytest
from faker import Faker

from engtutor.models.word_models import (
    ActivityRecord,
    AppSettings,
    StorageData,
    StudySession,
    WordProgress,
    WordRecord,
    WordStatus,
)

fake = Faker()


def test_word_progress_from_record() -> None:
    """Test creating a bank entry from a fetched word."""
    text = fake.word()
    record = WordRecord(word=text, korean="뜻", part_of_speech="n", english="a meaning", example="an example")

    entry = WordProgress.from_record(record)

    assert entry.word == text
    assert entry.english == "a meaning"
    assert entry.example == "an example"
    assert entry.status == WordStatus.UNSEEN
    assert entry.wrong_count == 0
    assert entry.last_studied is None
    assert entry.learned_date is None


def test_word_progress_from_dict_defaults() -> None:
    """Test reading a minimal stored word."""
    entry = WordProgress.from_dict({"word": "cat", "korean": "고양이"})

    assert entry.status == WordStatus.UNSEEN
    assert entry.wrong_count == 0
    assert entry.part_of_speech is None


@pytest.mark.parametrize("data", [
    {"korean": "고양이"},
    {"word": "cat", "status": "mastered"},
    {"word": "cat", "wrongCount": -1},
    {"word": "cat", "lastStudied": "yesterday"},
])
def test_word_progress_from_dict_invalid(data) -> None:
    with pytest.raises((KeyError, ValueError)):
        WordProgress.from_dict(data)


def test_word_progress_dates_serialize() -> None:
    """Test date fields in the stored format."""
    entry = WordProgress(word="cat", korean="고양이", status=WordStatus.LEARNED,
                         last_studied=date(2024, 3, 15), learned_date=date(2024, 3, 15))

    data = entry.to_dict()

    assert data["lastStudied"] == "2024-03-15"
    assert data["learnedDate"] == "2024-03-15"
    assert WordProgress.from_dict(data) == entry


def test_study_session_requires_list() -> None:
    with pytest.raises(ValueError):
        StudySession.from_dict({"date": "2024-03-15", "wordsLoaded": "cat"})


def test_app_settings_rejects_non_positive_limit() -> None:
    assert AppSettings.from_dict({}, default_limit=20).daily_limit == 20
    with pytest.raises(ValueError):
        AppSettings.from_dict({"dailyLimit": 0})


def test_activity_record_naive_timestamp_is_utc() -> None:
    """Test timestamps stored without an offset."""
    record = ActivityRecord.from_dict({"word": "cat", "korean": "고양이", "savedAt": "2024-03-15T23:30:00"})

    assert record.saved_at == datetime(2024, 3, 15, 23, 30, tzinfo=UTC)
    assert record.review_count is None


def test_activity_record_z_suffix() -> None:
    record = ActivityRecord.from_dict({"word": "cat", "korean": "", "savedAt": "2024-03-15T01:00:00.000Z", "reviewCount": 2})

    assert record.saved_at == datetime(2024, 3, 15, 1, 0, tzinfo=UTC)
    assert record.review_count == 2
    assert record.to_dict()["reviewCount"] == 2


def test_storage_data_default() -> None:
    data = StorageData.default(date(2024, 3, 15), daily_limit=5)

    assert data.settings.daily_limit == 5
    assert data.current_session == StudySession(date=date(2024, 3, 15))
    assert data.activity.learned == []
    assert data.activity.wrong == []


def test_storage_data_find_word_is_case_sensitive() -> None:
    data = StorageData.default(date(2024, 3, 15))
    data.word_bank.append(WordProgress(word="Cat", korean="고양이"))

    assert data.find_word("Cat") is not None
    assert data.find_word("cat") is None
