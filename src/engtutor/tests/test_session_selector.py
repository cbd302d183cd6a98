"""Tests for the session selector."""
from dataclasses import replace

import pytest

from engtutor.config import LearningSettings, Settings
from engtutor.models.word_models import WordStatus
from engtutor.services.progress_store import ProgressStore
from engtutor.services.session_selector import SessionSelector, round_percent


def test_today_words_empty_before_selection(selector: SessionSelector, store: ProgressStore, make_records) -> None:
    """Test that nothing is studied until words are selected."""
    store.add_words(make_records(5))

    assert selector.today_words() == []
    assert selector.remaining_words() == []


def test_select_today_words_respects_limit_and_order(selector: SessionSelector, store: ProgressStore, make_records) -> None:
    """Test that the oldest unseen words up to the limit are chosen."""
    store.add_words(make_records(15))
    store.update_settings(daily_limit=5)
    store.update_status("word1", WordStatus.LEARNED)
    store.update_status("word3", WordStatus.WRONG, increment_wrong=True)

    selected = selector.select_today_words()

    assert selected == ["word0", "word2", "word4", "word5", "word6"]
    data = store.load()
    assert data.current_session.words_loaded == selected
    assert data.current_session.completed is False


def test_select_today_words_with_small_pool(selector: SessionSelector, store: ProgressStore, make_records) -> None:
    """Test selecting when fewer unseen words than the limit exist."""
    store.add_words(make_records(3))

    assert selector.select_today_words() == ["word0", "word1", "word2"]


def test_select_today_words_overwrites_previous_selection(selector: SessionSelector, store: ProgressStore, make_records) -> None:
    """Test that selecting twice replaces the session."""
    store.add_words(make_records(4))
    store.update_settings(daily_limit=2)
    selector.select_today_words()
    selector.mark_session_complete()
    store.update_status("word0", WordStatus.LEARNED)

    assert selector.select_today_words() == ["word1", "word2"]
    assert selector.is_session_marked_complete() is False


def test_selection_is_stable_across_reloads(selector: SessionSelector, store: ProgressStore, make_records) -> None:
    """Test that today's words survive reloading the store."""
    store.add_words(make_records(12))
    selected = selector.select_today_words()

    reloaded = SessionSelector(ProgressStore(store.kv, key=store.key, clock=store.clock))

    assert [w.word for w in reloaded.today_words()] == selected


def test_new_day_clears_selection(selector: SessionSelector, store: ProgressStore, clock, make_records) -> None:
    """Test that a new calendar day starts with no words."""
    store.add_words(make_records(5))
    selector.select_today_words()

    clock.advance(days=1)

    assert selector.today_words() == []
    assert selector.today_progress().total == 0


def test_remaining_words(selector: SessionSelector, store: ProgressStore, make_records) -> None:
    """Test that answered words leave the remaining set."""
    store.add_words(make_records(4))
    selector.select_today_words()
    store.update_status("word1", WordStatus.LEARNED)
    store.update_status("word2", WordStatus.WRONG, increment_wrong=True)

    assert [w.word for w in selector.remaining_words()] == ["word0", "word3"]
    assert [w.word for w in selector.today_words()] == ["word0", "word1", "word2", "word3"]


def test_today_progress_is_monotonic(selector: SessionSelector, store: ProgressStore, make_records) -> None:
    """Test progress while answering every word of the session."""
    store.add_words(make_records(3))
    selector.select_today_words()

    progress = selector.today_progress()
    assert (progress.total, progress.completed, progress.remaining) == (3, 0, 3)
    assert progress.percentage == 0
    assert progress.is_complete is False

    completed = []
    for word, status in [("word0", WordStatus.LEARNED), ("word1", WordStatus.WRONG), ("word2", WordStatus.LEARNED)]:
        store.update_status(word, status)
        progress = selector.today_progress()
        completed.append(progress.completed)
        assert progress.is_complete == (progress.remaining == 0)

    assert completed == [1, 2, 3]
    assert progress.percentage == 100
    assert progress.is_complete is True


def test_today_progress_without_session(selector: SessionSelector) -> None:
    """Test that an empty session is never complete."""
    progress = selector.today_progress()

    assert progress.total == 0
    assert progress.percentage == 0
    assert progress.is_complete is False


def test_today_progress_percentage_rounding(selector: SessionSelector, store: ProgressStore, make_records) -> None:
    """Test the rounded percentage."""
    store.add_words(make_records(3))
    selector.select_today_words()
    store.update_status("word0", WordStatus.LEARNED)
    assert selector.today_progress().percentage == 33

    store.update_status("word1", WordStatus.LEARNED)
    assert selector.today_progress().percentage == 67


@pytest.mark.parametrize("part, whole, expected", [
    (0, 0, 0),
    (1, 8, 13),
    (1, 3, 33),
    (2, 3, 67),
    (1, 2, 50),
    (5, 5, 100),
])
def test_round_percent(part: int, whole: int, expected: int) -> None:
    """Test half-up rounding."""
    assert round_percent(part, whole) == expected


def test_mark_session_complete(selector: SessionSelector, store: ProgressStore, make_records) -> None:
    """Test the informational completion flag."""
    store.add_words(make_records(2))
    selector.select_today_words()

    selector.mark_session_complete()

    assert selector.is_session_marked_complete() is True
    assert selector.today_progress().is_complete is False


def test_set_today_words(selector: SessionSelector, store: ProgressStore, make_records) -> None:
    """Test choosing the session words explicitly."""
    store.add_words(make_records(5))

    assert selector.set_today_words(["word4", "word2", "word4"]) == ["word4", "word2"]
    assert store.load().current_session.words_loaded == ["word4", "word2"]


def test_set_today_words_rejects_unknown(selector: SessionSelector, store: ProgressStore, make_records) -> None:
    """Test that session words must be in the bank."""
    store.add_words(make_records(2))

    with pytest.raises(ValueError):
        selector.set_today_words(["word0", "missing"])
    assert store.load().current_session.words_loaded == []


def test_needs_more_words_threshold(selector: SessionSelector, store: ProgressStore, make_records) -> None:
    """Test the low-water mark of 20 unseen words."""
    store.add_words(make_records(19))
    assert selector.needs_more_words() is True

    store.add_words(make_records(1, prefix="extra"))
    assert selector.needs_more_words() is False

    store.update_status("word0", WordStatus.LEARNED)
    assert selector.needs_more_words() is True


@pytest.mark.parametrize("bank_size, expected", [(0, 50), (10, 40), (20, 30), (45, 30), (80, 30)])
def test_refill_count(selector: SessionSelector, store: ProgressStore, make_records, bank_size: int, expected: int) -> None:
    """Test the refill target."""
    store.add_words(make_records(bank_size))

    assert selector.refill_count() == expected


def test_refill_thresholds_from_settings(store: ProgressStore, make_records) -> None:
    """Test that explicit settings override the store's thresholds."""
    custom = Settings(learning=replace(
        LearningSettings(), low_water_mark=5, refill_bank_target=12, refill_min_batch=4,
    ))
    selector = SessionSelector(store, settings=custom)
    store.add_words(make_records(10))

    assert selector.needs_more_words() is False
    assert selector.refill_count() == 4


def test_selector_uses_store_settings(kv, clock) -> None:
    custom = Settings(learning=replace(LearningSettings(), low_water_mark=0))
    selector = SessionSelector(ProgressStore(kv, key="test_data", clock=clock, settings=custom))

    assert selector.needs_more_words() is False
