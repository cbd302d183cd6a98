"""Service for the learned/wrong activity log and the statistics derived from it."""
import logging
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional

from engtutor.models.word_models import (
    ActivityRecord,
    BasicStats,
    DailyStat,
    DistributionItem,
    StorageData,
)
from engtutor.services.progress_store import ProgressStore
from engtutor.services.session_selector import round_percent

logger = logging.getLogger(__name__)

DISTRIBUTION_STYLE = {
    "learned": ("맞힌 단어", "#10b981"),
    "wrong": ("틀린 단어", "#ef4444"),
}


class ActivityLog:
    """Service keeping the activity buckets of the stored document.

    Only this class mutates ``StorageData.activity``. Each mutation has an
    ``apply_*`` variant that changes a loaded document without saving it, so
    callers can combine it with a status update in a single write.
    """

    def __init__(self, store: ProgressStore, clock: Optional[Callable[[], datetime]] = None):
        """Initialize the service with the progress store."""
        self.store = store
        self.clock = clock or store.clock

    def today(self) -> date:
        return self.clock().date()

    @staticmethod
    def _find(records: List[ActivityRecord], word: str) -> Optional[ActivityRecord]:
        for record in records:
            if record.word == word:
                return record
        return None

    def apply_learned(self, data: StorageData, word: str, korean: str = "") -> bool:
        """Add word to the learned bucket once. Returns False if already there."""
        if self._find(data.activity.learned, word):
            return False
        data.activity.learned.append(ActivityRecord(word=word, korean=korean, saved_at=self.clock()))
        return True

    def apply_wrong(self, data: StorageData, word: str, korean: str = "") -> ActivityRecord:
        """Count a miss for word in the wrong bucket."""
        record = self._find(data.activity.wrong, word)
        if record:
            record.review_count = (record.review_count or 0) + 1
            record.saved_at = self.clock()
            return record
        record = ActivityRecord(word=word, korean=korean, saved_at=self.clock(), review_count=1)
        data.activity.wrong.append(record)
        return record

    def apply_remove_from_wrong(self, data: StorageData, word: str) -> bool:
        before = len(data.activity.wrong)
        data.activity.wrong = [r for r in data.activity.wrong if r.word != word]
        return len(data.activity.wrong) != before

    def record_learned(self, word: str, korean: str = "") -> None:
        data = self.store.load()
        if self.apply_learned(data, word, korean):
            self.store.save(data)

    def record_wrong(self, word: str, korean: str = "") -> None:
        data = self.store.load()
        record = self.apply_wrong(data, word, korean)
        self.store.save(data)
        logger.debug(f"Word {word!r} missed {record.review_count} times")

    def remove_from_wrong(self, word: str) -> bool:
        data = self.store.load()
        removed = self.apply_remove_from_wrong(data, word)
        if removed:
            self.store.save(data)
        return removed

    def clear_all(self) -> None:
        """Empty both buckets."""
        data = self.store.load()
        data.activity.learned = []
        data.activity.wrong = []
        self.store.save(data)
        logger.info("Activity log cleared")

    def learned_entries(self) -> List[ActivityRecord]:
        return list(self.store.load().activity.learned)

    def wrong_entries(self) -> List[ActivityRecord]:
        return list(self.store.load().activity.wrong)

    def basic_stats(self) -> BasicStats:
        activity = self.store.load().activity
        total_learned = len(activity.learned)
        total_wrong = len(activity.wrong)
        return BasicStats(
            total_learned=total_learned,
            total_wrong=total_wrong,
            total_reviews=sum(r.review_count or 0 for r in activity.wrong),
            success_rate=round_percent(total_learned, total_learned + total_wrong),
        )

    def daily_series(self, days: int) -> List[DailyStat]:
        """Learned and wrong counts per day for the last `days` days, oldest first."""
        if days < 1:
            raise ValueError("days must be positive")

        activity = self.store.load().activity
        today = self.today()
        series = []
        for offset in range(days - 1, -1, -1):
            day = today - timedelta(days=offset)
            learned = sum(1 for r in activity.learned if r.saved_at.date() == day)
            wrong = sum(1 for r in activity.wrong if r.saved_at.date() == day)
            series.append(DailyStat(
                date=day,
                learned=learned,
                wrong=wrong,
                total=learned + wrong,
                date_label=f"{day.month}/{day.day}",
            ))
        return series

    def distribution(self) -> List[DistributionItem]:
        stats = self.basic_stats()
        values = {"learned": stats.total_learned, "wrong": stats.total_wrong}
        return [
            DistributionItem(name=name, value=values[name], label=label, color=color)
            for name, (label, color) in DISTRIBUTION_STYLE.items()
        ]

    def most_wrong(self, limit: int = 5) -> List[ActivityRecord]:
        """Most missed words, ties kept in insertion order."""
        records = sorted(self.wrong_entries(), key=lambda r: r.review_count or 0, reverse=True)
        return records[:max(limit, 0)]

    def study_streak(self) -> int:
        """Consecutive days with activity, ending today."""
        activity = self.store.load().activity
        dates = {r.saved_at.date() for r in activity.learned + activity.wrong}

        streak = 0
        cursor = self.today()
        for day in sorted(dates, reverse=True):
            if day != cursor:
                break
            streak += 1
            cursor -= timedelta(days=1)
        return streak
