"""Service choosing and tracking today's study words."""
import logging
from typing import Iterable, List, Optional

from engtutor.config import Settings
from engtutor.models.word_models import TodayProgress, WordProgress, WordStatus
from engtutor.services.progress_store import ProgressStore

logger = logging.getLogger(__name__)


def round_percent(part: int, whole: int) -> int:
    """Percentage rounded half up, 0 when whole is 0."""
    if whole <= 0:
        return 0
    return (part * 200 + whole) // (2 * whole)


class SessionSelector:
    """Service deciding which words make up today's session."""

    def __init__(self, store: ProgressStore, settings: Optional[Settings] = None):
        """Initialize the service with the progress store.

        Refill thresholds come from settings, or from the store's settings.
        """
        self.store = store
        self.settings = settings or store.settings

    def today_words(self) -> List[WordProgress]:
        """Today's selected words, in bank order."""
        data = self.store.load()
        loaded = set(data.current_session.words_loaded)
        if not loaded:
            return []
        return [w for w in data.word_bank if w.word in loaded]

    def select_today_words(self) -> List[str]:
        """Pick the oldest unseen words up to the daily limit."""
        data = self.store.load()
        limit = data.settings.daily_limit
        selected = [w.word for w in data.word_bank if w.status == WordStatus.UNSEEN][:limit]

        data.current_session.words_loaded = selected
        data.current_session.completed = False
        self.store.save(data)
        logger.info(f"Selected {len(selected)} words for {data.current_session.date} (limit {limit})")
        return selected

    def set_today_words(self, words: Iterable[str]) -> List[str]:
        """Use an explicit list of bank words as today's session."""
        data = self.store.load()
        words = list(dict.fromkeys(words))
        known = {w.word for w in data.word_bank}
        missing = [w for w in words if w not in known]
        if missing:
            raise ValueError(f"Words not in the bank: {missing}")

        data.current_session.words_loaded = words
        self.store.save(data)
        return words

    def remaining_words(self) -> List[WordProgress]:
        """Today's words that have not been answered yet."""
        return [w for w in self.today_words() if w.status == WordStatus.UNSEEN]

    def today_progress(self) -> TodayProgress:
        data = self.store.load()
        loaded = set(data.current_session.words_loaded)
        total = len(data.current_session.words_loaded)
        completed = sum(
            1 for w in data.word_bank
            if w.word in loaded and w.status != WordStatus.UNSEEN
        )
        remaining = total - completed
        return TodayProgress(
            total=total,
            completed=completed,
            remaining=remaining,
            percentage=round_percent(completed, total),
            is_complete=remaining == 0 and total > 0,
        )

    def mark_session_complete(self) -> None:
        """Flag today's session as finished."""
        data = self.store.load()
        data.current_session.completed = True
        self.store.save(data)

    def is_session_marked_complete(self) -> bool:
        return self.store.load().current_session.completed

    def needs_more_words(self) -> bool:
        """True when the unseen pool is below the low-water mark."""
        return len(self.store.unseen_words()) < self.settings.learning.low_water_mark

    def refill_count(self) -> int:
        """How many words to fetch when refilling the bank."""
        bank_size = len(self.store.load().word_bank)
        learning = self.settings.learning
        return max(learning.refill_bank_target - bank_size, learning.refill_min_batch)
