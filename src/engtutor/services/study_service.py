"""Service driving the study and review flows."""
import logging
from typing import Any, Callable, Dict, List, Optional

from engtutor.models.word_models import AnswerResult, AppSettings, StorageData, WordProgress, WordStatus
from engtutor.monitoring import answers_recorded
from engtutor.services.activity_log import ActivityLog
from engtutor.services.progress_store import ProgressStore
from engtutor.services.session_selector import SessionSelector
from engtutor.services.word_fetcher import WordFetcher

logger = logging.getLogger(__name__)


class StudyDeck:
    """Cards still to be answered, in study order."""

    def __init__(self, cards: Optional[List[WordProgress]] = None):
        self.cards: List[WordProgress] = list(cards or [])

    def __len__(self) -> int:
        return len(self.cards)

    def __bool__(self) -> bool:
        return bool(self.cards)

    def current(self) -> Optional[WordProgress]:
        return self.cards[0] if self.cards else None

    def words(self) -> List[str]:
        return [card.word for card in self.cards]

    def take(self, word: str) -> Optional[tuple[int, WordProgress]]:
        """Remove the card for word, returning its position and the card."""
        for index, card in enumerate(self.cards):
            if card.word == word:
                return index, self.cards.pop(index)
        return None

    def restore(self, index: int, card: WordProgress) -> None:
        self.cards.insert(min(index, len(self.cards)), card)


class StudyService:
    """Service combining the store, selector, activity log and word fetcher."""

    def __init__(
        self,
        store: ProgressStore,
        selector: SessionSelector,
        activity: ActivityLog,
        fetcher: Optional[WordFetcher] = None,
    ):
        self.store = store
        self.selector = selector
        self.activity = activity
        self.fetcher = fetcher
        self.deck = StudyDeck()
        self.review_deck = StudyDeck()

    def replenish(self, force: bool = False) -> int:
        """Top up the word bank from the word source. Returns words added.

        An empty bank is always refilled.
        """
        if not force and not self.selector.needs_more_words() and self.store.load().word_bank:
            return 0
        if self.fetcher is None:
            logger.warning("Word bank is low but no word fetcher is configured")
            return 0

        count = self.selector.refill_count()
        records = self.fetcher.fetch_words(count)
        added = self.store.add_words(records)
        logger.info(f"Replenished word bank with {len(added)} of {count} requested words")
        return len(added)

    def prepare_today(self) -> List[WordProgress]:
        """Load today's remaining cards, choosing today's words if needed."""
        if not self.selector.today_words():
            self.replenish()
            self.selector.select_today_words()
        remaining = self.selector.remaining_words()
        self.deck = StudyDeck(remaining)
        return remaining

    def start_review(self) -> List[WordProgress]:
        """Load the wrong words into the review deck."""
        words = self.review_words()
        self.review_deck = StudyDeck(words)
        return words

    def review_words(self) -> List[WordProgress]:
        return self.store.wrong_words()

    def _answer(
        self,
        deck: StudyDeck,
        word: str,
        status: WordStatus,
        apply: Callable[[StorageData, WordProgress], None],
    ) -> AnswerResult:
        # Optimistic: the card leaves the deck before the write.
        taken = deck.take(word)
        try:
            data = self.store.load()
            entry = data.find_word(word)
            if entry is None:
                logger.warning(f"Answered word {word!r} is not in the bank")
                if taken:
                    deck.restore(*taken)
                return AnswerResult(word=word, status=None, persisted=False, remaining=len(deck))
            apply(data, entry)
            if deck is self.deck and not deck and self._session_answered(data):
                data.current_session.completed = True
            persisted = self.store.save(data)
        except Exception:
            if taken:
                deck.restore(*taken)
            raise

        if not persisted:
            logger.error(f"Could not save answer for {word!r}, reverting")
            if taken:
                deck.restore(*taken)
            return AnswerResult(word=word, status=None, persisted=False, remaining=len(deck))

        answers_recorded.labels(result=status.value).inc()
        return AnswerResult(word=word, status=status, persisted=True, remaining=len(deck))

    @staticmethod
    def _session_answered(data: StorageData) -> bool:
        loaded = set(data.current_session.words_loaded)
        if not loaded:
            return False
        return all(
            entry.status != WordStatus.UNSEEN
            for entry in data.word_bank if entry.word in loaded
        )

    def answer(self, word: str, correct: bool) -> AnswerResult:
        """Record an answer for one of today's cards."""
        if correct:
            def apply(data: StorageData, entry: WordProgress) -> None:
                self.store.apply_status(data, word, WordStatus.LEARNED)
                self.activity.apply_learned(data, word, entry.korean)
            return self._answer(self.deck, word, WordStatus.LEARNED, apply)

        def apply(data: StorageData, entry: WordProgress) -> None:
            self.store.apply_status(data, word, WordStatus.WRONG, increment_wrong=True)
            self.activity.apply_wrong(data, word, entry.korean)
        return self._answer(self.deck, word, WordStatus.WRONG, apply)

    def review_answer(self, word: str, correct: bool) -> AnswerResult:
        """Record an answer for a word under review."""
        if correct:
            def apply(data: StorageData, entry: WordProgress) -> None:
                self.store.apply_status(data, word, WordStatus.LEARNED)
                self.activity.apply_learned(data, word, entry.korean)
                self.activity.apply_remove_from_wrong(data, word)
            return self._answer(self.review_deck, word, WordStatus.LEARNED, apply)

        def apply(data: StorageData, entry: WordProgress) -> None:
            self.store.apply_status(data, word, WordStatus.WRONG, increment_wrong=True)
            self.activity.apply_wrong(data, word, entry.korean)
        return self._answer(self.review_deck, word, WordStatus.WRONG, apply)

    def change_daily_limit(self, limit: int) -> AppSettings:
        return self.store.update_settings(daily_limit=limit)

    def stats_overview(self, days: int = 7) -> Dict[str, Any]:
        """Everything the statistics page shows."""
        return {
            "basic": self.activity.basic_stats(),
            "daily": self.activity.daily_series(days),
            "distribution": self.activity.distribution(),
            "most_wrong": self.activity.most_wrong(5),
            "streak": self.activity.study_streak(),
        }

    def reset_all(self) -> None:
        """Forget all words, sessions and activity."""
        self.activity.clear_all()
        self.store.reset()
        self.deck = StudyDeck()
        self.review_deck = StudyDeck()
        logger.info("All study data reset")
