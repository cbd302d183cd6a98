"""Service owning the persisted study document."""
import json
import logging
from datetime import UTC, date, datetime
from typing import Callable, Iterable, List, Optional, Union

from engtutor.config import Settings, settings as default_settings
from engtutor.models.word_models import (
    AppSettings,
    StorageData,
    Statistics,
    StudySession,
    WordProgress,
    WordRecord,
    WordStatus,
)
from engtutor.monitoring import storage_corrupt_loads, storage_write_failures, words_added
from engtutor.services.key_value_store import KeyValueStore

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = "Failed to save your progress. Changes may be lost when the app closes."

# Words can regress from learned to wrong when revisited. Nothing returns to
# unseen except a full reset.
ALLOWED_TRANSITIONS = {
    WordStatus.UNSEEN: {WordStatus.LEARNED, WordStatus.WRONG},
    WordStatus.LEARNED: {WordStatus.LEARNED, WordStatus.WRONG},
    WordStatus.WRONG: {WordStatus.LEARNED, WordStatus.WRONG},
}


class InvalidTransitionError(ValueError):
    """Raised when a word is moved to a status its lifecycle forbids."""


def utc_now() -> datetime:
    return datetime.now(UTC)


class ProgressStore:
    """Load, save and query the StorageData document."""

    def __init__(
        self,
        kv: KeyValueStore,
        key: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
        warning_handler: Optional[Callable[[str], None]] = None,
        settings: Settings = default_settings,
    ):
        """Initialize the store.

        Args:
            kv: Backend holding the JSON document.
            key: Storage key, defaults to the configured one.
            clock: Returns the current time; "today" is its date.
            warning_handler: Shows a notice to the user when a save fails.
            settings: Provides the storage key and the default daily limit.
        """
        self.settings = settings
        self.kv = kv
        self.key = key or settings.storage.key
        self.clock = clock or utc_now
        self.warning_handler = warning_handler or logger.warning
        self._write_warning_shown = False

    def today(self) -> date:
        return self.clock().date()

    def _default(self) -> StorageData:
        return StorageData.default(self.today(), self.settings.learning.daily_limit)

    def load(self) -> StorageData:
        """Return the stored document, starting a new session on a new day."""
        try:
            raw = self.kv.get_item(self.key)
        except Exception as e:
            logger.error(f"Error reading stored data: {e}")
            return self._default()

        if raw is None:
            return self._default()

        try:
            data = StorageData.from_dict(json.loads(raw), self.settings.learning.daily_limit)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Stored data is corrupt, using defaults: {e}")
            storage_corrupt_loads.inc()
            return self._default()

        known = {w.word for w in data.word_bank}
        dangling = [w for w in data.current_session.words_loaded if w not in known]
        if dangling:
            logger.warning(f"Dropping session words missing from the bank: {dangling}")
            data.current_session.words_loaded = [
                w for w in data.current_session.words_loaded if w in known
            ]

        today = self.today()
        if data.current_session.date != today:
            logger.info(f"New day {today}, resetting session from {data.current_session.date}")
            data.current_session = StudySession(date=today)
            self.save(data)

        return data

    def save(self, data: StorageData) -> bool:
        """Persist the whole document. Returns False if the write failed."""
        try:
            payload = json.dumps(data.to_dict(), ensure_ascii=False)
            self.kv.set_item(self.key, payload)
            return True
        except Exception as e:
            logger.error(f"Error saving data: {e}")
            storage_write_failures.inc()
            if not self._write_warning_shown:
                self._write_warning_shown = True
                self.warning_handler(SAVE_FAILED_MESSAGE)
            return False

    def reset(self) -> None:
        """Delete the stored document."""
        self.kv.remove_item(self.key)
        logger.info("Stored data removed")

    def update_settings(self, **changes) -> AppSettings:
        """Merge changes into the settings and persist them."""
        data = self.load()
        for name, value in changes.items():
            if not hasattr(data.settings, name):
                raise ValueError(f"Unknown setting: {name}")
            if name == "daily_limit" and (
                not isinstance(value, int) or isinstance(value, bool) or value < 1
            ):
                raise ValueError("daily_limit must be a positive integer")
            setattr(data.settings, name, value)
        self.save(data)
        return data.settings

    def apply_new_words(
        self, data: StorageData, records: Iterable[Union[WordRecord, WordProgress]]
    ) -> List[WordProgress]:
        """Append words not yet in the bank to data. Does not save."""
        existing = {w.word for w in data.word_bank}
        added = []
        for record in records:
            if record.word in existing:
                continue
            entry = WordProgress(
                word=record.word,
                korean=record.korean,
                english=record.english,
                part_of_speech=record.part_of_speech,
                example=record.example,
            )
            data.word_bank.append(entry)
            existing.add(record.word)
            added.append(entry)
        return added

    def add_words(self, records: Iterable[Union[WordRecord, WordProgress]]) -> List[WordProgress]:
        """Add new words to the bank, skipping words already present."""
        data = self.load()
        added = self.apply_new_words(data, records)
        if added:
            self.save(data)
            words_added.inc(len(added))
        logger.info(f"Added {len(added)} new words to the bank")
        return added

    def apply_status(
        self,
        data: StorageData,
        word: str,
        status: Union[WordStatus, str],
        increment_wrong: bool = False,
    ) -> Optional[WordProgress]:
        """Change a word's status in data. Does not save."""
        status = WordStatus(status)
        entry = data.find_word(word)
        if entry is None:
            return None

        if status not in ALLOWED_TRANSITIONS[entry.status]:
            raise InvalidTransitionError(
                f"Cannot move {word!r} from {entry.status.value} to {status.value}"
            )

        today = self.today()
        entry.status = status
        entry.last_studied = today
        if status == WordStatus.LEARNED:
            entry.learned_date = today
        if increment_wrong:
            entry.wrong_count += 1
        return entry

    def update_status(
        self, word: str, status: Union[WordStatus, str], increment_wrong: bool = False
    ) -> bool:
        """Update a word's status. Returns False if the word is not in the bank."""
        data = self.load()
        entry = self.apply_status(data, word, status, increment_wrong)
        if entry is None:
            logger.debug(f"Word {word!r} not in the bank, status unchanged")
            return False
        self.save(data)
        return True

    def get_word(self, word: str) -> Optional[WordProgress]:
        return self.load().find_word(word)

    def words_with_status(self, status: WordStatus) -> List[WordProgress]:
        return [w for w in self.load().word_bank if w.status == status]

    def unseen_words(self) -> List[WordProgress]:
        return self.words_with_status(WordStatus.UNSEEN)

    def learned_words(self) -> List[WordProgress]:
        return self.words_with_status(WordStatus.LEARNED)

    def wrong_words(self) -> List[WordProgress]:
        return self.words_with_status(WordStatus.WRONG)

    def statistics(self) -> Statistics:
        """Counts over the word bank and today's session."""
        data = self.load()
        counts = {status: 0 for status in WordStatus}
        for entry in data.word_bank:
            counts[entry.status] += 1
        return Statistics(
            total=len(data.word_bank),
            learned=counts[WordStatus.LEARNED],
            wrong=counts[WordStatus.WRONG],
            unseen=counts[WordStatus.UNSEEN],
            today_progress=len(data.current_session.words_loaded),
            today_limit=data.settings.daily_limit,
        )
