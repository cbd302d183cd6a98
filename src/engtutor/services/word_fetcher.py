"""Service acquiring translated words for the word bank."""
import logging
import math
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError, as_completed
from typing import List, Optional

from engtutor.config import Settings, settings as default_settings
from engtutor.models.word_models import WordRecord
from engtutor.monitoring import translation_fallbacks, word_fetch_failures, words_fetched
from engtutor.services.word_source import NO_DEFINITION, Translator, WordCandidate, WordSource

logger = logging.getLogger(__name__)


def is_degraded(source: str, translation: Optional[str]) -> bool:
    """True if the translation is empty or just echoes the source text."""
    if not translation or not translation.strip():
        return True
    return translation.strip().casefold() == source.strip().casefold()


class WordFetcher:
    """Fetch random words and their Korean translations."""

    def __init__(
        self,
        source: WordSource,
        translator: Translator,
        workers: Optional[int] = None,
        call_timeout: Optional[float] = None,
        settings: Settings = default_settings,
    ):
        self.source = source
        self.translator = translator
        self.workers = workers or settings.source.fetch_workers
        # a lookup is a word request plus up to two translations
        self.call_timeout = call_timeout or settings.source.request_timeout * 3

    def translate_candidate(self, candidate: WordCandidate) -> str:
        """Korean for a candidate, falling back to its definition, then to the word."""
        korean = self.translator.translate(candidate.word)
        if not is_degraded(candidate.word, korean):
            return korean

        logger.info(f"Translation of {candidate.word!r} echoed the input, trying the definition")
        translation_fallbacks.labels(stage="definition").inc()
        definition = candidate.definition
        if definition and definition != NO_DEFINITION:
            korean = self.translator.translate(definition)
            if not is_degraded(definition, korean):
                return korean

        logger.warning(f"No usable translation for {candidate.word!r}, keeping the original word")
        translation_fallbacks.labels(stage="original").inc()
        return candidate.word

    def fetch_word(self) -> Optional[WordRecord]:
        """Fetch and translate one word. Returns None on failure."""
        try:
            candidate = self.source.fetch_candidate()
            if candidate is None:
                word_fetch_failures.labels(source=self.source.name).inc()
                return None
            korean = self.translate_candidate(candidate)
        except Exception as e:
            logger.error(f"Error acquiring word from {self.source.name}: {e}")
            word_fetch_failures.labels(source=self.source.name).inc()
            return None

        words_fetched.labels(source=self.source.name).inc()
        return WordRecord(
            word=candidate.word,
            korean=korean,
            part_of_speech=candidate.part_of_speech,
            english=candidate.definition,
            example=candidate.example,
        )

    def fetch_words(self, count: int) -> List[WordRecord]:
        """Fetch up to `count` words. Failed or late lookups are dropped."""
        if count <= 0:
            return []

        logger.info(f"Fetching {count} words from {self.source.name} with {self.workers} workers")
        rounds = math.ceil(count / self.workers)
        deadline = self.call_timeout * rounds

        records: List[WordRecord] = []
        seen = set()
        executor = ThreadPoolExecutor(max_workers=self.workers)
        try:
            futures = [executor.submit(self.fetch_word) for _ in range(count)]
            try:
                for future in as_completed(futures, timeout=deadline):
                    record = future.result()
                    if record is None or record.word in seen:
                        continue
                    seen.add(record.word)
                    records.append(record)
            except FuturesTimeoutError:
                pending = sum(1 for f in futures if not f.done())
                logger.warning(f"Word fetch timed out, abandoning {pending} lookups")
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        logger.info(f"Fetched {len(records)}/{count} words")
        return records
