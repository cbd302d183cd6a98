"""Adapters for the external word source and translation services."""
import logging
import random
import string
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

import nltk
import requests
from deep_translator import DeeplTranslator, GoogleTranslator
from nltk.corpus import wordnet

from engtutor.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

NO_DEFINITION = "No definition available"
UNKNOWN_POS = "unknown"

WORDNET_POS = {
    "n": "noun",
    "v": "verb",
    "a": "adj",
    "s": "adj",
    "r": "adv",
}


@dataclass(frozen=True)
class WordCandidate:
    """An English word with its dictionary data, before translation."""
    word: str
    part_of_speech: str
    definition: str
    example: Optional[str] = None


class WordSource(ABC):
    """Capability: produce random English word candidates."""

    name = "base"

    @abstractmethod
    def fetch_candidate(self) -> Optional[WordCandidate]:
        """Return one random candidate, or None if the lookup failed."""


class DatamuseWordSource(WordSource):
    """Random words from the Datamuse API."""

    name = "datamuse"

    def __init__(self, url: str, timeout: float = 10, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    @staticmethod
    def _split_definition(entry: str) -> tuple[str, str]:
        # Datamuse definitions look like "n\tthe definition"
        pos, _, definition = entry.partition("\t")
        if not definition:
            return UNKNOWN_POS, pos
        return pos or UNKNOWN_POS, definition

    def fetch_candidate(self) -> Optional[WordCandidate]:
        letter = random.choice(string.ascii_lowercase)
        try:
            response = self.session.get(
                self.url,
                params={"sp": f"{letter}*", "max": 10, "md": "d"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            results = response.json()
        except Exception as e:
            logger.error(f"Error fetching words from Datamuse: {e}")
            return None

        if not isinstance(results, list) or not results:
            logger.warning(f"Datamuse returned no words for prefix {letter!r}")
            return None

        choice = random.choice(results)
        word = str(choice.get("word", "")).strip()
        if not word:
            return None

        defs = choice.get("defs") or []
        pos, definition = UNKNOWN_POS, NO_DEFINITION
        if defs:
            pos, definition = self._split_definition(defs[0])
        example = self._split_definition(defs[1])[1] if len(defs) > 1 else None
        logger.debug(f"Datamuse candidate: {word} ({pos})")
        return WordCandidate(word=word, part_of_speech=pos, definition=definition, example=example)


class WordNetWordSource(WordSource):
    """Random words from the local NLTK WordNet corpus."""

    name = "wordnet"
    _last_check: Optional[datetime] = None
    _check_interval = timedelta(days=7)

    def __init__(self):
        self._lemmas: List[str] = []

    @classmethod
    def ensure_corpus(cls) -> None:
        """Download the WordNet corpus if it is missing."""
        now = datetime.now()
        if cls._last_check is not None and now - cls._last_check < cls._check_interval:
            return
        try:
            nltk.data.find("corpora/wordnet")
        except LookupError:
            nltk.download("wordnet", quiet=True)
            logger.info("Downloaded NLTK wordnet data")
        cls._last_check = now

    def _lemma_names(self) -> List[str]:
        if not self._lemmas:
            self.ensure_corpus()
            self._lemmas = [
                name for name in wordnet.all_lemma_names()
                if name.isalpha() and name.islower()
            ]
        return self._lemmas

    def fetch_candidate(self) -> Optional[WordCandidate]:
        try:
            word = random.choice(self._lemma_names())
            synsets = wordnet.synsets(word)
        except Exception as e:
            logger.error(f"Error reading WordNet: {e}")
            return None

        if not synsets:
            return None

        syn = synsets[0]
        examples = syn.examples()
        return WordCandidate(
            word=word,
            part_of_speech=WORDNET_POS.get(syn.pos(), UNKNOWN_POS),
            definition=syn.definition() or NO_DEFINITION,
            example=examples[0] if examples else None,
        )


class Translator(ABC):
    """Capability: translate English text."""

    @abstractmethod
    def translate(self, text: str) -> str:
        """Translate text, returning the original text on failure."""


class KoreanTranslator(Translator):
    """English to Korean translation through deep-translator."""

    def __init__(self, source_lang: str = "en", target_lang: str = "ko", deepl_api_key: Optional[str] = None):
        self.source_lang = source_lang
        self.target_lang = target_lang
        self.deepl_api_key = deepl_api_key

    def _backend(self):
        if self.deepl_api_key:
            return DeeplTranslator(
                api_key=self.deepl_api_key,
                source=self.source_lang,
                target=self.target_lang,
                use_free_api=True,
            )
        return GoogleTranslator(source=self.source_lang, target=self.target_lang)

    def translate(self, text: str) -> str:
        if not text or not text.strip():
            return text
        try:
            translation = self._backend().translate(text)
        except Exception as e:
            logger.error(f"Error translating text: {text}, error: {e}")
            return text
        if not translation:
            return text
        logger.info(f"Translation generated for: {text}, translation: {translation}")
        return translation


def create_word_source(settings: Settings = default_settings) -> WordSource:
    """Build the configured word source."""
    if settings.source.provider == "wordnet":
        return WordNetWordSource()
    return DatamuseWordSource(settings.source.datamuse_url, timeout=settings.source.request_timeout)


def create_translator(settings: Settings = default_settings) -> Translator:
    """Build the configured translator."""
    return KoreanTranslator(
        source_lang=settings.translation.source_lang,
        target_lang=settings.translation.target_lang,
        deepl_api_key=settings.translation.deepl_api_key,
    )
