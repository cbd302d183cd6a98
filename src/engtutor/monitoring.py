"""Monitoring counters for the trainer."""
from prometheus_client import Counter

# Word acquisition metrics
words_fetched = Counter(
    "engtutor_words_fetched_total",
    "Total number of words fetched from the word source",
    ["source"],
)

word_fetch_failures = Counter(
    "engtutor_word_fetch_failures_total",
    "Total number of word lookups that were dropped",
    ["source"],
)

translation_fallbacks = Counter(
    "engtutor_translation_fallbacks_total",
    "Total number of translations that needed a fallback",
    ["stage"],  # definition, original
)

# Learning metrics
answers_recorded = Counter(
    "engtutor_answers_recorded_total",
    "Total number of answers recorded",
    ["result"],  # learned, wrong
)

words_added = Counter(
    "engtutor_words_added_total",
    "Total number of words added to the word bank",
)

# Storage metrics
storage_write_failures = Counter(
    "engtutor_storage_write_failures_total",
    "Total number of failed writes to persistent storage",
)

storage_corrupt_loads = Counter(
    "engtutor_storage_corrupt_loads_total",
    "Total number of stored documents replaced by defaults",
)
