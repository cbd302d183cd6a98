"""Test configuration."""
import os
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Set test environment before any imports
os.environ["ENV"] = "test"

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)
os.environ.setdefault("DATABASE_URL", "sqlite://")

# Import after environment setup
from engtutor.models.word_models import WordRecord
from engtutor.services.activity_log import ActivityLog
from engtutor.services.key_value_store import MemoryKeyValueStore
from engtutor.services.progress_store import ProgressStore
from engtutor.services.session_selector import SessionSelector


class FakeClock:
    """Settable clock for date-dependent tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FailingKeyValueStore(MemoryKeyValueStore):
    """Memory store whose writes can be switched to fail."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_writes = False

    def set_item(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("quota exceeded")
        super().set_item(key, value)


def build_records(count: int, prefix: str = "word") -> list[WordRecord]:
    """Distinct word records in a predictable order."""
    return [
        WordRecord(word=f"{prefix}{i}", korean=f"단어{i}", part_of_speech="n", english=f"definition {i}")
        for i in range(count)
    ]


@pytest.fixture
def make_records():
    return build_records


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 15, 9, 30, tzinfo=UTC))


@pytest.fixture
def kv() -> FailingKeyValueStore:
    return FailingKeyValueStore()


@pytest.fixture
def warnings_shown() -> list[str]:
    return []


@pytest.fixture
def store(kv, clock, warnings_shown) -> ProgressStore:
    return ProgressStore(kv, key="test_data", clock=clock, warning_handler=warnings_shown.append)


@pytest.fixture
def selector(store) -> SessionSelector:
    return SessionSelector(store)


@pytest.fixture
def activity(store) -> ActivityLog:
    return ActivityLog(store)
