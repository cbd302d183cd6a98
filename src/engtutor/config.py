"""Configuration settings for the trainer."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Define base directory
BASE_DIR = Path(__file__).parent.parent.parent

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(BASE_DIR / env_file)

# Storage settings
STORAGE_KEY = "engtutor_data"
STORAGE_VERSION = "1.0.0"

# Learning settings
LOW_WATER_MARK = 20  # unseen words kept in the bank before refilling
REFILL_BANK_TARGET = 50
REFILL_MIN_BATCH = 30


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///engtutor.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class StorageSettings:
    """Key/value storage settings."""
    key: str = os.getenv("STORAGE_KEY", STORAGE_KEY)


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class LearningSettings:
    """Learning process settings."""
    daily_limit: int = int(os.getenv("DAILY_LIMIT", "10"))
    low_water_mark: int = int(os.getenv("LOW_WATER_MARK", str(LOW_WATER_MARK)))
    refill_bank_target: int = int(os.getenv("REFILL_BANK_TARGET", str(REFILL_BANK_TARGET)))
    refill_min_batch: int = int(os.getenv("REFILL_MIN_BATCH", str(REFILL_MIN_BATCH)))


@dataclass
class SourceSettings:
    """Word source settings."""
    provider: str = os.getenv("WORD_SOURCE", "datamuse")
    datamuse_url: str = os.getenv("DATAMUSE_URL", "https://api.datamuse.com/words")
    request_timeout: float = float(os.getenv("REQUEST_TIMEOUT", "10"))
    fetch_workers: int = int(os.getenv("FETCH_WORKERS", "4"))


@dataclass
class TranslationSettings:
    """Translation settings."""
    source_lang: str = os.getenv("TRANSLATION_SOURCE_LANG", "en")
    target_lang: str = os.getenv("TRANSLATION_TARGET_LANG", "ko")
    deepl_api_key: Optional[str] = os.getenv("DEEPL_API_KEY") or None


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_storage_settings() -> StorageSettings:
    """Get storage settings."""
    return StorageSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_learning_settings() -> LearningSettings:
    """Get learning settings."""
    return LearningSettings()


def get_source_settings() -> SourceSettings:
    """Get word source settings."""
    return SourceSettings()


def get_translation_settings() -> TranslationSettings:
    """Get translation settings."""
    return TranslationSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    database: DatabaseSettings = field(default_factory=get_database_settings)
    storage: StorageSettings = field(default_factory=get_storage_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    learning: LearningSettings = field(default_factory=get_learning_settings)
    source: SourceSettings = field(default_factory=get_source_settings)
    translation: TranslationSettings = field(default_factory=get_translation_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if not self.storage.key:
            raise ValueError("STORAGE_KEY is required")

        if self.learning.daily_limit < 1:
            raise ValueError("DAILY_LIMIT must be positive")

        if self.learning.low_water_mark < 0:
            raise ValueError("LOW_WATER_MARK cannot be negative")

        if self.learning.refill_min_batch < 1:
            raise ValueError("REFILL_MIN_BATCH must be positive")

        if self.source.provider not in ("datamuse", "wordnet"):
            raise ValueError("WORD_SOURCE must be 'datamuse' or 'wordnet'")

        if self.source.request_timeout <= 0:
            raise ValueError("REQUEST_TIMEOUT must be positive")

        if self.source.fetch_workers < 1:
            raise ValueError("FETCH_WORKERS must be positive")


# Create global settings instance
settings = Settings()
settings.validate()
