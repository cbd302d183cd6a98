"""Application wiring."""
import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from engtutor.config import Settings, settings as default_settings
from engtutor.logging_config import setup_logging
from engtutor.models.base import SessionLocal, init_db
from engtutor.services.activity_log import ActivityLog
from engtutor.services.key_value_store import SqlKeyValueStore
from engtutor.services.progress_store import ProgressStore
from engtutor.services.session_selector import SessionSelector
from engtutor.services.study_service import StudyService
from engtutor.services.word_fetcher import WordFetcher
from engtutor.services.word_source import create_translator, create_word_source


class EngTutorApp:
    """Main application class."""

    def __init__(
        self,
        settings: Settings = default_settings,
        session_factory: Callable[[], Session] = SessionLocal,
        clock: Optional[Callable[[], datetime]] = None,
        warning_handler: Optional[Callable[[str], None]] = None,
    ):
        """Initialize the application."""
        self.settings = settings
        self.session_factory = session_factory
        self.clock = clock
        self.warning_handler = warning_handler
        self.db: Optional[Session] = None
        self.study: Optional[StudyService] = None
        self.running = False
        self.logger = logging.getLogger(__name__)

    def start(self) -> StudyService:
        """Open storage and build the services."""
        if self.running:
            return self.study

        setup_logging("Starting EngTutor", level=self.settings.logging.level)

        try:
            self.db = self.session_factory()
            init_db(self.db.get_bind())
            self.logger.info("Database initialized")

            store = ProgressStore(
                SqlKeyValueStore(self.db),
                key=self.settings.storage.key,
                clock=self.clock,
                warning_handler=self.warning_handler,
                settings=self.settings,
            )
            fetcher = WordFetcher(
                create_word_source(self.settings),
                create_translator(self.settings),
                settings=self.settings,
            )
            self.study = StudyService(store, SessionSelector(store), ActivityLog(store), fetcher)
            self.running = True
            self.logger.info("Application started")
            return self.study

        except Exception as e:
            self.logger.error("Failed to start application: %s", str(e))
            self.stop()
            raise

    def stop(self) -> None:
        """Close storage."""
        if self.db:
            self.db.close()
            self.db = None
            self.logger.info("Database session closed")
        self.study = None
        self.running = False
