"""
Dependency injection container for CLI commands.

Services are created lazily so that commands which only need settings
(``--help``, ``init-db``) never open the record store.
"""

from __future__ import annotations

from flashdeck.config import Settings, get_settings


class CLIContext:
    """Lazily built record store and study service for one command."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._store = None
        self._study_service = None

    @property
    def store(self):
        """Lazy load SqlRecordStore."""
        if self._store is None:
            from flashdeck.db.repository import SqlRecordStore

            self._store = SqlRecordStore()
        return self._store

    @property
    def study_service(self):
        """Lazy load StudyService over the record store."""
        if self._study_service is None:
            from flashdeck.study.study_service import StudyService

            self._study_service = StudyService(self.store, settings=self.settings)
        return self._study_service

    def user(self, user_id: str | None) -> str:
        return user_id or self.settings.default_user_id


def build_context() -> CLIContext:
    """Build CLI context with dependency injection."""
    return CLIContext()
