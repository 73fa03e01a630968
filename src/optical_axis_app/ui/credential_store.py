"""Persistence for the generation service API key."""
from __future__ import annotations

from typing import Optional

from loguru import logger
from PyQt6.QtCore import QSettings

from ..config import APPLICATION_NAME, ORGANIZATION_NAME, env_api_key

API_KEY_SETTING = "generation/api_key"


class CredentialStore:
    """Stores the API key in ``QSettings``; falls back to ``GEMINI_API_KEY``."""

    def __init__(self, settings: Optional[QSettings] = None) -> None:
        if settings is None:
            settings = QSettings(ORGANIZATION_NAME, APPLICATION_NAME)
        self._settings = settings

    def api_key(self) -> str:
        stored = self._settings.value(API_KEY_SETTING, "", type=str)
        return stored or env_api_key() or ""

    def has_stored_key(self) -> bool:
        return bool(self._settings.value(API_KEY_SETTING, "", type=str))

    def set_api_key(self, key: str) -> None:
        key = key.strip()
        if key:
            self._settings.setValue(API_KEY_SETTING, key)
        else:
            self._settings.remove(API_KEY_SETTING)
        self._settings.sync()
        logger.info("API key {}", "saved" if key else "cleared")
