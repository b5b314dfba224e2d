"""Persistence of per-document page settings.

Page settings (format, margins, header/footer, zoom, view mode...) are stored
in an OS-appropriate config location, indexed by the absolute path of the
document, and survive application restarts.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .config import PageSettings
from .constants import EngineConstants

logger = logging.getLogger(__name__)


class SettingsPersistence:
    """Manages persistent storage of per-document page settings.

    Settings are stored in a JSON file in the user's config directory,
    keyed by the absolute path of the document.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        self._config_dir = Path(config_dir) if config_dir is not None else Path(
            platformdirs.user_config_dir(EngineConstants.APP_NAME, EngineConstants.APP_AUTHOR))
        self._settings_file = self._config_dir / EngineConstants.SETTINGS_FILENAME
        self._settings_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @property
    def settings_file(self) -> Path:
        return self._settings_file

    def _load_all(self) -> Dict[str, Dict[str, Any]]:
        """Load every stored record; empty on a missing or unreadable file."""
        if self._settings_cache is not None:
            return self._settings_cache

        if not self._settings_file.exists():
            self._settings_cache = {}
            return self._settings_cache

        try:
            with open(self._settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load page settings from {self._settings_file}: {e}")
            self._settings_cache = {}
            return self._settings_cache

        if not isinstance(data, dict):
            logger.warning("Page settings file has invalid format (not a dict), ignoring")
            data = {}
        self._settings_cache = data
        return self._settings_cache

    def _save_all(self, settings: Dict[str, Dict[str, Any]]) -> bool:
        """Write every record atomically (temp file + rename)."""
        try:
            self._config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Could not create config directory {self._config_dir}: {e}")
            return False

        temp_file = self._settings_file.with_suffix('.tmp')
        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(settings, f, indent=2, ensure_ascii=False)
            temp_file.replace(self._settings_file)
        except OSError as e:
            logger.warning(f"Could not save page settings to {self._settings_file}: {e}")
            try:
                if temp_file.exists():
                    temp_file.unlink()
            except OSError:
                logger.debug(f"Could not remove {temp_file}")
            return False

        self._settings_cache = settings
        return True

    @staticmethod
    def _key(document_path: Optional[str]) -> Optional[str]:
        if document_path is None:
            return None
        try:
            return os.path.abspath(document_path)
        except (OSError, ValueError):
            logger.warning(f"Invalid document path: {document_path}")
            return None

    def load(self, document_path: Optional[str]) -> PageSettings:
        """Page settings for a document; defaults when nothing usable is stored."""
        key = self._key(document_path)
        if key is None:
            return PageSettings()
        record = self._load_all().get(key, {})
        if not isinstance(record, dict):
            logger.warning(f"Page settings for {key} are not a dict, ignoring")
            return PageSettings()
        try:
            return PageSettings.from_dict(record)
        except (ValueError, TypeError, IndexError, AttributeError) as e:
            logger.warning(f"Discarding unreadable page settings for {key}: {e}")
            return PageSettings()

    def save(self, document_path: Optional[str], settings: PageSettings) -> bool:
        """Store page settings for a document. Returns True on success."""
        key = self._key(document_path)
        if key is None:
            return False
        all_settings = dict(self._load_all())
        all_settings[key] = settings.to_dict()
        return self._save_all(all_settings)

    def forget(self, document_path: Optional[str]) -> bool:
        key = self._key(document_path)
        all_settings = dict(self._load_all())
        if key is None or key not in all_settings:
            return False
        del all_settings[key]
        return self._save_all(all_settings)

    def clear_cache(self) -> None:
        """Drop the in-memory copy so the next read goes to disk."""
        self._settings_cache = None
