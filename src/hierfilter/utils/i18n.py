from __future__ import annotations

"""
Internationalization (i18n) Utility.

Provides a singleton manager for application-wide translations with
dot-notation lookup into nested JSON locale files and variable
interpolation. English and Spanish ship with the package.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# SYSTEM DEFAULTS
# -----------------------------------------------------------------------------

DEFAULT_LOCALE = "en"
LOCALES_REL_PATH = os.path.join("..", "interface", "locales")

# -----------------------------------------------------------------------------
# I18N MANAGER SERVICE
# -----------------------------------------------------------------------------

class I18n:
    """
    Resource manager for locale-specific string translations.
    """

    def __init__(self, locale: str = DEFAULT_LOCALE):
        self._locale = locale
        self._translations: Dict[str, Any] = {}
        self.is_loaded = False

        base_dir = os.path.dirname(os.path.abspath(__file__))
        self._locales_path = os.path.abspath(os.path.join(base_dir, LOCALES_REL_PATH))

        self.load_locale(locale)

    @property
    def locale(self) -> str:
        return self._locale

    def available_locales(self) -> List[str]:
        """List the locale identifiers shipped in the locales directory."""
        if not os.path.isdir(self._locales_path):
            return []
        return sorted(
            os.path.splitext(name)[0]
            for name in os.listdir(self._locales_path)
            if name.endswith(".json")
        )

    def load_locale(self, locale: str) -> None:
        """
        Load a translation dictionary from the filesystem.

        A missing or unreadable file keeps the manager usable: lookups then
        fall back to the provided default or to the key itself.

        Args:
            locale: ISO identifier for the target language.
        """
        file_path = os.path.join(self._locales_path, f"{locale}.json")

        if not os.path.exists(file_path):
            logger.warning(f"I18n: Locale resource missing at '{file_path}'. Fallback active.")
            self._translations = {}
            self.is_loaded = False
            return

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                self._translations = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"I18n: Corruption in locale file {file_path}: {e}")
            self._translations = {}
            self.is_loaded = False
            return

        self._locale = locale
        self.is_loaded = True
        logger.debug(f"I18n: Loaded locale dictionary: {locale}")

    def t(self, key: str, default: Optional[str] = None, **kwargs: Any) -> str:
        """
        Resolve and format a translation string using dot-notation.

        Args:
            key: Hierarchical identifier path (e.g., 'gui.buttons.save').
            default: Text used when the key does not resolve.
            **kwargs: Variables for str.format interpolation.

        Returns:
            str: The translated text, the default, or the key itself.
        """
        current: Any = self._translations
        for part in key.split("."):
            if not isinstance(current, dict):
                current = None
                break
            current = current.get(part)

        text = current if isinstance(current, str) else (default if default is not None else key)
        if not kwargs:
            return text

        try:
            return text.format(**kwargs)
        except (KeyError, IndexError, ValueError) as e:
            logger.debug(f"I18n: Interpolation error for '{key}': {e}")
            return text

# -----------------------------------------------------------------------------
# SERVICE INITIALIZATION
# -----------------------------------------------------------------------------

# Global singleton instance for application-wide resource access
i18n = I18n(DEFAULT_LOCALE)
