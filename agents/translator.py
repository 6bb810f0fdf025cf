"""
Translator
-----------
Turns an English descriptive phrase into Russian so it can be searched on
the target store. Backed by the MyMemory translation API.

  - Cyrillic input is returned untouched (never double-translates).
  - Successful translations are cached for the life of the process.
  - After retries are exhausted the original text is returned; a failed
    translation never fails a check.
  - MyMemory error payloads (non-200 responseStatus, "MYMEMORY WARNING"
    texts) count as failures and are never cached.
"""

import logging
import re
import threading
from typing import Dict, Optional, Protocol

import requests

from config.settings import settings
from utils.retry import with_retry

logger = logging.getLogger(__name__)

_CYRILLIC = re.compile(r"[а-яё]", re.IGNORECASE)

MYMEMORY_WARNING = "MYMEMORY WARNING"


class TranslationError(RuntimeError):
    """The translation service gave no usable translation."""


def has_cyrillic(text: str) -> bool:
    return bool(_CYRILLIC.search(text))


class TranslationCache(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryTranslationCache:
    """Thread-safe dict cache shared by concurrent checks."""

    def __init__(self):
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


class Translator:
    def __init__(
        self,
        cache: Optional[TranslationCache] = None,
        session: Optional[requests.Session] = None,
        langpair: str = settings.TRANSLATE_LANGPAIR,
        timeout: float = settings.TRANSLATE_TIMEOUT,
        max_retries: int = settings.MAX_RETRIES,
        base_delay: float = settings.RETRY_BASE_DELAY,
    ):
        self.cache = cache if cache is not None else InMemoryTranslationCache()
        self.session = session or requests.Session()
        self.langpair = langpair
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_delay = base_delay

    def _request(self, text: str) -> str:
        resp = self.session.get(
            settings.TRANSLATE_URL,
            params={"q": text, "langpair": self.langpair},
            timeout=self.timeout,
        )
        if not resp.ok:
            raise TranslationError(f"MyMemory HTTP {resp.status_code}")
        try:
            payload = resp.json()
            translated = payload["responseData"]["translatedText"]
        except (ValueError, KeyError, TypeError) as e:
            raise TranslationError(f"Malformed MyMemory response: {e}") from e

        # Quota, rate-limit and langpair errors arrive as HTTP 200 with the
        # real status in the body and the warning text in place of a translation.
        status = payload.get("responseStatus")
        if status is not None and str(status) != "200":
            raise TranslationError(f"MyMemory status {status}: {translated}")
        if not translated or not isinstance(translated, str):
            raise TranslationError("MyMemory returned an empty translation")
        if translated.strip().upper().startswith(MYMEMORY_WARNING):
            raise TranslationError(f"MyMemory warning: {translated}")
        return translated.strip()

    def translate(self, text: str) -> str:
        if has_cyrillic(text):
            return text

        cached = self.cache.get(text)
        if cached is not None:
            logger.info(f'Translation cache hit: "{text}" → "{cached}"')
            return cached

        try:
            translated = with_retry(
                lambda: self._request(text),
                max_retries=self.max_retries,
                base_delay=self.base_delay,
                name="MyMemory translate",
            )
        except Exception as e:
            logger.error(f'Translation failed for "{text}" after retries: {e}')
            return text

        if translated.lower() != text.lower():
            logger.info(f'Translated: "{text}" → "{translated}"')
            self.cache.set(text, translated)
            return translated
        return text
