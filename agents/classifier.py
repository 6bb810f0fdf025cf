"""
Title Classifier
-----------------
Decides whether an app title is a brand, a descriptive phrase, or both.

  brand        "WhatsApp", "TikTok", "VPN Master™"  → searched as-is
  descriptive  "Photo Editor", "Music Player"       → translated
  mixed        "Spotify Music", "Zoom Meetings"     → searched as-is

A token is a brand token when it looks like a proper product name:
  - camel compounding (a lowercase letter directly followed by an uppercase one)
  - all capitals, 2+ letters (VPN, GPS, PDF)
  - letters mixed with digits (MP3, 4K, S21)
  - a trademark / registered / copyright glyph on the raw word
"""

import re
from typing import List

from config.vocabulary import TITLE_PUNCTUATION, TRADEMARK_GLYPHS, UNIVERSAL_FILLER
from models.schemas import TitleClassification

_CAMEL = re.compile(r"[a-z][A-Z]")
_ALL_CAPS = re.compile(r"^[A-Z]{2,}$")
_LETTER = re.compile(r"[a-zA-Z]")
_DIGIT = re.compile(r"\d")
_PUNCT_TABLE = str.maketrans("", "", TITLE_PUNCTUATION)

_FILLER_WORDS = frozenset(UNIVERSAL_FILLER)


def strip_token(word: str) -> str:
    """Remove title punctuation (and trademark glyphs) from a single token."""
    return word.translate(_PUNCT_TABLE)


def is_brand_token(token: str, raw: str = "") -> bool:
    if _CAMEL.search(token):
        return True
    if _ALL_CAPS.match(token):
        return True
    if _LETTER.search(token) and _DIGIT.search(token):
        return True
    return any(glyph in (raw or token) for glyph in TRADEMARK_GLYPHS)


def classify_title(title: str) -> TitleClassification:
    brand: List[str] = []
    other: List[str] = []

    for raw in title.split():
        token = strip_token(raw)
        if not token:
            continue
        if is_brand_token(token, raw):
            brand.append(token)
        else:
            other.append(token)

    # Fillers ("Pro", "Free", "the") never make a title descriptive.
    meaningful = [
        w for w in other
        if w.lower() not in _FILLER_WORDS and len(w) >= 2
    ]
    return TitleClassification(brand_tokens=tuple(brand), other_tokens=tuple(meaningful))
