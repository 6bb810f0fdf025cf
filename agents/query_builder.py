"""
Query Builder
--------------
Builds the store search string for an app title.

  1. Titles of 1-2 words are only stripped of punctuation.
  2. Otherwise brand tokens and the first word are protected, universal
     and category fillers are removed, punctuation is stripped.
  3. If that leaves fewer than 2 real words, fall back to the
     punctuation-only cleanup; if even that is shorter than 2 characters,
     use the raw title.

Only descriptive titles are translated: the target store searches Latin
brand strings fine, and translating a brand name corrupts it.

Input:  CheckRequest
Output: SearchPlan
"""

import re
from dataclasses import dataclass
from typing import Optional, Set
from urllib.parse import quote

from agents.base import Agent
from agents.classifier import classify_title, is_brand_token, strip_token
from agents.translator import Translator
from config.settings import settings
from config.vocabulary import (
    CATEGORY_FILLER,
    SHORT_TITLE_PUNCTUATION,
    TITLE_PUNCTUATION,
    UNIVERSAL_FILLER,
)
from models.schemas import BuiltQuery, CheckRequest, TitleKind

_WS = re.compile(r"\s+")


def _char_class(chars: str) -> re.Pattern:
    return re.compile("[" + re.escape(chars) + "]")


_PUNCT = _char_class(TITLE_PUNCTUATION)
_SHORT_PUNCT = _char_class(SHORT_TITLE_PUNCTUATION)


def strip_punctuation(text: str, short: bool = False) -> str:
    """Replace punctuation with spaces and collapse whitespace. Idempotent."""
    pattern = _SHORT_PUNCT if short else _PUNCT
    return _WS.sub(" ", pattern.sub(" ", text)).strip()


def _remove_word(text: str, phrase: str) -> str:
    # ASCII word boundaries: Cyrillic letters count as non-word characters.
    return re.sub(
        r"\b" + re.escape(phrase) + r"\b", " ", text,
        flags=re.IGNORECASE | re.ASCII,
    )


def protected_words(title: str) -> Set[str]:
    """Brand tokens plus the first word ("Spotify Music" → spotify)."""
    protected = set()
    for i, raw in enumerate(title.split()):
        token = strip_token(raw)
        if not token:
            continue
        if i == 0 or is_brand_token(token, raw):
            protected.add(token.lower())
    return protected


def clean_search_query(title: str, category: str = "") -> str:
    words = title.split()
    if len(words) <= 2:
        cleaned = strip_punctuation(title, short=True).lower()
        return cleaned if len(cleaned) >= 2 else title

    protected = protected_words(title)
    cleaned = title.lower()

    for phrase in UNIVERSAL_FILLER:
        if " " not in phrase and phrase in protected:
            continue
        cleaned = _remove_word(cleaned, phrase)

    for word in sorted(CATEGORY_FILLER.get(category, ())):
        if word in protected:
            continue
        cleaned = _remove_word(cleaned, word)

    cleaned = strip_punctuation(cleaned)

    remaining = [w for w in cleaned.split(" ") if len(w) >= 2]
    if len(remaining) < 2 or len(cleaned) < 3:
        cleaned = strip_punctuation(title).lower()

    return cleaned if len(cleaned) >= 2 else title


def build_query(title: str, category: str = "", translator: Optional[Translator] = None) -> BuiltQuery:
    classification = classify_title(title)
    cleaned = clean_search_query(title, category)

    query = cleaned
    if classification.kind == TitleKind.DESCRIPTIVE and translator is not None:
        query = translator.translate(cleaned)

    return BuiltQuery(
        query=query,
        cleaned=cleaned,
        was_translated=query != cleaned,
        classification=classification,
    )


def search_url_for(query: str, base: str = settings.STORE_SEARCH_URL) -> str:
    # Same escaping as the browser's encodeURIComponent.
    return base + quote(query, safe="!~*'()")


# ─── QueryBuilderAgent ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class SearchPlan:
    request: CheckRequest
    built: BuiltQuery
    search_url: str

    @property
    def search_query(self) -> str:
        return self.built.query


class QueryBuilderAgent(Agent):
    """
    Stage 1: classify the title and build the store search query.

    Input:  CheckRequest
    Output: SearchPlan
    """

    def __init__(self, translator: Optional[Translator] = None):
        super().__init__(name="QueryBuilderAgent")
        self.translator = translator

    def run(self, request: CheckRequest) -> SearchPlan:
        built = build_query(request.title, request.category, self.translator)
        kind = built.classification.kind.value
        self.logger.info(
            f"Title type: {kind} (brand words: [{', '.join(built.classification.brand_tokens)}])"
        )
        self.logger.info(f'Cleaned query: "{built.cleaned}"')
        if built.was_translated:
            self.logger.info(f'{kind} → translated to: "{built.query}"')
        else:
            self.logger.info(f'{kind} → keeping original: "{built.query}"')

        return SearchPlan(
            request=request,
            built=built,
            search_url=search_url_for(built.query),
        )
