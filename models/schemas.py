"""
Core data models / schemas for the Store Opportunity Finder.

Every record here is created fresh for a single check and is never mutated
afterwards; derived values are always new records.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


# ---------------------------------------------------------------------------
# Title analysis
# ---------------------------------------------------------------------------

class TitleKind(str, Enum):
    BRAND = "brand"
    DESCRIPTIVE = "descriptive"
    MIXED = "mixed"


@dataclass(frozen=True)
class TitleClassification:
    brand_tokens: Tuple[str, ...] = ()
    other_tokens: Tuple[str, ...] = ()      # meaningful words only, fillers removed

    @property
    def kind(self) -> TitleKind:
        if self.brand_tokens and not self.other_tokens:
            return TitleKind.BRAND
        if self.brand_tokens:
            return TitleKind.MIXED
        return TitleKind.DESCRIPTIVE


@dataclass(frozen=True)
class BuiltQuery:
    query: str                      # what is sent to the store search
    cleaned: str                    # cleaned title in the source language
    was_translated: bool
    classification: TitleClassification


# ---------------------------------------------------------------------------
# Source-store listings and competitor candidates
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SourceApp:
    """One row of a Google Play ranking as published by AppBrain."""
    rank: int
    title: str
    category: str = "General"
    gp_rating: float = 0.0
    installs: str = "N/A"           # e.g. "10M+", "500K+"
    recent: str = "N/A"
    gp_url: str = ""


@dataclass(frozen=True)
class CompetitorRecord:
    name: str
    category: str = ""
    rating: Optional[float] = None
    url: str = ""


@dataclass(frozen=True)
class ScoredCompetitor:
    name: str
    category: str
    rating: Optional[float]
    url: str
    relevance: float                # 0-1
    relevant: bool

    @classmethod
    def from_record(cls, record: CompetitorRecord, relevance: float, relevant: bool) -> "ScoredCompetitor":
        return cls(
            name=record.name,
            category=record.category,
            rating=record.rating,
            url=record.url,
            relevance=relevance,
            relevant=relevant,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["relevance"] = round(self.relevance, 4)
        return data


# ---------------------------------------------------------------------------
# Check input / output
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CheckRequest:
    title: str
    category: str = ""
    gp_rating: float = 0.0
    installs: Union[str, int, float, None] = "N/A"


@dataclass(frozen=True)
class OpportunityStats:
    competitors_count: int
    avg_rating: Optional[float]
    max_rating: Optional[float]
    gp_rating: float = 0.0
    installs: Union[str, int, float, None] = "N/A"


@dataclass(frozen=True)
class OpportunityReport:
    search_query: str
    search_url: str
    competitors_count: int
    top_competitors: Tuple[ScoredCompetitor, ...]
    avg_rating: Optional[float]
    max_rating: Optional[float]
    opportunity_score: int          # 0-100
    factors: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "search_query": self.search_query,
            "search_url": self.search_url,
            "competitors_count": self.competitors_count,
            "avg_rating": self.avg_rating,
            "max_rating": self.max_rating,
            "opportunity_score": self.opportunity_score,
            "top_competitors": [c.to_dict() for c in self.top_competitors],
            "factors": {k: round(v, 4) for k, v in self.factors.items()},
        }
