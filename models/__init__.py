"""
Core data models for the Store Opportunity Finder.
"""

from .schemas import (
    TitleKind,
    TitleClassification,
    BuiltQuery,
    SourceApp,
    CompetitorRecord,
    ScoredCompetitor,
    CheckRequest,
    OpportunityStats,
    OpportunityReport,
)

__all__ = [
    "TitleKind",
    "TitleClassification",
    "BuiltQuery",
    "SourceApp",
    "CompetitorRecord",
    "ScoredCompetitor",
    "CheckRequest",
    "OpportunityStats",
    "OpportunityReport",
]
