from .base import Agent, AgentResult, Orchestrator
from .classifier import classify_title
from .query_builder import QueryBuilderAgent, build_query, clean_search_query
from .translator import Translator, InMemoryTranslationCache, TranslationError
from .scraper import CandidateFetchAgent, AppBrainScraper, RuStoreScraper, MockStoreScraper
from .relevance import RelevanceFilterAgent, calculate_relevance
from .scorer import OpportunityScoringAgent, calculate_opportunity_score, parse_installs

__all__ = [
    "Agent", "AgentResult", "Orchestrator",
    "classify_title",
    "QueryBuilderAgent", "build_query", "clean_search_query",
    "Translator", "InMemoryTranslationCache", "TranslationError",
    "CandidateFetchAgent", "AppBrainScraper", "RuStoreScraper", "MockStoreScraper",
    "RelevanceFilterAgent", "calculate_relevance",
    "OpportunityScoringAgent", "calculate_opportunity_score", "parse_installs",
]
