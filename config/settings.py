"""
Configuration & Settings
Store Opportunity Finder
"""

from pydantic import BaseModel
from typing import Dict
import os


class Settings(BaseModel):
    # App
    APP_NAME: str = "Store Opportunity Finder"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() in ("true", "1", "yes")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./store_opportunity.db")

    # Scraping
    REQUEST_TIMEOUT: int = 15          # RuStore search page
    RANKINGS_TIMEOUT: int = 60         # AppBrain ranking tables
    MAX_SOURCE_APPS: int = 100
    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
    )
    APPBRAIN_BASE_URL: str = "https://www.appbrain.com"
    APPBRAIN_TOP_FREE_URL: str = "https://www.appbrain.com/stats/google-play-rankings"
    APPBRAIN_TOP_NEW_FREE_URL: str = (
        "https://www.appbrain.com/stats/google-play-rankings/top_new_free/all/us"
    )
    STORE_BASE_URL: str = "https://www.rustore.ru"
    STORE_SEARCH_URL: str = "https://www.rustore.ru/catalog/search?query="

    # Retry policy: delay = base * 2^(attempt-1) + uniform(0, jitter)
    MAX_RETRIES: int = 3
    RETRY_BASE_DELAY: float = 1.0
    NAVIGATION_BASE_DELAY: float = 2.0
    RETRY_JITTER: float = 0.5

    # Translation
    TRANSLATE_URL: str = "https://api.mymemory.translated.net/get"
    TRANSLATE_LANGPAIR: str = "en|ru"
    TRANSLATE_TIMEOUT: int = 5

    # Relevance filter
    RELEVANCE_THRESHOLD: float = 0.15
    TOP_COMPETITORS: int = 5

    # Opportunity scoring weights (competition, quality, demand, validated, weakness).
    # Scores stored before a weight change are not comparable with new ones.
    OPPORTUNITY_WEIGHTS: Dict[str, float] = {
        "competition_gap": 0.30,
        "quality_gap": 0.25,
        "proven_demand": 0.25,
        "validated_quality": 0.10,
        "top_competitor_weakness": 0.10,
    }

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000


settings = Settings()
