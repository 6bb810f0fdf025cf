"""
Pydantic schemas for API request/response validation.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Union
from datetime import datetime


# ─── Request Schemas ─────────────────────────────────────────────────────────

class CheckAppRequest(BaseModel):
    title: str = ""
    category: str = ""
    gp_rating: Optional[float] = Field(None, ge=0, le=5)
    installs: Union[str, float, None] = "N/A"


# ─── Response Schemas ────────────────────────────────────────────────────────

class CompetitorResponse(BaseModel):
    name: str
    category: str = ""
    rating: Optional[float] = None
    url: str = ""
    relevance: float
    relevant: bool


class ReportResponse(BaseModel):
    search_query: str
    search_url: str
    competitors_count: int
    avg_rating: Optional[float] = None
    max_rating: Optional[float] = None
    opportunity_score: int
    top_competitors: List[CompetitorResponse]
    factors: Dict[str, float] = {}
    created_at: Optional[datetime] = None


class CheckResponse(BaseModel):
    success: bool
    report: ReportResponse


class AppResponse(BaseModel):
    id: int
    rank: Optional[int] = None
    title: str
    category: Optional[str] = None
    gp_rating: Optional[float] = None
    installs: Optional[str] = None
    recent: Optional[str] = None
    gp_url: Optional[str] = None
    store_exists: Optional[bool] = None
    store_rating: Optional[float] = None
    diff_rating: Optional[float] = None
    opportunity_score: Optional[int] = None
    source: str
    last_updated: Optional[datetime] = None


class AppListResponse(BaseModel):
    apps: List[AppResponse]


class MessageResponse(BaseModel):
    message: str
    count: Optional[int] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: datetime
