"""
SQLAlchemy ORM Models
Store Opportunity Finder
"""

from sqlalchemy import (
    Column, Integer, Float, String, Text, Boolean,
    DateTime, ForeignKey, JSON, Index
)
from sqlalchemy.orm import relationship, declarative_base
from datetime import datetime, timezone

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AppListing(Base):
    """A source-store app from an AppBrain ranking plus its latest check summary."""
    __tablename__ = "apps"

    id = Column(Integer, primary_key=True, autoincrement=True)
    rank = Column(Integer)
    title = Column(String(500), nullable=False)
    category = Column(String(255))
    gp_rating = Column(Float)
    installs = Column(String(50))
    recent = Column(String(50))
    gp_url = Column(String(1000))

    # Filled in by a check; NULL means "not checked yet"
    store_exists = Column(Boolean, default=None)
    store_rating = Column(Float)
    diff_rating = Column(Float)
    opportunity_score = Column(Integer, default=None)

    source = Column(String(50), default="top_free")    # top_free | top_new_free
    last_updated = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    report = relationship(
        "StoreReport", back_populates="app", uselist=False, cascade="all, delete-orphan",
    )

    __table_args__ = (Index("ix_apps_source_rank", "source", "rank"),)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "rank": self.rank,
            "title": self.title,
            "category": self.category,
            "gp_rating": self.gp_rating,
            "installs": self.installs,
            "recent": self.recent,
            "gp_url": self.gp_url,
            "store_exists": self.store_exists,
            "store_rating": self.store_rating,
            "diff_rating": self.diff_rating,
            "opportunity_score": self.opportunity_score,
            "source": self.source,
            "last_updated": self.last_updated,
        }


class StoreReport(Base):
    """The full report of the latest check for one app."""
    __tablename__ = "store_reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    app_id = Column(Integer, ForeignKey("apps.id", ondelete="CASCADE"), nullable=False, unique=True)
    search_query = Column(Text)
    search_url = Column(Text)
    competitors_count = Column(Integer, default=0)
    avg_rating = Column(Float)
    max_rating = Column(Float)
    opportunity_score = Column(Integer)
    top_competitors = Column(JSON)
    created_at = Column(DateTime, default=_utcnow)

    app = relationship("AppListing", back_populates="report")

    def to_dict(self) -> dict:
        return {
            "search_query": self.search_query,
            "search_url": self.search_url,
            "competitors_count": self.competitors_count,
            "avg_rating": self.avg_rating,
            "max_rating": self.max_rating,
            "opportunity_score": self.opportunity_score,
            "top_competitors": self.top_competitors or [],
            "created_at": self.created_at,
        }
