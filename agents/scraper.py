"""
Store Scrapers
---------------
Collects the two inputs a check needs from the outside world.

Supported sources:
  - AppBrain Google Play rankings (top free, top new free)  → SourceApp rows
  - RuStore catalog search                                  → CompetitorRecord cards
  - Mock/demo mode for development and tests

Navigation goes through the shared retry policy. Exhausted retries are a
normal outcome: the scraper logs and returns an empty list, which the check
turns into a zero-competitor report.

Architecture:
  RuStoreScraper.search(query)       -> List[CompetitorRecord]
  AppBrainScraper.scrape_rankings()  -> List[SourceApp]
  CandidateFetchAgent.run(plan)      -> CandidateSet
"""

import hashlib
import logging
import random
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from agents.base import Agent
from agents.query_builder import SearchPlan, search_url_for
from config.settings import settings
from models.schemas import CompetitorRecord, SourceApp
from utils.retry import with_retry

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*(\d+)")
_LEADING_FLOAT = re.compile(r"^\s*(\d+(?:\.\d*)?|\.\d+)")

FetchCandidates = Callable[[str], Sequence[CompetitorRecord]]


def _leading_int(text: str) -> int:
    m = _LEADING_INT.match(text or "")
    return int(m.group(1)) if m else 0


def _leading_float(text: str) -> Optional[float]:
    m = _LEADING_FLOAT.match(text or "")
    return float(m.group(1)) if m else None


# ─── Per-Source Scrapers ──────────────────────────────────────────────────────


class BaseScraper:
    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": settings.USER_AGENT})

    def _get(self, url: str, timeout: float, name: str) -> requests.Response:
        """HTTP GET through the navigation retry policy."""
        def attempt() -> requests.Response:
            resp = self.session.get(url, timeout=timeout)
            resp.raise_for_status()
            return resp

        return with_retry(
            attempt,
            max_retries=settings.MAX_RETRIES,
            base_delay=settings.NAVIGATION_BASE_DELAY,
            name=name,
        )

    @staticmethod
    def _clean_text(text: str) -> str:
        return re.sub(r"\s+", " ", text or "").strip()


class AppBrainScraper(BaseScraper):
    """Reads the Google Play ranking tables published by AppBrain."""

    def parse_rankings(self, html: str) -> List[SourceApp]:
        soup = BeautifulSoup(html, "html.parser")
        apps: List[SourceApp] = []

        for i, row in enumerate(soup.find_all("tr")):
            if i == 0:
                continue
            cells = row.find_all("td")
            if len(cells) < 7:
                continue

            link = cells[3].find("a")
            if link is None:
                continue

            rank = _leading_int(cells[0].get_text())
            title = self._clean_text(link.get_text())
            if not title or title == "N/A" or rank <= 0:
                continue

            href = link.get("href") or ""
            gp_url = href if href.startswith("http") else urljoin(settings.APPBRAIN_BASE_URL, href)

            category = self._clean_text(cells[4].get_text())
            installs = self._clean_text(cells[6].get_text())
            recent = self._clean_text(cells[7].get_text()) if len(cells) > 7 else ""

            apps.append(SourceApp(
                rank=rank,
                title=title,
                category=category or "General",
                gp_rating=_leading_float(cells[5].get_text()) or 0.0,
                installs=installs or "N/A",
                recent=recent or "N/A",
                gp_url=gp_url,
            ))

        return apps[:settings.MAX_SOURCE_APPS]

    def scrape_rankings(self, url: str) -> List[SourceApp]:
        logger.info(f"Scraping AppBrain: {url}")
        try:
            resp = self._get(url, timeout=settings.RANKINGS_TIMEOUT, name="AppBrain goto")
        except Exception as e:
            logger.error(f"Failed to scrape AppBrain: {e}")
            return []
        apps = self.parse_rankings(resp.text)
        logger.info(f"Found {len(apps)} apps on AppBrain")
        return apps

    def scrape_top_free(self) -> List[SourceApp]:
        return self.scrape_rankings(settings.APPBRAIN_TOP_FREE_URL)

    def scrape_top_new_free(self) -> List[SourceApp]:
        return self.scrape_rankings(settings.APPBRAIN_TOP_NEW_FREE_URL)


class RuStoreScraper(BaseScraper):
    """Reads the app cards of a RuStore catalog search page."""

    def parse_search(self, html: str) -> List[CompetitorRecord]:
        soup = BeautifulSoup(html, "html.parser")
        records: List[CompetitorRecord] = []

        for card in soup.select('[data-testid="app-card"]'):
            href = card.get("href") or ""
            url = href if href.startswith("http") else urljoin(settings.STORE_BASE_URL, href)

            paragraphs = card.find_all("p")
            name = self._clean_text(paragraphs[0].get_text()) if paragraphs else ""
            category = self._clean_text(paragraphs[1].get_text()) if len(paragraphs) > 1 else ""

            rating = None
            rating_el = card.select_one('[data-testid="rating"]')
            if rating_el is not None:
                # "4,7" → 4.7; a zero rating means "not rated yet"
                rating = _leading_float(rating_el.get_text().strip().replace(",", ".")) or None

            if name:
                records.append(CompetitorRecord(name=name, category=category, rating=rating, url=url))

        return records

    def search(self, query: str) -> List[CompetitorRecord]:
        url = search_url_for(query)
        try:
            resp = self._get(url, timeout=settings.REQUEST_TIMEOUT, name="RuStore goto")
        except Exception as e:
            logger.error(f"Failed to scrape RuStore: {e}")
            return []

        records = self.parse_search(resp.text)
        if not records:
            logger.info("No app cards found on RuStore for this query")
        else:
            logger.info(f"Found {len(records)} raw results on RuStore")
        return records


class MockStoreScraper:
    """
    Generates deterministic synthetic listings for development/demo.
    The same query always yields the same competitors.
    """

    SUFFIXES = ["", "Pro", "Plus", "Lite", "HD", "2024", "Master", "Free"]
    UNRELATED = [
        "Весёлая ферма", "Погода сегодня", "Скидки и купоны",
        "Шахматы онлайн", "Фонарик", "Калькулятор",
    ]
    RANKINGS = [
        ("WhatsApp Messenger", "Communication", 4.3, "10B+"),
        ("TikTok", "Social", 4.4, "1B+"),
        ("Photo Editor Pro", "Photography", 4.6, "100M+"),
        ("Spotify Music", "Music & Audio", 4.4, "1B+"),
        ("VPN Master - Fast Proxy", "Tools", 4.5, "50M+"),
        ("Calorie Counter & Diet Tracker", "Health & Fitness", 4.7, "10M+"),
        ("Weather Forecast & Radar Live", "Weather", 4.6, "5M+"),
        ("PDF Reader Lite", "Productivity", 4.2, "500K+"),
    ]

    @staticmethod
    def _rng(key: str) -> random.Random:
        seed = int(hashlib.md5(key.encode("utf-8")).hexdigest()[:8], 16)
        return random.Random(seed)

    def search(self, query: str) -> List[CompetitorRecord]:
        rng = self._rng(query)
        base = query.strip().title()
        records = []

        for i in range(rng.randint(0, 6)):
            suffix = self.SUFFIXES[i % len(self.SUFFIXES)]
            rating = round(rng.uniform(2.5, 4.9), 1) if rng.random() > 0.2 else None
            name = f"{base} {suffix}".strip()
            records.append(CompetitorRecord(
                name=name,
                category="",
                rating=rating,
                url=f"{settings.STORE_BASE_URL}/catalog/app/mock.{i}",
            ))

        for name in rng.sample(self.UNRELATED, k=rng.randint(0, 3)):
            records.append(CompetitorRecord(
                name=name,
                category="",
                rating=round(rng.uniform(3.0, 4.9), 1),
                url=f"{settings.STORE_BASE_URL}/catalog/app/mock.other",
            ))
        return records

    def scrape_rankings(self, url: str = "") -> List[SourceApp]:
        return [
            SourceApp(
                rank=i,
                title=title,
                category=category,
                gp_rating=rating,
                installs=installs,
                recent="N/A",
                gp_url=f"{settings.APPBRAIN_BASE_URL}/app/mock.{i}",
            )
            for i, (title, category, rating, installs) in enumerate(self.RANKINGS, 1)
        ]

    def scrape_top_free(self) -> List[SourceApp]:
        return self.scrape_rankings()

    def scrape_top_new_free(self) -> List[SourceApp]:
        return list(reversed(self.scrape_rankings()))


# ─── CandidateFetchAgent ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class CandidateSet:
    plan: SearchPlan
    records: Tuple[CompetitorRecord, ...]


class CandidateFetchAgent(Agent):
    """
    Stage 2: ask the scraping collaborator for competitor candidates.

    Input:  SearchPlan
    Output: CandidateSet

    Errors raised by `fetch_candidates` are not swallowed here; the check
    decides whether they are fatal.
    """

    def __init__(self, fetch_candidates: FetchCandidates):
        super().__init__(name="CandidateFetchAgent")
        self.fetch_candidates = fetch_candidates

    def run(self, plan: SearchPlan) -> CandidateSet:
        self.logger.info(f"Search URL: {plan.search_url}")
        records = tuple(self.fetch_candidates(plan.search_query) or ())
        self.logger.info(f"  → {len(records)} candidates for \"{plan.search_query}\"")
        return CandidateSet(plan=plan, records=records)
