"""
Opportunity Scoring Agent
--------------------------
Collapses the relevant competitor set and the original app's track record
into one 0-100 opportunity score:

  raw   = 0.30·F1 + 0.25·F2 + 0.25·F3 + 0.10·F4 + 0.10·F5
  score = round(100 · raw), clamped to [0, 100]

| Factor                      | Logic                                              |
|-----------------------------|----------------------------------------------------|
| F1 competition gap          | fewer relevant competitors; 0 at 20+               |
| F2 quality gap              | lower competitor avg rating; 0.7 with no data      |
| F3 proven demand            | log-scaled installs of the original; 1B → 1.0      |
| F4 validated quality        | Google Play rating of the original; 2.5 → 0, 4.5 → 1 |
| F5 top competitor weakness  | lower best competitor rating; 1.0 with no data     |

Weights, saturation points and rounding are fixed: scores are compared
across runs, so the arithmetic must not drift.

Input:  RelevanceOutput
Output: OpportunityReport
"""

import math
import re
from typing import Dict, List, Optional, Sequence, Tuple, Union

from agents.base import Agent
from agents.relevance import RelevanceOutput
from config.settings import settings
from models.schemas import OpportunityReport, OpportunityStats, ScoredCompetitor

_INSTALLS = re.compile(r"^([\d.]+)\s*([KMBT]?)$", re.ASCII)
_LEADING_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+", re.ASCII)
_MULTIPLIERS = {"": 1, "K": 1e3, "M": 1e6, "B": 1e9, "T": 1e12}


# ─── Helpers ─────────────────────────────────────────────────────────────────


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round .5 away from zero for positives, unlike Python's banker's round()."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def parse_installs(installs: Union[str, int, float, None]) -> float:
    """
    Parse an AppBrain installs label ("10M+", "500K+", "1,234K+") to a number.
    "N/A", empty and unparseable labels give 0.
    """
    if installs is None or isinstance(installs, bool):
        return 0.0
    if isinstance(installs, (int, float)):
        return 0.0 if math.isnan(installs) else float(installs)
    if not isinstance(installs, str) or installs == "N/A":
        return 0.0

    text = installs.replace("+", "").replace(",", "").strip().upper()
    match = _INSTALLS.match(text)
    if not match:
        return 0.0
    number = _LEADING_NUMBER.match(match.group(1))
    if not number:
        return 0.0
    return float(number.group(0)) * _MULTIPLIERS[match.group(2)]


# ─── Scoring ─────────────────────────────────────────────────────────────────


def opportunity_factors(stats: OpportunityStats) -> Dict[str, float]:
    """
    The five weighted factors. Each is at least 0; quality_gap and
    top_competitor_weakness exceed 1 when competitor ratings are below 2.0,
    the others are capped at 1.
    """
    f1 = max(0.0, 1 - stats.competitors_count / 20)

    if stats.avg_rating is None:
        f2 = 0.7
    else:
        f2 = max(0.0, 1 - (stats.avg_rating - 2) / 3)

    installs = parse_installs(stats.installs)
    f3 = min(1.0, math.log10(installs + 1) / 9) if installs > 0 else 0.0

    f4 = clamp01(((stats.gp_rating or 0) - 2.5) / 2)

    if stats.max_rating is None:
        f5 = 1.0
    else:
        f5 = max(0.0, 1 - (stats.max_rating - 2) / 3)

    return {
        "competition_gap": f1,
        "quality_gap": f2,
        "proven_demand": f3,
        "validated_quality": f4,
        "top_competitor_weakness": f5,
    }


def calculate_opportunity_score(
    stats: OpportunityStats,
    weights: Optional[Dict[str, float]] = None,
) -> int:
    weights = weights or settings.OPPORTUNITY_WEIGHTS
    factors = opportunity_factors(stats)
    raw = sum(weights[name] * value for name, value in factors.items())
    score = int(round_half_up(100 * raw))
    return max(0, min(100, score))


def summarize_competitors(
    relevant: Sequence[ScoredCompetitor],
    top_n: int = settings.TOP_COMPETITORS,
) -> Tuple[Optional[float], Optional[float], List[ScoredCompetitor]]:
    """
    Average and best rating over rated competitors (1 decimal, None if no
    rating at all) and the top `top_n` by rating, unrated last.
    """
    ratings = [c.rating for c in relevant if c.rating is not None]
    avg_rating = round_half_up(sum(ratings) / len(ratings), 1) if ratings else None
    max_rating = round_half_up(max(ratings), 1) if ratings else None

    top = sorted(relevant, key=lambda c: c.rating or 0, reverse=True)[:top_n]
    return avg_rating, max_rating, top


# ─── OpportunityScoringAgent ─────────────────────────────────────────────────


class OpportunityScoringAgent(Agent):
    """
    Stage 4: aggregate the relevant competitors and score the opportunity.

    Input:  RelevanceOutput
    Output: OpportunityReport
    """

    def __init__(
        self,
        weights: Optional[Dict[str, float]] = None,
        top_n: Optional[int] = None,
    ):
        super().__init__(name="OpportunityScoringAgent")
        self.weights = weights or dict(settings.OPPORTUNITY_WEIGHTS)
        self.top_n = top_n if top_n is not None else settings.TOP_COMPETITORS

    def run(self, relevance: RelevanceOutput) -> OpportunityReport:
        plan = relevance.plan
        relevant = relevance.relevant
        avg_rating, max_rating, top = summarize_competitors(relevant, self.top_n)

        stats = OpportunityStats(
            competitors_count=len(relevant),
            avg_rating=avg_rating,
            max_rating=max_rating,
            gp_rating=plan.request.gp_rating or 0,
            installs=plan.request.installs or "N/A",
        )
        score = calculate_opportunity_score(stats, self.weights)

        self.logger.info(
            f"Relevant competitors: {stats.competitors_count}, "
            f"Avg: {avg_rating}, Max: {max_rating}, Score: {score}"
        )

        return OpportunityReport(
            search_query=plan.search_query,
            search_url=plan.search_url,
            competitors_count=stats.competitors_count,
            top_competitors=tuple(top),
            avg_rating=avg_rating,
            max_rating=max_rating,
            opportunity_score=score,
            factors=opportunity_factors(stats),
        )
