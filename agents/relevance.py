"""
Relevance Filter
-----------------
Store search returns plenty of loosely related listings. Each candidate is
scored against both the search query (possibly translated) and the cleaned
original title (in case the competitor is listed in Latin):

  relevance = 0.6 * max(Jaccard(name, query), Jaccard(name, cleaned))
            + 0.3 if one name contains the other
            + 0.1 if the competitor has a rating (an established listing)

capped at 1.0. Candidates scoring ≥ RELEVANCE_THRESHOLD are kept.

Input:  CandidateSet
Output: RelevanceOutput
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from agents.base import Agent
from agents.query_builder import SearchPlan
from agents.scraper import CandidateSet
from config.settings import settings
from models.schemas import CompetitorRecord, ScoredCompetitor

JACCARD_WEIGHT = 0.6
SUBSTRING_BONUS = 0.3
RATING_BONUS = 0.1


def _word_set(text: str) -> set:
    return {w for w in text.lower().split() if len(w) >= 2}


def word_jaccard(a: str, b: str) -> float:
    """Word-level Jaccard similarity in [0, 1]."""
    set_a = _word_set(a)
    set_b = _word_set(b)
    if not set_a or not set_b:
        return 0.0
    return len(set_a & set_b) / len(set_a | set_b)


def substring_match(a: str, b: str) -> bool:
    """Normalized containment in either direction: calculator ⊂ calculator pro."""
    al = a.lower().strip()
    bl = b.lower().strip()
    if len(al) < 2 or len(bl) < 2:
        return False
    return bl in al or al in bl


def calculate_relevance(competitor: CompetitorRecord, search_query: str, cleaned_title: str) -> float:
    best_jaccard = max(
        word_jaccard(competitor.name, search_query),
        word_jaccard(competitor.name, cleaned_title),
    )
    score = JACCARD_WEIGHT * best_jaccard

    if substring_match(competitor.name, search_query) or substring_match(competitor.name, cleaned_title):
        score += SUBSTRING_BONUS

    if competitor.rating is not None:
        score += RATING_BONUS

    return min(1.0, score)


def is_relevant(score: float, threshold: float = settings.RELEVANCE_THRESHOLD) -> bool:
    return score >= threshold


# ─── RelevanceFilterAgent ────────────────────────────────────────────────────


@dataclass(frozen=True)
class RelevanceOutput:
    plan: SearchPlan
    scored: Tuple[ScoredCompetitor, ...]

    @property
    def relevant(self) -> List[ScoredCompetitor]:
        return [c for c in self.scored if c.relevant]

    @property
    def filtered_out(self) -> int:
        return len(self.scored) - len(self.relevant)


class RelevanceFilterAgent(Agent):
    """
    Stage 3: score every candidate and flag the relevant ones.

    Input:  CandidateSet
    Output: RelevanceOutput
    """

    def __init__(self, threshold: Optional[float] = None):
        super().__init__(name="RelevanceFilterAgent")
        self.threshold = threshold if threshold is not None else settings.RELEVANCE_THRESHOLD

    def run(self, candidates: CandidateSet) -> RelevanceOutput:
        plan = candidates.plan
        scored = []
        for record in candidates.records:
            relevance = calculate_relevance(record, plan.search_query, plan.built.cleaned)
            scored.append(ScoredCompetitor.from_record(
                record, relevance, is_relevant(relevance, self.threshold),
            ))

        output = RelevanceOutput(plan=plan, scored=tuple(scored))
        if output.filtered_out:
            self.logger.info(
                f"Relevance filter: {len(output.relevant)} relevant, "
                f"{output.filtered_out} filtered out (threshold {self.threshold})"
            )
        return output
