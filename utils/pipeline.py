"""
Check pipeline: wires the four stages together and returns an OpportunityReport.

Architecture:
  QueryBuilderAgent → CandidateFetchAgent → RelevanceFilterAgent → OpportunityScoringAgent
"""

from __future__ import annotations

import logging
import time
from typing import Optional, Union

from agents.base import Orchestrator
from agents.query_builder import QueryBuilderAgent
from agents.relevance import RelevanceFilterAgent
from agents.scorer import OpportunityScoringAgent
from agents.scraper import CandidateFetchAgent, FetchCandidates
from agents.translator import Translator
from models.schemas import CheckRequest, OpportunityReport

logger = logging.getLogger(__name__)


class CheckPipeline:
    """
    Runs one opportunity check per call. Holds no per-check state; the
    translator (and its cache) is the only thing shared between calls.
    """

    def __init__(
        self,
        translator: Optional[Translator] = None,
        relevance_threshold: Optional[float] = None,
        translate: bool = True,
    ):
        # translate=False keeps descriptive titles in English (offline runs).
        if translate:
            self.translator = translator if translator is not None else Translator()
        else:
            self.translator = None
        self.relevance_threshold = relevance_threshold

    def check(
        self,
        title: str,
        category: str,
        gp_rating: Optional[float],
        installs: Union[str, int, float, None],
        fetch_candidates: FetchCandidates,
    ) -> OpportunityReport:
        started = time.time()
        logger.info(f'=== check: "{title}" (installs: {installs or "N/A"}) ===')

        request = CheckRequest(
            title=title,
            category=category or "",
            gp_rating=gp_rating or 0,
            installs=installs or "N/A",
        )

        pipeline = Orchestrator([
            QueryBuilderAgent(self.translator),
            CandidateFetchAgent(fetch_candidates),
            RelevanceFilterAgent(self.relevance_threshold),
            OpportunityScoringAgent(),
        ], stop_on_failure=True)

        result = pipeline.execute(request)
        if not result.success:
            if result.exception is not None:
                raise result.exception
            raise RuntimeError(f"Check failed: {result.error}")

        logger.debug(pipeline.summary())
        logger.info(f"Done in {(time.time() - started) * 1000:.0f}ms")
        return result.data


def run_check(
    title: str,
    category: str,
    gp_rating: Optional[float],
    installs: Union[str, int, float, None],
    fetch_candidates: FetchCandidates,
    translator: Optional[Translator] = None,
) -> OpportunityReport:
    """One-shot convenience wrapper around CheckPipeline.check."""
    return CheckPipeline(translator=translator).check(
        title, category, gp_rating, installs, fetch_candidates,
    )
