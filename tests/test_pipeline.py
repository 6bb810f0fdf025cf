"""
Check pipeline tests: classification, query building, relevance, scoring
and the end-to-end check, all without network access.
Run with: python -m pytest tests/ -v
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from agents.base import Agent, Orchestrator
from agents.classifier import classify_title, is_brand_token
from agents.query_builder import (
    QueryBuilderAgent, build_query, clean_search_query, strip_punctuation, search_url_for,
)
from agents.relevance import calculate_relevance, is_relevant, substring_match, word_jaccard
from agents.scorer import (
    calculate_opportunity_score, opportunity_factors, parse_installs,
    round_half_up, summarize_competitors,
)
from models.schemas import (
    CheckRequest, CompetitorRecord, OpportunityStats, ScoredCompetitor, TitleKind,
)
from utils.pipeline import CheckPipeline


class FakeTranslator:
    """Records every call and returns canned translations."""

    def __init__(self, translations=None):
        self.translations = translations or {}
        self.calls = []

    def translate(self, text):
        self.calls.append(text)
        return self.translations.get(text, text)


# ─── Fixtures ────────────────────────────────────────────────────────────────

@pytest.fixture
def translator():
    return FakeTranslator({"photo editor": "фоторедактор"})


@pytest.fixture
def whatsapp_candidates():
    return [
        CompetitorRecord(name="WhatsApp Messenger", rating=4.5, url="https://www.rustore.ru/catalog/app/a"),
        CompetitorRecord(name="Messenger for WhatsApp", rating=None, url="https://www.rustore.ru/catalog/app/b"),
        CompetitorRecord(name="Telegram", rating=4.7, url="https://www.rustore.ru/catalog/app/c"),
        CompetitorRecord(name="WhatsApp", rating=3.1, url="https://www.rustore.ru/catalog/app/d"),
    ]


TITLES = [
    "WhatsApp", "WhatsApp Messenger", "Photo Editor Pro", "VPN Pro", "MP3 Player",
    "Netflix™", "The Best App", "Spotify: Music and Podcasts", "Calorie Counter & Diet Tracker",
    "", "—", "4K Video Downloader - Free HD", "a b c d",
]


# ─── Title Classifier ────────────────────────────────────────────────────────

class TestTitleClassifier:
    def test_camel_case_title_is_brand(self):
        c = classify_title("WhatsApp")
        assert c.kind == TitleKind.BRAND
        assert c.brand_tokens == ("WhatsApp",)
        assert c.other_tokens == ()

    def test_brand_plus_word_is_mixed(self):
        c = classify_title("WhatsApp Messenger")
        assert c.kind == TitleKind.MIXED
        assert c.other_tokens == ("Messenger",)

    def test_plain_words_are_descriptive(self):
        c = classify_title("Photo Editor Pro")
        assert c.kind == TitleKind.DESCRIPTIVE
        assert c.brand_tokens == ()
        assert c.other_tokens == ("Photo", "Editor")

    def test_filler_does_not_make_title_mixed(self):
        assert classify_title("VPN Pro").kind == TitleKind.BRAND

    def test_letters_and_digits_are_brand(self):
        c = classify_title("MP3 Player")
        assert c.kind == TitleKind.MIXED
        assert c.brand_tokens == ("MP3",)

    def test_trademark_glyph_marks_brand(self):
        c = classify_title("Netflix™")
        assert c.kind == TitleKind.BRAND
        assert c.brand_tokens == ("Netflix",)

    def test_only_fillers_is_descriptive(self):
        c = classify_title("The Best App")
        assert c.kind == TitleKind.DESCRIPTIVE
        assert c.other_tokens == ()

    def test_brand_token_patterns(self):
        assert is_brand_token("TikTok")
        assert is_brand_token("GPS")
        assert is_brand_token("4K")
        assert not is_brand_token("A")
        assert not is_brand_token("Music")

    @pytest.mark.parametrize("title", TITLES)
    def test_kind_matches_tokens(self, title):
        c = classify_title(title)
        if c.brand_tokens and not c.other_tokens:
            assert c.kind == TitleKind.BRAND
        elif c.brand_tokens:
            assert c.kind == TitleKind.MIXED
        else:
            assert c.kind == TitleKind.DESCRIPTIVE
        assert classify_title(title) == c


# ─── Query Builder ───────────────────────────────────────────────────────────

class TestQueryBuilder:
    def test_short_title_only_loses_punctuation(self):
        assert clean_search_query("WhatsApp Messenger", "Communication") == "whatsapp messenger"
        assert clean_search_query("TikTok!") == "tiktok"
        assert clean_search_query("C&A") == "c&a"

    def test_universal_filler_removed(self):
        assert clean_search_query("Photo Editor Pro", "Photography") == "photo editor"

    def test_first_word_is_protected(self):
        assert clean_search_query("Spotify: Music and Podcasts", "Music & Audio") == "spotify and podcasts"

    def test_fallback_when_too_few_words_remain(self):
        # "free" and "player" go, "music" is protected → only one word left
        assert clean_search_query("Music Player Free", "Music & Audio") == "music player free"

    def test_punctuation_replaced_by_space(self):
        assert clean_search_query("Calorie Counter & Diet Tracker", "Health & Fitness") == \
            "calorie counter diet tracker"

    def test_multi_word_filler_removed(self):
        assert clean_search_query("Flashlight Torch for Android", "Tools") == "flashlight torch"

    def test_unknown_category_only_universal_fillers(self):
        assert clean_search_query("Ultimate Chess Puzzles", "Board") == "ultimate chess puzzles"

    def test_absolute_fallback_returns_raw_title(self):
        assert clean_search_query("! ? x") == "! ? x"

    @pytest.mark.parametrize("title", [t for t in TITLES if len(t.strip()) >= 2])
    def test_query_never_shorter_than_two(self, title):
        assert len(clean_search_query(title, "Tools")) >= 2

    def test_strip_punctuation_idempotent(self):
        once = strip_punctuation("Photo (Editor): Collage!! & — Frames™")
        assert strip_punctuation(once) == once
        assert once == "Photo Editor Collage Frames"

    def test_descriptive_title_is_translated(self, translator):
        built = build_query("Photo Editor Pro", "Photography", translator)
        assert built.classification.kind == TitleKind.DESCRIPTIVE
        assert built.cleaned == "photo editor"
        assert built.query == "фоторедактор"
        assert built.was_translated
        assert translator.calls == ["photo editor"]

    def test_brand_and_mixed_titles_are_not_translated(self, translator):
        for title in ("TikTok", "WhatsApp Messenger", "YouTube Music Premium"):
            built = build_query(title, "", translator)
            assert built.query == built.cleaned
            assert not built.was_translated
        assert translator.calls == []

    def test_search_url_is_encoded(self):
        assert search_url_for("фото редактор") == (
            "https://www.rustore.ru/catalog/search?query="
            "%D1%84%D0%BE%D1%82%D0%BE%20%D1%80%D0%B5%D0%B4%D0%B0%D0%BA%D1%82%D0%BE%D1%80"
        )

    def test_agent_builds_plan(self, translator):
        plan = QueryBuilderAgent(translator).run(CheckRequest(title="Photo Editor Pro", category="Photography"))
        assert plan.search_query == "фоторедактор"
        assert plan.search_url.startswith("https://www.rustore.ru/catalog/search?query=")


# ─── Relevance Filter ────────────────────────────────────────────────────────

class TestRelevanceFilter:
    def test_word_jaccard(self):
        assert word_jaccard("photo editor", "Photo Editor Pro") == pytest.approx(2 / 3)
        assert word_jaccard("a", "photo") == 0.0
        assert word_jaccard("", "") == 0.0

    def test_substring_match_both_directions(self):
        assert substring_match("Calculator", "calculator pro")
        assert substring_match("calculator pro", " Calculator ")
        assert not substring_match("x", "x-ray")

    def test_exact_name_with_rating_scores_one(self):
        c = CompetitorRecord(name="photo editor", rating=4.1)
        score = calculate_relevance(c, "photo editor", "photo editor")
        assert score == pytest.approx(1.0)
        assert score <= 1.0
        assert is_relevant(score)

    def test_unrelated_rated_app_rejected(self):
        c = CompetitorRecord(name="Погода сегодня", rating=4.8)
        score = calculate_relevance(c, "фоторедактор", "photo editor")
        assert score == pytest.approx(0.1)
        assert not is_relevant(score)

    def test_cleaned_title_used_for_latin_competitors(self):
        c = CompetitorRecord(name="Photo Editor", rating=None)
        assert calculate_relevance(c, "фоторедактор", "photo editor") == pytest.approx(0.9)

    def test_rating_presence_never_lowers_score(self):
        rated = CompetitorRecord(name="Photo Lab", rating=3.0)
        unrated = CompetitorRecord(name="Photo Lab", rating=None)
        assert calculate_relevance(rated, "photo editor", "photo editor") > \
            calculate_relevance(unrated, "photo editor", "photo editor")

    def test_more_word_overlap_never_lowers_score(self):
        query = "calorie counter diet tracker"
        names = [
            "Погода сегодня",
            "Step Tracker",
            "Diet Tracker Log",
            "Calorie Diet Tracker",
            "Calorie Counter Diet Tracker",
        ]
        overlaps = [word_jaccard(name, query) for name in names]
        assert overlaps == sorted(overlaps)

        for rating in (None, 4.2):
            scores = [
                calculate_relevance(CompetitorRecord(name=name, rating=rating), query, query)
                for name in names
            ]
            assert scores == sorted(scores)
            assert scores[-1] > scores[0]

    def test_threshold(self):
        assert is_relevant(0.15)
        assert not is_relevant(0.1499)

    def test_scores_bounded(self, whatsapp_candidates):
        for c in whatsapp_candidates:
            assert 0.0 <= calculate_relevance(c, "whatsapp messenger", "whatsapp messenger") <= 1.0


# ─── Opportunity Scorer ──────────────────────────────────────────────────────

class TestOpportunityScorer:
    @pytest.mark.parametrize("label,expected", [
        ("10M+", 1e7),
        ("1,234K+", 1234000),
        ("1B+", 1e9),
        ("500", 500),
        ("5 M", 5e6),
        ("N/A", 0),
        ("", 0),
        ("lots", 0),
        (None, 0),
        (5000, 5000),
    ])
    def test_parse_installs(self, label, expected):
        assert parse_installs(label) == expected

    def test_zero_competitors_reference_score(self):
        stats = OpportunityStats(competitors_count=0, avg_rating=None, max_rating=None,
                                 gp_rating=4.2, installs="10M+")
        factors = opportunity_factors(stats)
        assert factors["proven_demand"] == pytest.approx(0.7778, abs=1e-4)
        assert factors["validated_quality"] == pytest.approx(0.85)
        assert calculate_opportunity_score(stats) == 85

    def test_saturated_market_scores_zero(self):
        stats = OpportunityStats(competitors_count=25, avg_rating=5.0, max_rating=5.0,
                                 gp_rating=0, installs="N/A")
        assert calculate_opportunity_score(stats) == 0

    def test_mixed_market(self):
        stats = OpportunityStats(competitors_count=10, avg_rating=3.5, max_rating=4.0,
                                 gp_rating=4.5, installs="1B+")
        assert calculate_opportunity_score(stats) == 66

    def test_more_competitors_never_raise_score(self):
        scores = [
            calculate_opportunity_score(OpportunityStats(n, 3.5, 4.0, 4.0, "1M+"))
            for n in range(0, 30)
        ]
        assert scores == sorted(scores, reverse=True)

    def test_better_original_never_lowers_score(self):
        ratings = [0, 1.0, 2.5, 3.0, 3.7, 4.5, 5.0]
        scores = [calculate_opportunity_score(OpportunityStats(5, 4.0, 4.5, r, "1M+")) for r in ratings]
        assert scores == sorted(scores)

        installs = ["N/A", "100", "10K+", "1M+", "100M+", "1B+", "5B+"]
        scores = [calculate_opportunity_score(OpportunityStats(5, 4.0, 4.5, 4.0, i)) for i in installs]
        assert scores == sorted(scores)

    def test_score_in_range(self):
        for n in (0, 5, 50):
            for avg in (None, 1.0, 3.0, 5.0):
                score = calculate_opportunity_score(OpportunityStats(n, avg, avg, 5.0, "10B+"))
                assert 0 <= score <= 100

    def test_round_half_up(self):
        assert round_half_up(42.5) == 43
        assert round_half_up(4.25, 1) == 4.3

    def test_summarize_competitors(self):
        relevant = [
            ScoredCompetitor(name=f"app {i}", category="", rating=r, url="", relevance=0.5, relevant=True)
            for i, r in enumerate([4.0, None, 4.5, 3.0, 2.0, 4.9, 1.5])
        ]
        avg, best, top = summarize_competitors(relevant)
        assert avg == 3.3
        assert best == 4.9
        assert [c.rating for c in top] == [4.9, 4.5, 4.0, 3.0, 2.0]

    def test_summarize_without_ratings(self):
        relevant = [ScoredCompetitor(name="x", category="", rating=None, url="", relevance=0.4, relevant=True)]
        avg, best, top = summarize_competitors(relevant)
        assert avg is None and best is None
        assert len(top) == 1


# ─── Full Check ──────────────────────────────────────────────────────────────

class TestCheckPipeline:
    def test_zero_candidates_uses_regular_scoring(self, translator):
        report = CheckPipeline(translator=translator).check(
            "Photo Editor Pro", "Photography", 4.2, "10M+", lambda query: [],
        )
        assert report.competitors_count == 0
        assert report.avg_rating is None
        assert report.max_rating is None
        assert report.top_competitors == ()
        assert report.opportunity_score == 85
        assert report.search_query == "фоторедактор"

    def test_relevant_competitors_only(self, translator, whatsapp_candidates):
        queries = []

        def fetch(query):
            queries.append(query)
            return whatsapp_candidates

        report = CheckPipeline(translator=translator).check(
            "WhatsApp Messenger", "Communication", 4.3, "10B+", fetch,
        )
        assert queries == ["whatsapp messenger"]
        assert translator.calls == []
        assert report.competitors_count == 3
        assert report.avg_rating == 3.8
        assert report.max_rating == 4.5
        assert [c.name for c in report.top_competitors] == [
            "WhatsApp Messenger", "WhatsApp", "Messenger for WhatsApp",
        ]
        assert all(c.relevant for c in report.top_competitors)
        assert report.opportunity_score == 71

    def test_missing_signals_default(self, translator):
        report = CheckPipeline(translator=translator).check("TikTok", "", None, None, lambda q: [])
        assert report.factors["proven_demand"] == 0.0
        assert report.factors["validated_quality"] == 0.0
        assert report.factors["quality_gap"] == 0.7
        assert report.opportunity_score == calculate_opportunity_score(
            OpportunityStats(competitors_count=0, avg_rating=None, max_rating=None, gp_rating=0, installs="N/A")
        )

    def test_fetch_errors_propagate(self, translator):
        def fetch(query):
            raise ConnectionError("store unreachable")

        with pytest.raises(ConnectionError, match="store unreachable"):
            CheckPipeline(translator=translator).check("TikTok", "Social", 4.4, "1B+", fetch)

    def test_report_serializes(self, translator, whatsapp_candidates):
        report = CheckPipeline(translator=translator).check(
            "WhatsApp Messenger", "Communication", 4.3, "10B+", lambda q: whatsapp_candidates,
        )
        data = report.to_dict()
        assert data["opportunity_score"] == report.opportunity_score
        assert len(data["top_competitors"]) == 3
        assert set(data["factors"]) == {
            "competition_gap", "quality_gap", "proven_demand",
            "validated_quality", "top_competitor_weakness",
        }


class TestOrchestrator:
    def test_failure_stops_and_keeps_exception(self):
        class Boom(Agent):
            def __init__(self):
                super().__init__(name="Boom")

            def run(self, data):
                raise ValueError("bad input")

        class Never(Agent):
            def __init__(self):
                super().__init__(name="Never")
                self.called = False

            def run(self, data):
                self.called = True
                return data

        never = Never()
        orchestrator = Orchestrator([Boom(), never], stop_on_failure=True)
        result = orchestrator.execute("x")
        assert not result.success
        assert isinstance(result.exception, ValueError)
        assert not never.called
        assert "Boom" in orchestrator.summary()
