"""
Entry point for the Store Opportunity Finder.

Usage:
  # Run a quick demo (mock store data, no network):
  python main.py demo

  # Check one title against the live store:
  python main.py check "Photo Editor Pro" --category Photography --rating 4.6 --installs 100M+

  # Start the FastAPI server:
  python main.py api

  # Run tests:
  python main.py test
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger("main")


def print_report(title: str, report) -> None:
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)
    print(f"  Search query : {report.search_query}")
    print(f"  Search URL   : {report.search_url}")
    print(f"  Competitors  : {report.competitors_count}")
    print(f"  Avg rating   : {report.avg_rating if report.avg_rating is not None else '—'}")
    print(f"  Max rating   : {report.max_rating if report.max_rating is not None else '—'}")
    print(f"  Opportunity  : {report.opportunity_score}/100")
    for name, value in report.factors.items():
        print(f"      {name:<24} {value:.3f}")
    if report.top_competitors:
        print("  Top competitors:")
        for c in report.top_competitors:
            rating = f"{c.rating:.1f}" if c.rating is not None else " — "
            print(f"    ★ {rating}  {c.name:<40} relevance={c.relevance:.2f}")


def demo():
    """
    End-to-end demo over the mock ranking and mock store search.
    Prints one report per app, best opportunities first.
    """
    from agents.scraper import MockStoreScraper
    from utils.pipeline import CheckPipeline

    logger.info("=== Store Opportunity Finder: Demo Run ===")

    scraper = MockStoreScraper()
    pipeline = CheckPipeline(translate=False)

    results = []
    for app in scraper.scrape_top_free():
        report = pipeline.check(app.title, app.category, app.gp_rating, app.installs, scraper.search)
        results.append((app, report))

    results.sort(key=lambda r: r[1].opportunity_score, reverse=True)
    for app, report in results:
        print_report(f"#{app.rank} {app.title} ({app.category}, {app.installs})", report)

    print("\n" + "=" * 70)
    best_app, best = results[0]
    print(f"  💡 Best opportunity: {best_app.title} — {best.opportunity_score}/100")
    print("=" * 70)
    return results


def check(argv):
    """Check one title against the live store."""
    from agents.scraper import RuStoreScraper
    from utils.pipeline import CheckPipeline

    parser = argparse.ArgumentParser(prog="main.py check")
    parser.add_argument("title")
    parser.add_argument("--category", default="")
    parser.add_argument("--rating", type=float, default=0.0)
    parser.add_argument("--installs", default="N/A")
    parser.add_argument("--json", action="store_true", help="print the report as JSON")
    args = parser.parse_args(argv)

    report = CheckPipeline().check(
        args.title, args.category, args.rating, args.installs, RuStoreScraper().search,
    )
    if args.json:
        print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
    else:
        print_report(args.title, report)
    return report


def start_api():
    """Start the FastAPI server."""
    try:
        import uvicorn
    except ImportError:
        print("Error: install uvicorn first:  pip install uvicorn")
        sys.exit(1)
    uvicorn.run("api.main:app", host="0.0.0.0", port=8000, reload=True)


def run_tests():
    """Run pytest."""
    import subprocess
    result = subprocess.run(
        ["pytest", "tests/", "-v", "--tb=short"],
        cwd=os.path.dirname(os.path.abspath(__file__)),
    )
    sys.exit(result.returncode)


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    command = argv[0] if argv else "demo"

    if command == "demo":
        demo()
    elif command == "check":
        check(argv[1:])
    elif command == "api":
        start_api()
    elif command == "test":
        run_tests()
    else:
        print(f"Unknown command: {command}")
        print("Usage: python main.py [demo|check|api|test]")
        sys.exit(1)


if __name__ == "__main__":
    main()
