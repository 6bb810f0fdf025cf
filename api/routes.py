"""
FastAPI Route Handlers
Store Opportunity Finder
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Depends, Request
from sqlalchemy.orm import Session

from api.schemas import (
    CheckAppRequest, CheckResponse, ReportResponse,
    AppListResponse, AppResponse, MessageResponse, HealthResponse,
)
from agents.scraper import AppBrainScraper, RuStoreScraper
from config.settings import settings
from db import crud
from db.database import get_db_dependency
from utils.pipeline import CheckPipeline

logger = logging.getLogger(__name__)

router = APIRouter()

SOURCES = ("top_free", "top_new_free")

# Collaborators built once by the app lifespan (see api.main).


def get_check_pipeline(request: Request) -> CheckPipeline:
    return request.app.state.pipeline


def get_store_scraper(request: Request) -> RuStoreScraper:
    return request.app.state.store_scraper


def get_rankings_scraper(request: Request) -> AppBrainScraper:
    return request.app.state.rankings_scraper


def _validate_source(tab: str) -> str:
    if tab not in SOURCES:
        raise HTTPException(status_code=400, detail=f"Unknown tab '{tab}'. Use one of: {', '.join(SOURCES)}")
    return tab


# ─── Health ──────────────────────────────────────────────────────────────────

@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    return HealthResponse(
        status="ok",
        version=settings.APP_VERSION,
        timestamp=datetime.now(timezone.utc),
    )


# ─── Source apps ─────────────────────────────────────────────────────────────

@router.get("/apps", response_model=AppListResponse, tags=["Apps"])
def list_apps(tab: str = "top_free", filter: str = "all", db: Session = Depends(get_db_dependency)):
    """Ranking list for one source, optionally only checked / not checked apps."""
    _validate_source(tab)
    if filter not in crud.STATUS_FILTERS:
        raise HTTPException(status_code=400, detail=f"Unknown filter '{filter}'.")
    try:
        apps = crud.get_apps(db, tab, filter)
    except Exception as e:
        logger.error(f"get_apps failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return AppListResponse(apps=[AppResponse(**a.to_dict()) for a in apps])


@router.post("/update-list", response_model=MessageResponse, tags=["Apps"])
def update_list(
    tab: str = "top_free",
    db: Session = Depends(get_db_dependency),
    scraper: AppBrainScraper = Depends(get_rankings_scraper),
):
    """Re-scrape an AppBrain ranking and replace the stored list."""
    _validate_source(tab)
    if tab == "top_new_free":
        top_apps = scraper.scrape_top_new_free()
    else:
        top_apps = scraper.scrape_top_free()
    top_apps = top_apps[:settings.MAX_SOURCE_APPS]

    if not top_apps:
        raise HTTPException(status_code=404, detail="No apps found on AppBrain")

    try:
        count = crud.replace_apps(db, tab, top_apps)
    except Exception as e:
        logger.error(f"Updating list ({tab}) failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    logger.info(f"AppBrain {tab} list updated successfully")
    return MessageResponse(message="Scraping completed", count=count)


# ─── Checks ──────────────────────────────────────────────────────────────────

@router.post("/check/{app_id}", response_model=CheckResponse, tags=["Checks"])
def check_app(
    app_id: int,
    request: CheckAppRequest,
    db: Session = Depends(get_db_dependency),
    scraper: RuStoreScraper = Depends(get_store_scraper),
    pipeline: CheckPipeline = Depends(get_check_pipeline),
):
    """
    Check whether an app has room on the target store:
    build query → search → filter relevant competitors → score → store report.
    """
    if not request.title:
        raise HTTPException(status_code=400, detail="Title is required")
    if crud.get_app(db, app_id) is None:
        raise HTTPException(status_code=404, detail=f"App {app_id} not found.")

    logger.info(f"Check requested for ID {app_id}: {request.title} (category: {request.category})")
    try:
        report = pipeline.check(
            request.title, request.category, request.gp_rating, request.installs,
            scraper.search,
        )
        crud.record_check(db, app_id, report)
    except Exception as e:
        logger.error(f"Check failed for app {app_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return CheckResponse(success=True, report=ReportResponse(**report.to_dict()))


@router.get("/report/{app_id}", response_model=CheckResponse, tags=["Checks"])
def get_report(app_id: int, db: Session = Depends(get_db_dependency)):
    """Latest stored report for an app."""
    report = crud.get_report(db, app_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return CheckResponse(success=True, report=ReportResponse(**report))


@router.post("/reset-checks", response_model=MessageResponse, tags=["Checks"])
def reset_checks(db: Session = Depends(get_db_dependency)):
    """Forget all check results."""
    try:
        crud.reset_check_data(db)
    except Exception as e:
        logger.error(f"Reset error: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return MessageResponse(message="Check data reset successfully")
