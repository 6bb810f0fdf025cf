"""
Data operations on source-app listings and check reports.

Every write commits on success and rolls back on failure, leaving the
previous data in place.
"""

import logging
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from db.models import AppListing, StoreReport
from models.schemas import OpportunityReport, SourceApp

logger = logging.getLogger(__name__)

STATUS_FILTERS = ("all", "not_checked", "checked")


def replace_apps(db: Session, source: str, apps: Sequence[SourceApp]) -> int:
    """Atomically swap the ranking list stored for `source`."""
    try:
        for old in db.query(AppListing).filter(AppListing.source == source).all():
            db.delete(old)
        db.flush()
        db.add_all([
            AppListing(
                rank=app.rank,
                title=app.title,
                category=app.category,
                gp_rating=app.gp_rating,
                installs=app.installs,
                recent=app.recent,
                gp_url=app.gp_url,
                source=source,
            )
            for app in apps
        ])
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"replace_apps failed, rolled back: {e}")
        raise
    logger.info(f'Replaced {len(apps)} apps for source="{source}"')
    return len(apps)


def get_app(db: Session, app_id: int) -> Optional[AppListing]:
    return db.get(AppListing, app_id)


def get_apps(db: Session, source: str, status_filter: str = "all") -> List[AppListing]:
    query = db.query(AppListing).filter(AppListing.source == source)
    if status_filter == "not_checked":
        query = query.filter(AppListing.store_exists.is_(None))
    elif status_filter == "checked":
        query = query.filter(AppListing.store_exists.is_(True))
    return query.order_by(AppListing.rank.asc()).all()


def _apply_check_data(
    db: Session,
    app_id: int,
    store_exists: bool,
    opportunity_score: Optional[int],
    store_rating: Optional[float] = None,
    diff_rating: Optional[float] = None,
) -> bool:
    app = db.get(AppListing, app_id)
    if app is None:
        return False
    app.store_exists = store_exists
    app.store_rating = store_rating
    app.diff_rating = diff_rating
    app.opportunity_score = opportunity_score
    return True


def _replace_report(db: Session, app_id: int, report: OpportunityReport) -> StoreReport:
    db.query(StoreReport).filter(StoreReport.app_id == app_id).delete()
    row = StoreReport(
        app_id=app_id,
        search_query=report.search_query,
        search_url=report.search_url,
        competitors_count=report.competitors_count,
        avg_rating=report.avg_rating,
        max_rating=report.max_rating,
        opportunity_score=report.opportunity_score,
        top_competitors=[c.to_dict() for c in report.top_competitors],
    )
    db.add(row)
    return row


def update_check_data(
    db: Session,
    app_id: int,
    store_exists: bool,
    opportunity_score: Optional[int],
    store_rating: Optional[float] = None,
    diff_rating: Optional[float] = None,
) -> bool:
    """Store the existence/score summary of a check. False if the app is unknown."""
    try:
        found = _apply_check_data(db, app_id, store_exists, opportunity_score, store_rating, diff_rating)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"update_check_data failed, rolled back: {e}")
        raise
    return found


def save_report(db: Session, app_id: int, report: OpportunityReport) -> StoreReport:
    """Store the report of a check, replacing any earlier one for the app."""
    try:
        row = _replace_report(db, app_id, report)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"save_report failed, rolled back: {e}")
        raise
    return row


def record_check(db: Session, app_id: int, report: OpportunityReport) -> StoreReport:
    """
    Store a finished check: the app's existence/score summary and its report,
    in one transaction. On failure neither is written and the previous
    summary and report stay in place.
    """
    try:
        if not _apply_check_data(db, app_id, store_exists=True, opportunity_score=report.opportunity_score):
            raise LookupError(f"App {app_id} not found")
        row = _replace_report(db, app_id, report)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"record_check failed for app {app_id}, rolled back: {e}")
        raise
    return row


def get_report(db: Session, app_id: int) -> Optional[dict]:
    row = db.query(StoreReport).filter(StoreReport.app_id == app_id).first()
    return row.to_dict() if row else None


def reset_check_data(db: Session) -> None:
    """Forget every check: drop reports and clear per-app summaries."""
    try:
        db.query(StoreReport).delete()
        db.query(AppListing).update({
            AppListing.store_exists: None,
            AppListing.store_rating: None,
            AppListing.diff_rating: None,
            AppListing.opportunity_score: None,
        })
        db.commit()
    except Exception:
        db.rollback()
        raise
