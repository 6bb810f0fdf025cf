"""
HTTP service for the Store Opportunity Finder.

Start with:  uvicorn api.main:app   (or: python main.py api)

The check pipeline, its translator cache and the two scrapers are built once
per process in `lifespan` and handed to the routes through `app.state`.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agents.scraper import AppBrainScraper, RuStoreScraper
from agents.translator import Translator
from api.routes import router
from config.settings import settings
from db.database import init_db
from utils.pipeline import CheckPipeline

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"🚀 {settings.APP_NAME} v{settings.APP_VERSION} starting")
    init_db()

    app.state.pipeline = CheckPipeline(translator=Translator())
    app.state.store_scraper = RuStoreScraper()
    app.state.rankings_scraper = AppBrainScraper()

    yield

    for scraper in (app.state.store_scraper, app.state.rankings_scraper):
        scraper.session.close()
    app.state.pipeline.translator.session.close()
    logger.info("Store Opportunity API stopped")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "Scores how attractive it is to bring a Google Play app to RuStore: "
        "AppBrain rankings in, RuStore competitors and an opportunity score out."
    ),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api/v1")


@app.get("/", tags=["System"])
async def root():
    return {"name": settings.APP_NAME, "version": settings.APP_VERSION, "api": "/api/v1"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
