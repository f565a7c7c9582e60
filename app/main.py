import os
from fastapi import FastAPI
from app.db import Base, engine
import app.models  # noqa: F401 ensure models are imported so tables are known
from app.api.routes import router as api_router
from app.utils import logger

# create FastAPI instance
app = FastAPI(
    title="CarHub",
    description="Car marketplace listings: search, comparison, favorites and reviews.",
    version="1.0.0",
)
app.include_router(api_router, prefix="/api")

_scheduler = None


@app.on_event("startup")
def on_startup():
    global _scheduler
    Base.metadata.create_all(bind=engine)
    if os.getenv("ENABLE_SCHEDULER", "1") == "1":
        from app.scheduler import start_scheduler
        _scheduler = start_scheduler()
    logger.info("CarHub API ready")


@app.on_event("shutdown")
def on_shutdown():
    if _scheduler is not None:
        _scheduler.shutdown(wait=False)
