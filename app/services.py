# app/services.py
from datetime import datetime, timezone
from typing import Dict

from sqlalchemy import select
from sqlalchemy.orm import Session

from . import crud
from .db import SessionLocal
from .errors import CarHubError
from .models import SavedSearch
from .search import search_listings
from .utils import logger

def evaluate_search_alerts(db: Session) -> Dict[int, int]:
    """Run every alert-enabled saved search and record its match count.

    Returns {saved_search_id: total_matches}. A failing search is logged and
    skipped; the rest still run. Each result is committed on its own.
    """
    results = {}
    saved_searches = db.scalars(
        select(SavedSearch).where(SavedSearch.email_alerts.is_(True)).order_by(SavedSearch.id)
    ).all()
    for saved in saved_searches:
        saved_id = saved.id
        try:
            criteria = crud.saved_search_criteria(saved)
            page = search_listings(db, criteria.model_copy(update={"page": 1}))
        except (CarHubError, ValueError) as e:
            logger.error("Alert check failed for saved search %s: %s", saved_id, e)
            # Postgres rejects further statements until rollback
            db.rollback()
            continue
        total = page["pagination"]["total"]
        if total != saved.last_match_count:
            logger.info("Saved search %s (%s) now matches %d listings", saved.id, saved.search_name, total)
        saved.last_match_count = total
        saved.last_checked_at = datetime.now(timezone.utc)
        crud.commit_or_raise(db, "record alert results")
        results[saved_id] = total
    return results

def run_search_alerts():
    db = SessionLocal()
    try:
        checked = evaluate_search_alerts(db)
        logger.info("Checked %d saved search alerts", len(checked))
    finally:
        db.close()
