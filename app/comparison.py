# app/comparison.py
"""Side-by-side comparison of 2-4 listings."""
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import DataStoreError, InvalidComparisonSize, ListingNotFound
from .models import Car
from .search import serialize_listing
from .utils import logger

MIN_COMPARE = 2
MAX_COMPARE = 4
PRICE_PER_MILE_DIGITS = 2

def price_per_mile(price: float, mileage: int) -> Optional[float]:
    if not mileage or mileage <= 0:
        return None
    return round(price / mileage, PRICE_PER_MILE_DIGITS)

def summarize(cars: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    prices = [c["price"] for c in cars]
    mileages = [c["mileage"] for c in cars]
    years = [c["year"] for c in cars]
    return {
        "lowest_price": min(prices),
        "highest_price": max(prices),
        "lowest_mileage": min(mileages),
        "highest_mileage": max(mileages),
        "oldest_year": min(years),
        "newest_year": max(years),
        # same values as above, kept nested for callers that read ranges
        "price_range": {"min": min(prices), "max": max(prices)},
        "year_range": {"min": min(years), "max": max(years)},
    }

def compare_listings(db: Session, car_ids: Sequence[int], current_year: Optional[int] = None) -> Dict[str, Any]:
    """Fetch the listings named by `car_ids` and compute the comparison summary.

    Duplicate ids are collapsed before the 2-4 size check. Listings are
    returned in request order with `price_per_mile` and `age_years` attached.
    Raises InvalidComparisonSize, ListingNotFound or DataStoreError; never
    returns a partial result.
    """
    ids: List[int] = list(dict.fromkeys(car_ids))
    if not MIN_COMPARE <= len(ids) <= MAX_COMPARE:
        raise InvalidComparisonSize(len(ids), MIN_COMPARE, MAX_COMPARE)

    try:
        rows = db.scalars(select(Car).where(Car.id.in_(ids))).all()
    except SQLAlchemyError as e:
        logger.exception("Comparison lookup failed for %s: %s", ids, e)
        raise DataStoreError("Comparison lookup failed") from e

    by_id = {c.id: c for c in rows}
    missing = [i for i in ids if i not in by_id]
    if missing:
        raise ListingNotFound(missing)

    year_now = current_year or datetime.now().year
    cars = []
    for car_id in ids:
        data = serialize_listing(by_id[car_id])
        data["price_per_mile"] = price_per_mile(data["price"], data["mileage"])
        data["age_years"] = year_now - data["year"]
        cars.append(data)
    return {"cars": cars, "summary": summarize(cars)}
