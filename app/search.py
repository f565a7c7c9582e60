# app/search.py
"""Listing query engine.

Translates a `ListingFilter` into one filtered, paginated query over active
listings plus a matching count query. The two reads are independent and may
observe different snapshots under concurrent writes.
"""
import math
from typing import Any, Dict

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import DataStoreError
from .models import Car
from .schemas import ListingFilter
from .utils import decode_json_list, env_int, logger

DEFAULT_PAGE_SIZE = env_int("SEARCH_DEFAULT_LIMIT", 12)
MAX_PAGE_SIZE = env_int("SEARCH_MAX_LIMIT", 50)

# (filter attribute, column, comparison)
_RANGE_FILTERS = (
    ("min_price", Car.price, "ge"),
    ("max_price", Car.price, "le"),
    ("min_year", Car.year, "ge"),
    ("max_year", Car.year, "le"),
    ("min_mileage", Car.mileage, "ge"),
    ("max_mileage", Car.mileage, "le"),
)

_EQUALITY_FILTERS = (
    ("fuel_type", Car.fuel_type),
    ("transmission", Car.transmission),
    ("body_type", Car.body_type),
    ("make", Car.make),
)

def serialize_listing(car: Car) -> Dict[str, Any]:
    """Plain dict of a listing with `features` and `images` decoded."""
    data = {c.name: getattr(car, c.name) for c in Car.__table__.columns}
    if data["price"] is not None:
        data["price"] = float(data["price"])
    data["features"] = decode_json_list(car.features)
    data["images"] = decode_json_list(car.images)
    return data

def clamp_page_size(limit) -> int:
    if limit is None:
        return DEFAULT_PAGE_SIZE
    return max(1, min(int(limit), MAX_PAGE_SIZE))

def escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

def build_conditions(filters: ListingFilter):
    conds = [Car.status == "active"]
    if filters.query:
        term = f"%{escape_like(filters.query.strip())}%"
        conds.append(or_(
            Car.make.ilike(term, escape="\\"),
            Car.model.ilike(term, escape="\\"),
            Car.description.ilike(term, escape="\\"),
            Car.features.ilike(term, escape="\\"),
        ))
    for attr, column, op in _RANGE_FILTERS:
        value = getattr(filters, attr)
        if value is None:
            continue
        conds.append(column >= value if op == "ge" else column <= value)
    for attr, column in _EQUALITY_FILTERS:
        value = getattr(filters, attr)
        if value:
            conds.append(column == value)
    return and_(*conds)

def search_listings(db: Session, filters: ListingFilter) -> Dict[str, Any]:
    limit = clamp_page_size(filters.limit)
    page = max(1, filters.page or 1)
    where = build_conditions(filters)
    try:
        total = db.scalar(select(func.count()).select_from(Car).where(where)) or 0
        offset = (page - 1) * limit
        rows = []
        if offset < total:
            rows = db.scalars(
                select(Car)
                .where(where)
                .order_by(Car.created_at.desc(), Car.id.desc())
                .offset(offset)
                .limit(limit)
            ).all()
    except SQLAlchemyError as e:
        logger.exception("Listing search failed: %s", e)
        raise DataStoreError("Listing search failed") from e
    logger.debug("Search matched %d listings (page %d, limit %d)", total, page, limit)
    return {
        "cars": [serialize_listing(c) for c in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit),
        },
    }
