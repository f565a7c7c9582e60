# app/crud.py
"""CRUD operations for listings, users, favorites, reviews and saved searches.

Ownership checks live here so every caller gets the same rules: a listing is
changed or removed by its owner or by an admin. Functions raise the errors in
`app.errors` instead of returning sentinels.
"""
import json
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import DataStoreError, ListingNotFound, NotFoundError, PermissionDenied, ValidationError
from .models import Car, Favorite, LISTING_STATUSES, Review, SavedSearch, User
from .schemas import ListingFilter
from .utils import encode_json_list, logger

_LIST_COLUMNS = ("features", "images")

def commit_or_raise(db: Session, action: str):
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to %s: %s", action, e)
        raise DataStoreError(f"Failed to {action}") from e

def _encode_lists(data: Dict[str, Any]) -> Dict[str, Any]:
    for key in _LIST_COLUMNS:
        if key in data and data[key] is not None:
            data[key] = encode_json_list(data[key])
    return data

# --- users ---

def create_user(db: Session, data: Dict[str, Any]) -> User:
    if db.scalar(select(User.id).where(User.email == data["email"])) is not None:
        raise ValidationError("User already exists")
    user = User(**data)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValidationError("User already exists") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to create user: %s", e)
        raise DataStoreError("Failed to create user") from e
    db.refresh(user)
    logger.info("Created user %s", user.id)
    return user

def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError(f"User not found: {user_id}")
    return user

# --- listings ---

def create_listing(db: Session, owner_id: Optional[int], data: Dict[str, Any]) -> Car:
    car = Car(**_encode_lists(dict(data)), user_id=owner_id)
    db.add(car)
    commit_or_raise(db, "create listing")
    db.refresh(car)
    logger.info("Created listing %s (%s %s) for user %s", car.id, car.make, car.model, owner_id)
    return car

def get_listing(db: Session, car_id: int, count_view: bool = False) -> Car:
    car = db.get(Car, car_id)
    if not car:
        raise ListingNotFound([car_id])
    if count_view:
        car.views = (car.views or 0) + 1
        commit_or_raise(db, "count listing view")
        db.refresh(car)
    return car

def list_listings(db: Session, skip: int = 0, limit: int = 50) -> List[Car]:
    return db.scalars(
        select(Car).order_by(Car.created_at.desc(), Car.id.desc()).offset(skip).limit(limit)
    ).all()

def _owned_listing(db: Session, car_id: int, actor_id: Optional[int], is_admin: bool) -> Car:
    car = get_listing(db, car_id)
    if not is_admin and (actor_id is None or car.user_id != actor_id):
        raise PermissionDenied("Car not found or unauthorized")
    return car

def update_listing(db: Session, car_id: int, actor_id: Optional[int], updates: Dict[str, Any],
                   is_admin: bool = False) -> Car:
    car = _owned_listing(db, car_id, actor_id, is_admin)
    for k, v in _encode_lists(dict(updates)).items():
        setattr(car, k, v)
    commit_or_raise(db, "update listing")
    db.refresh(car)
    logger.info("Updated listing %s", car_id)
    return car

def set_listing_status(db: Session, car_id: int, actor_id: Optional[int], status: str,
                       is_admin: bool = False) -> Car:
    if status not in LISTING_STATUSES:
        raise ValidationError(f"Invalid status: {status}")
    car = _owned_listing(db, car_id, actor_id, is_admin)
    car.status = status
    commit_or_raise(db, "update listing status")
    db.refresh(car)
    logger.info("Listing %s is now %s", car_id, status)
    return car

def delete_listing(db: Session, car_id: int, actor_id: Optional[int], is_admin: bool = False):
    car = _owned_listing(db, car_id, actor_id, is_admin)
    db.delete(car)
    commit_or_raise(db, "delete listing")
    logger.info("Deleted listing %s", car_id)

def list_makes(db: Session) -> List[str]:
    return db.scalars(
        select(Car.make).where(Car.status == "active").distinct().order_by(Car.make)
    ).all()

# --- favorites ---

def add_favorite(db: Session, user_id: int, car_id: int) -> Favorite:
    get_listing(db, car_id)
    fav = db.scalar(select(Favorite).where(Favorite.user_id == user_id, Favorite.car_id == car_id))
    if fav:
        return fav
    fav = Favorite(user_id=user_id, car_id=car_id)
    db.add(fav)
    commit_or_raise(db, "add favorite")
    db.refresh(fav)
    return fav

def remove_favorite(db: Session, user_id: int, car_id: int) -> bool:
    fav = db.scalar(select(Favorite).where(Favorite.user_id == user_id, Favorite.car_id == car_id))
    if not fav:
        return False
    db.delete(fav)
    commit_or_raise(db, "remove favorite")
    return True

def list_favorites(db: Session, user_id: int) -> List[Car]:
    return db.scalars(
        select(Car)
        .join(Favorite, Favorite.car_id == Car.id)
        .where(Favorite.user_id == user_id)
        .order_by(Favorite.created_at.desc(), Favorite.id.desc())
    ).all()

# --- reviews ---

def add_review(db: Session, reviewer_id: int, data: Dict[str, Any]) -> Review:
    reviewed_user_id = data.get("reviewed_user_id")
    car_id = data.get("car_id")
    if car_id is not None:
        car = get_listing(db, car_id)
        if car.user_id is None:
            raise ValidationError("Car has no owner to review")
        reviewed_user_id = car.user_id
    if reviewed_user_id is None:
        raise ValidationError("Either car_id or reviewed_user_id is required")
    get_user(db, reviewed_user_id)
    if reviewed_user_id == reviewer_id:
        raise ValidationError("You cannot review yourself")
    review = Review(
        reviewer_id=reviewer_id,
        reviewed_user_id=reviewed_user_id,
        car_id=car_id,
        rating=data["rating"],
        comment=data.get("comment"),
    )
    db.add(review)
    commit_or_raise(db, "add review")
    db.refresh(review)
    logger.info("User %s reviewed user %s (%d stars)", reviewer_id, reviewed_user_id, review.rating)
    return review

def list_reviews_for_user(db: Session, user_id: int) -> List[Review]:
    return db.scalars(
        select(Review)
        .where(Review.reviewed_user_id == user_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    ).all()

def user_reputation(db: Session, user_id: int) -> Dict[str, Any]:
    avg, total = db.execute(
        select(func.avg(Review.rating), func.count(Review.id)).where(Review.reviewed_user_id == user_id)
    ).one()
    return {
        "user_id": user_id,
        "average_rating": round(float(avg), 1) if avg is not None else 0.0,
        "total_reviews": total,
    }

# --- saved searches ---

def saved_search_criteria(saved: SavedSearch) -> ListingFilter:
    return ListingFilter.model_validate(json.loads(saved.search_criteria or "{}"))

def create_saved_search(db: Session, user_id: int, search_name: str, criteria: ListingFilter,
                        email_alerts: bool = False) -> SavedSearch:
    saved = SavedSearch(
        user_id=user_id,
        search_name=search_name,
        search_criteria=criteria.model_dump_json(by_alias=True, exclude_none=True),
        email_alerts=email_alerts,
    )
    db.add(saved)
    commit_or_raise(db, "save search")
    db.refresh(saved)
    logger.info("Saved search %s for user %s", saved.id, user_id)
    return saved

def list_saved_searches(db: Session, user_id: int) -> List[SavedSearch]:
    return db.scalars(
        select(SavedSearch).where(SavedSearch.user_id == user_id).order_by(SavedSearch.id)
    ).all()

def delete_saved_search(db: Session, user_id: int, search_id: int) -> bool:
    saved = db.get(SavedSearch, search_id)
    if not saved or saved.user_id != user_id:
        return False
    db.delete(saved)
    commit_or_raise(db, "delete saved search")
    return True
