# app/api/routes.py
from contextlib import contextmanager
from typing import List
from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from sqlalchemy.orm import Session
from .. import crud, schemas
from ..comparison import compare_listings
from ..db import get_db
from ..errors import CarHubError, DataStoreError, NotFoundError, PermissionDenied, ValidationError
from ..search import serialize_listing, search_listings
from ..utils import logger

router = APIRouter()

@contextmanager
def http_errors():
    """Translate service errors into HTTP responses."""
    try:
        yield
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except DataStoreError as e:
        logger.error("Request failed on data store: %s", e)
        raise HTTPException(status_code=500, detail="Database error, please retry later")
    except CarHubError as e:
        logger.exception("Unhandled service error: %s", e)
        raise HTTPException(status_code=500, detail="Internal error")

def current_user_id(x_user_id: int | None = Header(None)) -> int:
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return x_user_id

def is_admin(x_admin: str | None = Header(None)) -> bool:
    return x_admin == "1"

@router.get("/health")
def health():
    return {"status": "ok"}

# --- listings ---

@router.get("/cars", response_model=List[schemas.ListingOut])
def cars(skip: int = 0, limit: int = 50, db: Session = Depends(get_db)):
    with http_errors():
        return [serialize_listing(c) for c in crud.list_listings(db, skip=skip, limit=limit)]

@router.get("/cars/search", response_model=schemas.SearchResponse)
def search_cars(
    query: str | None = Query(None),
    min_price: float | None = Query(None, alias="minPrice"),
    max_price: float | None = Query(None, alias="maxPrice"),
    min_year: int | None = Query(None, alias="minYear"),
    max_year: int | None = Query(None, alias="maxYear"),
    min_mileage: int | None = Query(None, alias="minMileage"),
    max_mileage: int | None = Query(None, alias="maxMileage"),
    fuel_type: str | None = Query(None, alias="fuelType"),
    transmission: str | None = Query(None),
    body_type: str | None = Query(None, alias="bodyType"),
    make: str | None = Query(None),
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db)
):
    filters = schemas.ListingFilter(
        query=query,
        min_price=min_price,
        max_price=max_price,
        min_year=min_year,
        max_year=max_year,
        min_mileage=min_mileage,
        max_mileage=max_mileage,
        fuel_type=fuel_type,
        transmission=transmission,
        body_type=body_type,
        make=make,
        page=page,
        limit=limit,
    )
    with http_errors():
        return search_listings(db, filters)

@router.get("/cars/makes", response_model=List[str])
def makes(db: Session = Depends(get_db)):
    with http_errors():
        return crud.list_makes(db)

@router.post("/cars/compare", response_model=schemas.ComparisonResponse)
def compare_cars(payload: schemas.CompareRequest, db: Session = Depends(get_db)):
    with http_errors():
        return compare_listings(db, payload.car_ids)

@router.get("/cars/{car_id}", response_model=schemas.ListingOut)
def get_car(car_id: int, db: Session = Depends(get_db)):
    with http_errors():
        return serialize_listing(crud.get_listing(db, car_id, count_view=True))

@router.post("/cars", response_model=schemas.ListingOut, status_code=status.HTTP_201_CREATED)
def create_car(payload: schemas.ListingCreate, user_id: int = Depends(current_user_id),
               db: Session = Depends(get_db)):
    with http_errors():
        return serialize_listing(crud.create_listing(db, user_id, payload.model_dump()))

@router.put("/cars/{car_id}", response_model=schemas.ListingOut)
def update_car(car_id: int, payload: schemas.ListingUpdate, user_id: int = Depends(current_user_id),
               admin: bool = Depends(is_admin), db: Session = Depends(get_db)):
    with http_errors():
        obj = crud.update_listing(db, car_id, user_id, payload.model_dump(exclude_unset=True), is_admin=admin)
        return serialize_listing(obj)

@router.patch("/cars/{car_id}/status", response_model=schemas.ListingOut)
def update_car_status(car_id: int, payload: schemas.StatusUpdate, user_id: int = Depends(current_user_id),
                      admin: bool = Depends(is_admin), db: Session = Depends(get_db)):
    with http_errors():
        return serialize_listing(crud.set_listing_status(db, car_id, user_id, payload.status, is_admin=admin))

@router.delete("/cars/{car_id}")
def delete_car(car_id: int, user_id: int = Depends(current_user_id), admin: bool = Depends(is_admin),
               db: Session = Depends(get_db)):
    with http_errors():
        crud.delete_listing(db, car_id, user_id, is_admin=admin)
    return {"message": "Car deleted successfully"}

# --- users & reputation ---

@router.post("/users", response_model=schemas.UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: schemas.UserCreate, db: Session = Depends(get_db)):
    with http_errors():
        return crud.create_user(db, payload.model_dump())

@router.get("/users/{user_id}/reputation", response_model=schemas.Reputation)
def reputation(user_id: int, db: Session = Depends(get_db)):
    with http_errors():
        crud.get_user(db, user_id)
        return crud.user_reputation(db, user_id)

# --- favorites ---

@router.get("/favorites", response_model=List[schemas.ListingOut])
def favorites(user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    with http_errors():
        return [serialize_listing(c) for c in crud.list_favorites(db, user_id)]

@router.post("/favorites/{car_id}", status_code=status.HTTP_201_CREATED)
def add_favorite(car_id: int, user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    with http_errors():
        crud.add_favorite(db, user_id, car_id)
    return {"message": "Added to favorites"}

@router.delete("/favorites/{car_id}")
def remove_favorite(car_id: int, user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    with http_errors():
        removed = crud.remove_favorite(db, user_id, car_id)
    if not removed:
        raise HTTPException(status_code=404, detail="Favorite not found")
    return {"message": "Removed from favorites"}

# --- reviews ---

@router.post("/reviews", response_model=schemas.ReviewOut, status_code=status.HTTP_201_CREATED)
def add_review(payload: schemas.ReviewCreate, user_id: int = Depends(current_user_id),
               db: Session = Depends(get_db)):
    with http_errors():
        return crud.add_review(db, user_id, payload.model_dump())

@router.get("/reviews/user/{user_id}", response_model=List[schemas.ReviewOut])
def reviews_for_user(user_id: int, db: Session = Depends(get_db)):
    with http_errors():
        return crud.list_reviews_for_user(db, user_id)

# --- saved searches ---

def _saved_search_out(saved) -> schemas.SavedSearchOut:
    return schemas.SavedSearchOut(
        id=saved.id,
        user_id=saved.user_id,
        search_name=saved.search_name,
        criteria=crud.saved_search_criteria(saved),
        email_alerts=saved.email_alerts,
        last_checked_at=saved.last_checked_at,
        last_match_count=saved.last_match_count,
        created_at=saved.created_at,
    )

@router.get("/saved-searches", response_model=List[schemas.SavedSearchOut])
def saved_searches(user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    with http_errors():
        return [_saved_search_out(s) for s in crud.list_saved_searches(db, user_id)]

@router.post("/saved-searches", response_model=schemas.SavedSearchOut, status_code=status.HTTP_201_CREATED)
def save_search(payload: schemas.SavedSearchCreate, user_id: int = Depends(current_user_id),
                db: Session = Depends(get_db)):
    with http_errors():
        saved = crud.create_saved_search(db, user_id, payload.search_name, payload.criteria, payload.email_alerts)
        return _saved_search_out(saved)

@router.delete("/saved-searches/{search_id}")
def delete_saved_search(search_id: int, user_id: int = Depends(current_user_id), db: Session = Depends(get_db)):
    with http_errors():
        removed = crud.delete_saved_search(db, user_id, search_id)
    if not removed:
        raise HTTPException(status_code=404, detail="Saved search not found")
    return {"status": "deleted"}
