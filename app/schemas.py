# app/schemas.py
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ListingStatus = Literal["active", "inactive", "pending"]

# first production automobile
MIN_MODEL_YEAR = 1886

class ListingBase(BaseModel):
    make: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    year: int
    price: float = Field(..., gt=0)
    mileage: int = Field(..., ge=0)
    fuel_type: str = Field(..., max_length=50)
    transmission: str = Field(..., max_length=50)
    body_type: Optional[str] = None
    color: Optional[str] = None
    engine_size: Optional[str] = None
    doors: Optional[int] = None
    seats: Optional[int] = None
    condition_rating: int = Field(5, ge=1, le=5)
    description: Optional[str] = None
    image: Optional[str] = None

class ListingCreate(ListingBase):
    images: List[str] = []
    features: List[str] = []

    @field_validator("year")
    @classmethod
    def plausible_year(cls, v: int) -> int:
        if v < MIN_MODEL_YEAR or v > datetime.now().year + 1:
            raise ValueError(f"year must be between {MIN_MODEL_YEAR} and {datetime.now().year + 1}")
        return v

class ListingUpdate(BaseModel):
    make: Optional[str] = Field(None, min_length=1, max_length=100)
    model: Optional[str] = Field(None, min_length=1, max_length=100)
    year: Optional[int] = None
    price: Optional[float] = Field(None, gt=0)
    mileage: Optional[int] = Field(None, ge=0)
    fuel_type: Optional[str] = None
    transmission: Optional[str] = None
    body_type: Optional[str] = None
    color: Optional[str] = None
    engine_size: Optional[str] = None
    doors: Optional[int] = None
    seats: Optional[int] = None
    condition_rating: Optional[int] = Field(None, ge=1, le=5)
    description: Optional[str] = None
    image: Optional[str] = None
    images: Optional[List[str]] = None
    features: Optional[List[str]] = None

    @field_validator("year")
    @classmethod
    def plausible_year(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and (v < MIN_MODEL_YEAR or v > datetime.now().year + 1):
            raise ValueError(f"year must be between {MIN_MODEL_YEAR} and {datetime.now().year + 1}")
        return v

class StatusUpdate(BaseModel):
    status: ListingStatus

class ListingOut(ListingBase):
    id: int
    user_id: Optional[int] = None
    status: str
    views: int = 0
    images: List[str] = []
    features: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)

class ComparedListingOut(ListingOut):
    price_per_mile: Optional[float] = None
    age_years: int

class ListingFilter(BaseModel):
    """One search request. Every bound is optional; absent means unconstrained."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    query: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_year: Optional[int] = None
    max_year: Optional[int] = None
    min_mileage: Optional[int] = None
    max_mileage: Optional[int] = None
    fuel_type: Optional[str] = None
    transmission: Optional[str] = None
    body_type: Optional[str] = None
    make: Optional[str] = None
    page: int = 1
    limit: Optional[int] = None

class Pagination(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int

class SearchResponse(BaseModel):
    cars: List[ListingOut]
    pagination: Pagination

class CompareRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    car_ids: List[int]

class PriceRange(BaseModel):
    min: float
    max: float

class YearRange(BaseModel):
    min: int
    max: int

class ComparisonSummary(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    lowest_price: float
    highest_price: float
    lowest_mileage: int
    highest_mileage: int
    oldest_year: int
    newest_year: int
    price_range: PriceRange
    year_range: YearRange

class ComparisonResponse(BaseModel):
    cars: List[ComparedListingOut]
    summary: ComparisonSummary

class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)

class UserOut(UserCreate):
    id: int
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)

class ReviewCreate(BaseModel):
    car_id: Optional[int] = None
    reviewed_user_id: Optional[int] = None
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None

class ReviewOut(BaseModel):
    id: int
    reviewer_id: int
    reviewed_user_id: int
    car_id: Optional[int] = None
    rating: int
    comment: Optional[str] = None
    helpful_votes: int = 0
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)

class Reputation(BaseModel):
    user_id: int
    average_rating: float
    total_reviews: int

class SavedSearchCreate(BaseModel):
    search_name: str = Field(..., min_length=1, max_length=255)
    criteria: ListingFilter
    email_alerts: bool = False

class SavedSearchOut(BaseModel):
    id: int
    user_id: int
    search_name: str
    criteria: ListingFilter
    email_alerts: bool
    last_checked_at: Optional[datetime] = None
    last_match_count: int = 0
    created_at: Optional[datetime] = None
