# app/models.py
"""SQLAlchemy ORM models for persisted entities.

`Car` is the listing table; `features` and `images` hold JSON-encoded lists
as plain text. Favorites and reviews hang off cars and users and are removed
with them.
"""
from sqlalchemy import (
    Boolean, CheckConstraint, Column, ForeignKey, Integer, Numeric, String, Text,
    TIMESTAMP, UniqueConstraint, func, Index,
)
from sqlalchemy.orm import relationship
from .db import Base

LISTING_STATUSES = ("active", "inactive", "pending")

class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    phone = Column(String(20))
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    cars = relationship("Car", back_populates="owner", passive_deletes=True)

class Car(Base):
    __tablename__ = "cars"
    __table_args__ = (
        CheckConstraint("price > 0", name="ck_cars_price_positive"),
        CheckConstraint("mileage >= 0", name="ck_cars_mileage_non_negative"),
        CheckConstraint("condition_rating BETWEEN 1 AND 5", name="ck_cars_condition_rating"),
    )
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    make = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    year = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    mileage = Column(Integer, nullable=False)
    fuel_type = Column(String(50), nullable=False)
    transmission = Column(String(50), nullable=False)
    body_type = Column(String(50))
    color = Column(String(50))
    engine_size = Column(String(20))
    doors = Column(Integer)
    seats = Column(Integer)
    condition_rating = Column(Integer, nullable=False, default=5)
    description = Column(Text)
    image = Column(String(255))
    images = Column(Text)
    features = Column(Text)
    status = Column(String(20), nullable=False, default="active", index=True)
    views = Column(Integer, nullable=False, default=0)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    owner = relationship("User", back_populates="cars")
    favorites = relationship("Favorite", back_populates="car", cascade="all, delete-orphan")
    reviews = relationship("Review", back_populates="car", cascade="all, delete-orphan")

Index("idx_cars_make_model", Car.make, Car.model)
Index("idx_cars_price", Car.price)
Index("idx_cars_year", Car.year)

class Favorite(Base):
    __tablename__ = "favorites"
    __table_args__ = (UniqueConstraint("user_id", "car_id", name="unique_favorite"),)
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    car_id = Column(Integer, ForeignKey("cars.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    car = relationship("Car", back_populates="favorites")

class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating"),
    )
    id = Column(Integer, primary_key=True)
    reviewer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    reviewed_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    car_id = Column(Integer, ForeignKey("cars.id", ondelete="CASCADE"), nullable=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text)
    helpful_votes = Column(Integer, nullable=False, default=0)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    car = relationship("Car", back_populates="reviews")

class SavedSearch(Base):
    __tablename__ = "saved_searches"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    search_name = Column(String(255), nullable=False)
    search_criteria = Column(Text, nullable=False)
    email_alerts = Column(Boolean, nullable=False, default=False)
    last_checked_at = Column(TIMESTAMP(timezone=True))
    last_match_count = Column(Integer, nullable=False, default=0)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
