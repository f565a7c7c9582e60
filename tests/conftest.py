# tests/conftest.py
import os

os.environ["DATABASE_URL"] = os.getenv("TEST_DATABASE_URL", "sqlite://")
os.environ["ENABLE_SCHEDULER"] = "0"

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from app import models
from app.db import Base, SessionLocal, engine, get_db
from app.utils import encode_json_list

SAMPLE_CARS = [
    dict(make="Toyota", model="Camry", year=2022, price=28500, mileage=15000, fuel_type="Gasoline",
         transmission="Automatic", body_type="Sedan", color="Silver",
         description="Excellent condition, well maintained Toyota Camry with full service history",
         features=["Air Conditioning", "Bluetooth", "Backup Camera", "Cruise Control", "Keyless Entry"],
         created_at=datetime(2024, 1, 1, 9, 0)),
    dict(make="Honda", model="Civic", year=2021, price=24000, mileage=22000, fuel_type="Gasoline",
         transmission="Manual", body_type="Sedan", color="Blue",
         description="Sporty and fuel efficient Honda Civic with manual transmission",
         features=["Air Conditioning", "Bluetooth", "Sport Mode", "USB Ports", "Power Windows"],
         created_at=datetime(2024, 1, 2, 9, 0)),
    dict(make="BMW", model="X5", year=2023, price=65000, mileage=8000, fuel_type="Gasoline",
         transmission="Automatic", body_type="SUV", color="Black",
         description="Luxury BMW X5 with premium features and low mileage",
         features=["Leather Seats", "Navigation", "Panoramic Sunroof", "Heated Seats"],
         images=["bmw-front.jpg", "bmw-side.jpg"],
         created_at=datetime(2024, 1, 3, 9, 0)),
    dict(make="Ford", model="F-150", year=2020, price=35000, mileage=45000, fuel_type="Gasoline",
         transmission="Automatic", body_type="Pickup", color="Red",
         description="Reliable Ford F-150 pickup truck, perfect for work and recreation",
         features=["4WD", "Towing Package", "Bed Liner"],
         created_at=datetime(2024, 1, 4, 9, 0)),
    dict(make="Tesla", model="Model 3", year=2022, price=42000, mileage=12000, fuel_type="Electric",
         transmission="Automatic", body_type="Sedan", color="White",
         description="Modern Tesla Model 3 with autopilot and supercharging capability",
         features=["Autopilot", "Supercharging", "Glass Roof"],
         created_at=datetime(2024, 1, 5, 9, 0)),
    dict(make="Mercedes-Benz", model="C-Class", year=2023, price=48000, mileage=0, fuel_type="Gasoline",
         transmission="Automatic", body_type="Sedan", color="Gray",
         description="Brand new Mercedes-Benz C-Class with premium interior",
         features=["Leather Seats", "Navigation", "Lane Assist"],
         created_at=datetime(2024, 1, 5, 9, 0)),
    dict(make="Audi", model="A4", year=2021, price=38000, mileage=18000, fuel_type="Gasoline",
         transmission="Automatic", body_type="Sedan", color="Blue",
         description="Audi A4 with quattro", features=["Quattro"],
         status="inactive", created_at=datetime(2024, 1, 6, 9, 0)),
]


@pytest.fixture()
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def seller(db):
    user = models.User(name="Sam Seller", email="seller@example.com")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def buyer(db):
    user = models.User(name="Bea Buyer", email="buyer@example.com")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def cars(db, seller):
    """Sample listings keyed by model name."""
    out = {}
    for data in SAMPLE_CARS:
        data = dict(data)
        data["features"] = encode_json_list(data.get("features"))
        data["images"] = encode_json_list(data.get("images"))
        car = models.Car(user_id=seller.id, **data)
        db.add(car)
        db.commit()
        db.refresh(car)
        out[car.model] = car
    return out


@pytest.fixture()
def client(db):
    def override_get_db():
        yield db

    from app.main import app
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
