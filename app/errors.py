# app/errors.py
"""Error taxonomy shared by the query, comparison and CRUD layers.

Routes map these onto HTTP statuses: validation errors are client errors,
not-found errors are 404s and data store errors surface as a generic 500.
"""
from typing import Iterable


class CarHubError(Exception):
    """Base class for every error raised by the service layer."""


class ValidationError(CarHubError):
    pass


class InvalidComparisonSize(ValidationError):
    def __init__(self, count: int, minimum: int = 2, maximum: int = 4):
        self.count = count
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(f"Please provide {minimum}-{maximum} car IDs for comparison")


class NotFoundError(CarHubError):
    pass


class ListingNotFound(NotFoundError):
    def __init__(self, car_ids: Iterable[int]):
        self.car_ids = list(car_ids)
        ids = ", ".join(str(i) for i in self.car_ids)
        super().__init__(f"Car not found: {ids}")


class PermissionDenied(CarHubError):
    pass


class DataStoreError(CarHubError):
    pass
