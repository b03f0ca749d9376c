"""Domain models for the coefficient table library.

Category enumerations with their converters, and the value objects returned
by table lookups.
"""

from .categories import (
    CONVERTERS,
    CropType,
    Province,
    SoilFunctionalCategory,
    TillageType,
    UnknownCategoryValueError,
    enum_converter,
)
from .lookup import KeyDimension, LookupMiss, LookupResult, Record

__all__ = [
    # Categories
    "CONVERTERS",
    "CropType",
    "Province",
    "SoilFunctionalCategory",
    "TillageType",
    "UnknownCategoryValueError",
    "enum_converter",
    # Lookup values
    "KeyDimension",
    "LookupMiss",
    "LookupResult",
    "Record",
]
