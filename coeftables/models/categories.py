from __future__ import annotations

from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any, TypeVar

from ..errors import CoefficientTableError

"""Closed category enumerations and their string converters.

Header cells and row labels of the bundled tables are decoded through one
converter per dimension. A converter is a total function over the strings
a table may contain and raises ``UnknownCategoryValueError`` for anything else;
there is no silent default.
"""

__all__ = [
    "UnknownCategoryValueError",
    "Province",
    "SoilFunctionalCategory",
    "TillageType",
    "CropType",
    "Converter",
    "enum_converter",
    "normalize_label",
    "CONVERTERS",
    "get_converter",
]

E = TypeVar("E", bound=Enum)
Converter = Callable[[str], Any]


class UnknownCategoryValueError(CoefficientTableError, ValueError):
    """Raised when a string does not name any member of a category.

    ``dimension``, ``row`` and ``column`` are filled in by the table builder
    when the failure happens while decoding a source file.
    """

    def __init__(
        self,
        value: str,
        category: str,
        *,
        dimension: str | None = None,
        row: int | None = None,
        column: int | None = None,
    ) -> None:
        self.value = value
        self.category = category
        self.dimension = dimension
        self.row = row
        self.column = column
        where = ""
        if dimension is not None:
            where += f" dimension={dimension}"
        if row is not None:
            where += f" row={row}"
        if column is not None:
            where += f" column={column}"
        super().__init__(f"unknown {category} value {value!r}{where}")


class Province(Enum):
    ALBERTA = "Alberta"
    BRITISH_COLUMBIA = "British Columbia"
    SASKATCHEWAN = "Saskatchewan"
    MANITOBA = "Manitoba"
    ONTARIO = "Ontario"
    QUEBEC = "Quebec"
    NEW_BRUNSWICK = "New Brunswick"
    NOVA_SCOTIA = "Nova Scotia"
    PRINCE_EDWARD_ISLAND = "Prince Edward Island"
    NEWFOUNDLAND = "Newfoundland and Labrador"


class SoilFunctionalCategory(Enum):
    NOT_APPLICABLE = "Not Applicable"
    BROWN = "Brown"
    DARK_BROWN = "Dark Brown"
    BLACK = "Black"
    ORGANIC = "Organic"
    EASTERN_CANADA = "Eastern Canada"
    BROWN_CHERNOZEM = "Brown Chernozem"
    DARK_BROWN_CHERNOZEM = "Dark Brown Chernozem"
    BLACK_GRAY_CHERNOZEM = "Black Gray Chernozem"
    ALL = "All"

    def simplified(self) -> SoilFunctionalCategory:
        """Collapse the Chernozem sub-categories onto the lookup categories."""
        return _SIMPLIFIED_SOIL.get(self, self)


_SIMPLIFIED_SOIL = {
    SoilFunctionalCategory.BROWN_CHERNOZEM: SoilFunctionalCategory.BROWN,
    SoilFunctionalCategory.DARK_BROWN_CHERNOZEM: SoilFunctionalCategory.DARK_BROWN,
    SoilFunctionalCategory.BLACK_GRAY_CHERNOZEM: SoilFunctionalCategory.BLACK,
}


class TillageType(Enum):
    INTENSIVE = "Intensive"
    REDUCED = "Reduced"
    NO_TILL = "No-till"


class CropType(Enum):
    BARLEY = "Barley"
    WHEAT = "Wheat"
    DURUM = "Durum"
    OATS = "Oats"
    CANOLA = "Canola"
    FLAX = "Flax"
    LENTILS = "Lentils"
    FIELD_PEAS = "Field Peas"
    SOYBEANS = "Soybeans"
    GRAIN_CORN = "Grain Corn"
    POTATOES = "Potatoes"
    TAME_GRASS = "Tame Grass"


def normalize_label(text: str) -> str:
    """Case-fold and drop separators so 'No-till', 'NO_TILL' and 'no till' compare equal."""
    return "".join(ch for ch in text.casefold() if ch not in " _-\t")


def enum_converter(enum_cls: type[E], aliases: Mapping[str, E] | None = None) -> Callable[[str], E]:
    """Build a decode function for ``enum_cls``.

    Member names, member values and ``aliases`` keys are all accepted,
    compared through ``normalize_label``.
    """
    lookup: dict[str, E] = {}
    for member in enum_cls:
        lookup[normalize_label(member.name)] = member
        lookup[normalize_label(str(member.value))] = member
    for alias, member in (aliases or {}).items():
        lookup[normalize_label(alias)] = member

    def convert(text: str) -> E:
        member = lookup.get(normalize_label(text))
        if member is None:
            raise UnknownCategoryValueError(text, enum_cls.__name__)
        return member

    convert.__name__ = f"convert_{enum_cls.__name__}"
    return convert


CONVERTERS: dict[str, Converter] = {
    "province": enum_converter(
        Province,
        aliases={
            "AB": Province.ALBERTA,
            "BC": Province.BRITISH_COLUMBIA,
            "SK": Province.SASKATCHEWAN,
            "MB": Province.MANITOBA,
            "ON": Province.ONTARIO,
            "QC": Province.QUEBEC,
            "NB": Province.NEW_BRUNSWICK,
            "NS": Province.NOVA_SCOTIA,
            "PE": Province.PRINCE_EDWARD_ISLAND,
            "PEI": Province.PRINCE_EDWARD_ISLAND,
            "NL": Province.NEWFOUNDLAND,
            "Newfoundland": Province.NEWFOUNDLAND,
        },
    ),
    "soil_functional_category": enum_converter(SoilFunctionalCategory),
    "tillage_type": enum_converter(
        TillageType,
        aliases={"Notill": TillageType.NO_TILL, "Zero till": TillageType.NO_TILL},
    ),
    "crop_type": enum_converter(
        CropType,
        aliases={
            "Spring Wheat": CropType.WHEAT,
            "Peas": CropType.FIELD_PEAS,
            "Peas, field": CropType.FIELD_PEAS,
            "Corn": CropType.GRAIN_CORN,
            "Corn, grain": CropType.GRAIN_CORN,
        },
    ),
}


def get_converter(name: str) -> Converter:
    try:
        return CONVERTERS[name]
    except KeyError:
        raise KeyError(f"no converter registered for dimension {name!r}") from None
