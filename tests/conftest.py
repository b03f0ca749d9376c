# Shared pytest fixtures
from __future__ import annotations
import logging
import tempfile
from enum import Enum
from io import StringIO
from pathlib import Path
from types import SimpleNamespace

import pytest

from coeftables.logging.init import LabeledFormatter, setup_logging
from coeftables.models.categories import enum_converter
from coeftables.models.lookup import KeyDimension


class Region(Enum):
    EAST = "East"
    WEST = "West"
    NORTH = "North"


class Soil(Enum):
    CLAY = "Clay"
    LOAM = "Loam"


class Tillage(Enum):
    INTENSIVE = "Intensive"
    NO_TILL = "No-till"


class Crop(Enum):
    WHEAT = "Wheat"
    BARLEY = "Barley"
    CANOLA = "Canola"


REGION = KeyDimension("region", enum_converter(Region))
SOIL = KeyDimension("soil", enum_converter(Soil))
TILLAGE = KeyDimension("tillage", enum_converter(Tillage))
CROP = KeyDimension("crop", enum_converter(Crop))


@pytest.fixture()
def cats() -> SimpleNamespace:
    """Small test categories and their key dimensions."""
    return SimpleNamespace(
        Region=Region, Soil=Soil, Tillage=Tillage, Crop=Crop,
        REGION=REGION, SOIL=SOIL, TILLAGE=TILLAGE, CROP=CROP,
    )


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def scenario_rows() -> list[list[str]]:
    """Two header rows (region, soil) and one data row with a blank cell."""
    return [
        ["", "East", "West"],
        ["", "Clay", "Clay"],
        ["Wheat", "1.5", ""],
    ]


@pytest.fixture()
def region_tillage_csv() -> str:
    return (
        "Region,East,East,West,West\n"
        "Tillage,Intensive,No-till,Intensive,No-till\n"
        "Wheat,2.47,1.58,2.35,1.50\n"
        "Barley,2.39,1.53,,1.45\n"
    )


@pytest.fixture()
def sample_catalog_yaml() -> str:
    return """resource_directory: ../data
tables:
  region_tillage:
    resource: region_tillage.csv
    dimensions: [province, tillage_type]
    identifier: crop_type
"""


@pytest.fixture()
def write_catalog(temp_workdir: Path, sample_catalog_yaml: str) -> Path:
    (temp_workdir / "data" / "region_tillage.csv").write_text(
        "Province,Alberta,Alberta,Ontario\n"
        "Tillage,Intensive,No-till,Intensive\n"
        "Wheat,2.47,1.58,2.72\n"
        '"Peas, field",2.12,,2.33\n',
        encoding="utf-8",
    )
    cfg = temp_workdir / "config" / "tables.yml"
    cfg.write_text(sample_catalog_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def captured_log():
    """Capture everything written to the package logger as labeled lines."""
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(LabeledFormatter())
    # configure first: setup_logging drops handlers it did not install
    logger = setup_logging()
    previous_level = logger.level
    if logger.level > logging.INFO:
        logger.setLevel(logging.INFO)
    logger.addHandler(handler)

    def lines() -> list[str]:
        return [line for line in stream.getvalue().splitlines() if line]

    yield lines
    logger.removeHandler(handler)
    logger.setLevel(previous_level)
