from __future__ import annotations

from dataclasses import dataclass

from ..models.categories import CropType, Province, SoilFunctionalCategory, TillageType
from ..services.catalog import TableCatalog
from ..table.composite import CompositeKeyTable

"""Fuel energy estimates provider.

Fuel energy use for field operations, in GJ ha-1, by province, functional
soil category, tillage type and crop. The bundled CSV holds illustrative
sample coefficients in the same layout as the published table.
"""

__all__ = [
    "FuelEnergyEstimatesData",
    "FuelEnergyEstimatesProvider",
    "TABLE_NAME",
]

TABLE_NAME = "fuel_energy_estimates"


@dataclass(frozen=True)
class FuelEnergyEstimatesData:
    province: Province
    soil_functional_category: SoilFunctionalCategory
    tillage_type: TillageType
    crop_type: CropType
    fuel_estimate: float  # GJ ha-1


class FuelEnergyEstimatesProvider:
    """Looks up fuel energy estimates from an explicitly owned table.

    Pass ``table`` to use an already built table, ``catalog`` to load it from
    a specific catalog; otherwise the bundled catalog is used.
    """

    def __init__(self, table: CompositeKeyTable | None = None, *, catalog: TableCatalog | None = None) -> None:
        if table is None:
            catalog = catalog if catalog is not None else TableCatalog.from_path()
            table = catalog.get(TABLE_NAME)
        self.table = table

    def get_fuel_energy_estimates_data(
        self,
        province: Province,
        soil_category: SoilFunctionalCategory,
        tillage_type: TillageType,
        crop_type: CropType,
    ) -> FuelEnergyEstimatesData | None:
        """Find the estimate for the given characteristics.

        The soil category is simplified first (Chernozem sub-categories map
        onto Brown / Dark Brown / Black). Returns None when the table has no
        such cell; the miss is logged with the parameter that was not found.
        """
        soil_lookup = soil_category.simplified()
        record = self.table.lookup(province, soil_lookup, tillage_type, crop_type)
        if record is None:
            return None
        return FuelEnergyEstimatesData(
            province=province,
            soil_functional_category=soil_lookup,
            tillage_type=tillage_type,
            crop_type=crop_type,
            fuel_estimate=record.value,
        )
