"""
Carbon accounting reference factors.

Regional factors are annual CO2 capture rates (tCO2/ha/yr), not standing
stock, drawn from the IPCC 2019 Refinement and FAO FRA 2020.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from geocarbon.domain.models import ForestType, ProjectCategory


# 1 t C = 44/12 t CO2
CARBON_TO_CO2_RATIO = 3.67


@dataclass(frozen=True)
class RegionalFactor:
    forest_type: ForestType
    name: str
    region: str
    co2_per_hectare_year: float
    source: str
    departments: Tuple[str, ...]

    @property
    def carbon_per_hectare_year(self) -> float:
        """The CO2 reference rate expressed as carbon mass (tC/ha/yr)."""
        return self.co2_per_hectare_year / CARBON_TO_CO2_RATIO


REGIONAL_FACTORS: Mapping[ForestType, RegionalFactor] = MappingProxyType({
    ForestType.AMAZONIA: RegionalFactor(
        forest_type=ForestType.AMAZONIA,
        name="Amazon tropical rainforest",
        region="Northern lowlands",
        co2_per_hectare_year=10.0,
        source="IPCC 2019 - Tropical Rainforest (Table 4.12)",
        departments=("Pando", "Beni", "La Paz"),
    ),
    ForestType.CHIQUITANIA: RegionalFactor(
        forest_type=ForestType.CHIQUITANIA,
        name="Chiquitano dry forest",
        region="Eastern lowlands",
        co2_per_hectare_year=5.5,
        source="IPCC 2019 - Tropical Dry Forest (Table 4.12)",
        departments=("Santa Cruz",),
    ),
    ForestType.YUNGAS: RegionalFactor(
        forest_type=ForestType.YUNGAS,
        name="Yungas montane forest",
        region="Inter-Andean valleys",
        co2_per_hectare_year=8.0,
        source="IPCC 2019 - Subtropical Forest (Table 4.12)",
        departments=("Cochabamba", "Tarija", "Chuquisaca"),
    ),
    ForestType.ALTIPLANO: RegionalFactor(
        forest_type=ForestType.ALTIPLANO,
        name="Semi-arid highland shrubland",
        region="Altiplano",
        co2_per_hectare_year=2.0,
        source="IPCC 2019 - Shrubland/Grassland (Table 6.2)",
        departments=("Potosí", "Oruro"),
    ),
})

DEFAULT_FOREST_TYPE = ForestType.YUNGAS

PROJECT_FACTORS: Mapping[ProjectCategory, float] = MappingProxyType({
    ProjectCategory.REDD_PLUS: 0.9,
    ProjectCategory.REFORESTATION: 1.2,
    ProjectCategory.COMMUNITY_CONSERVATION: 1.0,
    ProjectCategory.RENEWABLE_ENERGY: 0.8,
    ProjectCategory.REGENERATIVE_AGRICULTURE: 0.7,
})

DEPARTMENT_TO_FOREST_TYPE: Mapping[str, ForestType] = MappingProxyType({
    department: factor.forest_type
    for factor in REGIONAL_FACTORS.values()
    for department in factor.departments
})


def get_regional_factor(forest_type: Optional[ForestType]) -> Optional[RegionalFactor]:
    """Regional factor for a canonical forest type; None for MIXED/UNKNOWN."""
    if forest_type is None:
        return None
    return REGIONAL_FACTORS.get(forest_type)


def get_regional_factor_by_department(department: Optional[str]) -> Optional[RegionalFactor]:
    if not department:
        return None
    forest_type = DEPARTMENT_TO_FOREST_TYPE.get(department.strip())
    return REGIONAL_FACTORS[forest_type] if forest_type else None


def get_project_factor(category: ProjectCategory) -> float:
    return PROJECT_FACTORS.get(category, 1.0)
