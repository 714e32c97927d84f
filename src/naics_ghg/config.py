"""
Dashboard settings.

Values come from environment variables prefixed with ``NAICS_GHG_`` or from a
local ``.env`` file, e.g. ``NAICS_GHG_DATA_DIR=/srv/data``.
"""

from functools import lru_cache
from pathlib import Path
from typing import Dict

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# one angular degree of a full pie
ONE_DEGREE_SHARE = 0.0174533 / (2 * 3.141592653589793)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="NAICS_GHG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Data files
    data_dir: Path = Field(default=Path("data"), description="Directory holding the CSV tables")
    all_emissions_file: str = Field(
        default="SupplyChainGHGEmissionFactors_v1.3.0_NAICS_byGHG_USD2022.csv",
        description="Emission factors broken down by gas",
    )
    equiv_emissions_file: str = Field(
        default="SupplyChainGHGEmissionFactors_v1.3.0_NAICS_CO2e_USD2022.csv",
        description="Emission factors in CO2 equivalents",
    )
    labels_file: str = Field(default="2-6 digit_2017_Codes.csv", description="NAICS code to title table")

    # Source column names
    emissions_columns: Dict[str, str] = Field(
        default_factory=lambda: {
            "naics": "2017 NAICS Code",
            "title": "2017 NAICS Title",
            "ghg": "GHG",
            "unit": "Unit",
            "base": "Supply Chain Emission Factors without Margins",
            "margins": "Margins of Supply Chain Emission Factors",
            "total": "Supply Chain Emission Factors with Margins",
            "useeio": "Reference USEEIO Code",
        },
        description="Canonical field -> emissions CSV column",
    )
    label_columns: Dict[str, str] = Field(
        default_factory=lambda: {
            "naics": "2017 NAICS US Code",
            "title": "2017 NAICS US Title",
        },
        description="Canonical field -> label CSV column",
    )

    # Long-tail cutoffs
    min_gas_share: float = Field(
        default=ONE_DEGREE_SHARE,
        description="Gases below this share of the pie are merged into 'Other gases'",
    )
    top_gases: int = Field(default=4, description="Gases itemized in the level comparison before 'Other gases'")
    apply_gwp: bool = Field(
        default=True,
        description="Multiply by-gas amounts by each gas's GWP in the composition view",
    )

    # Presentation
    viewport_width: int = Field(default=720, description="Hierarchy chart width in pixels")
    viewport_height: int = Field(default=720, description="Hierarchy chart height in pixels")
    resize_debounce_ms: int = Field(default=100, description="Quiescence window before a resize is applied")
    transition_ms: int = Field(default=350, description="Nominal pan/zoom transition duration")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    def data_path(self, filename: str) -> Path:
        return self.data_dir / filename


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
