"""Shared fixtures: small synthetic emission-factor tables in the source CSV layout."""

from __future__ import annotations

import pandas as pd
import pytest

from naics_ghg.config import Settings
from naics_ghg.records import parse_emissions, parse_labels

EMISSIONS_COLUMNS = Settings().emissions_columns
LABEL_COLUMNS = Settings().label_columns

# (naics, title, ghg, base, margins)
BY_GAS_ROWS = [
    ("111110", "Soybean Farming", "Carbon dioxide", "0.600", "0.100"),
    ("111110", "Soybean Farming", "Methane", "0.010", "0.002"),
    ("111110", "Soybean Farming", "Nitrous oxide", "0.004", "0.001"),
    ("111120", "Oilseed (except Soybean) Farming", "Carbon dioxide", "0.500", "0.050"),
    ("111120", "Oilseed (except Soybean) Farming", "Methane", "0.020", "0.000"),
    ("112111", "Beef Cattle Ranching and Farming", "Carbon dioxide", "0.300", "0.040"),
    ("112111", "Beef Cattle Ranching and Farming", "Methane", "0.050", "0.010"),
    ("212111", "Bituminous Coal Mining", "Carbon dioxide", "1,200.000", "30.000"),
    ("212111", "Bituminous Coal Mining", "Methane", "2.000", "0.500"),
    ("311111", "Dog and Cat Food Manufacturing", "Carbon dioxide", "0.400", "0.200"),
]

# (naics, title, base, margins) already in CO2e
CO2E_ROWS = [
    ("111110", "Soybean Farming", "0.914", "0.191"),
    ("111120", "Oilseed (except Soybean) Farming", "1.060", "0.050"),
    ("111199", "All Other Grain Farming", "0.700", "0.060"),
    ("112111", "Beef Cattle Ranching and Farming", "1.700", "0.320"),
    ("212111", "Bituminous Coal Mining", "1256.000", "44.000"),
    ("311111", "Dog and Cat Food Manufacturing", "0.400", "0.200"),
    ("311119", "Other Animal Food Manufacturing", "0.350", "0.150"),
]

LABEL_ROWS = [
    ("11", "Agriculture, Forestry, Fishing and HuntingT"),
    ("111", "Crop ProductionT"),
    ("1111", "Oilseed and Grain FarmingT"),
    ("11111", "Soybean FarmingT"),
    ("111110", "Soybean FarmingT"),
    ("111120", "Oilseed (except Soybean) FarmingT"),
    ("21", "Mining, Quarrying, and Oil and Gas ExtractionT"),
    ("31-33", "ManufacturingT"),
    ("", ""),
]


def raw_emissions(rows, unit="kg/2022 USD, purchaser price") -> pd.DataFrame:
    """Build a raw table the way pandas reads the source CSV (all strings)."""
    c = EMISSIONS_COLUMNS
    out = []
    for naics, title, ghg, base, margins in rows:
        total = float(base.replace(",", "")) + float(margins.replace(",", ""))
        out.append({
            c["naics"]: naics,
            c["title"]: title,
            c["ghg"]: ghg,
            c["unit"]: unit,
            c["base"]: base,
            c["margins"]: margins,
            c["total"]: f"{total:.6f}",
            c["useeio"]: "1111A0",
        })
    return pd.DataFrame(out)


def make_records(rows) -> pd.DataFrame:
    return parse_emissions(raw_emissions(rows), EMISSIONS_COLUMNS)


def gas_rows(naics: str, amounts) -> list:
    """One by-gas row per (gas, base, margins) for a single code."""
    return [(naics, "Test Industry", gas, f"{base}", f"{margins}") for gas, base, margins in amounts]


@pytest.fixture
def by_gas_records() -> pd.DataFrame:
    return make_records(BY_GAS_ROWS)


@pytest.fixture
def co2e_records() -> pd.DataFrame:
    return make_records([(n, t, "All GHGs", b, m) for n, t, b, m in CO2E_ROWS])


@pytest.fixture
def labels() -> dict:
    raw = pd.DataFrame(LABEL_ROWS, columns=[LABEL_COLUMNS["naics"], LABEL_COLUMNS["title"]])
    return parse_labels(raw, LABEL_COLUMNS)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(data_dir=tmp_path, viewport_width=600, viewport_height=400, transition_ms=300)


class FakeTimer:
    """Stands in for threading.Timer; fires only when the test says so."""

    created: list = []

    def __init__(self, delay, fn):
        self.delay = delay
        self.fn = fn
        self.cancelled = False
        self.started = False
        self.daemon = False
        FakeTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.fn()


@pytest.fixture
def fake_timer():
    FakeTimer.created = []
    yield FakeTimer
    FakeTimer.created = []
