# static reference data for the gases reported in the by-gas emission factors
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

OTHER_GASES = "Other gases"


@dataclass(frozen=True)
class GasFacts:
    name: str
    formula: str
    gwp: float
    lifetime_years: Optional[float] = None
    common_sources: str = ""
    impacts: str = ""


# 100-year GWP values (IPCC AR5), the basis of the v1.3 CO2e factors
_FACTS: List[GasFacts] = [
    GasFacts("Carbon dioxide", "CO2", 1, None,
             "Fossil fuel combustion, cement production, land use change",
             "Baseline greenhouse gas; ocean acidification"),
    GasFacts("Methane", "CH4", 28, 12.4,
             "Natural gas systems, livestock, landfills, coal mining",
             "Short-lived climate forcer; tropospheric ozone precursor"),
    GasFacts("Nitrous oxide", "N2O", 265, 121,
             "Agricultural soil management, fertilizer, combustion",
             "Long-lived warming; stratospheric ozone depletion"),
    GasFacts("Sulfur hexafluoride", "SF6", 23500, 3200,
             "Electrical transmission equipment, magnesium production",
             "Most potent greenhouse gas assessed by the IPCC"),
    GasFacts("Nitrogen trifluoride", "NF3", 16100, 500,
             "Semiconductor and flat panel manufacturing",
             "Long-lived warming"),
    GasFacts("HFC-23", "CHF3", 12400, 222, "By-product of HCFC-22 production"),
    GasFacts("HFC-32", "CH2F2", 677, 5.2, "Refrigeration and air conditioning"),
    GasFacts("HFC-125", "CHF2CF3", 3170, 28.2, "Refrigerant blends, fire suppression"),
    GasFacts("HFC-134a", "CH2FCF3", 1300, 13.4, "Mobile air conditioning, aerosols, foams"),
    GasFacts("HFC-143a", "CH3CF3", 4800, 47.1, "Commercial refrigeration blends"),
    GasFacts("HFC-152a", "CH3CHF2", 138, 1.5, "Aerosol propellant, foam blowing"),
    GasFacts("HFC-227ea", "CF3CHFCF3", 3350, 38.9, "Fire suppression, metered dose inhalers"),
    GasFacts("HFC-236fa", "CF3CH2CF3", 8060, 242, "Fire suppression"),
    GasFacts("HFC-245fa", "CHF2CH2CF3", 858, 7.7, "Foam blowing"),
    GasFacts("HFC-365mfc", "CH3CF2CH2CF3", 804, 8.7, "Foam blowing"),
    GasFacts("HFC-43-10mee", "CF3CHFCHFCF2CF3", 1650, 16.1, "Solvent cleaning"),
    GasFacts("Perfluoromethane", "CF4", 6630, 50000, "Aluminum smelting, semiconductor manufacturing"),
    GasFacts("Perfluoroethane", "C2F6", 11100, 10000, "Aluminum smelting, semiconductor manufacturing"),
    GasFacts("Perfluoropropane", "C3F8", 8900, 2600, "Semiconductor manufacturing"),
    GasFacts("Perfluorocyclobutane", "c-C4F8", 9540, 3200, "Semiconductor manufacturing"),
    GasFacts("Perfluorohexane", "C6F14", 7910, 3100, "Solvents, electronics testing"),
]

# names the factor tables also use for the same gases
_ALIASES: Dict[str, str] = {
    "carbon tetrafluoride": "Perfluoromethane",
    "pfc-14": "Perfluoromethane",
    "hexafluoroethane": "Perfluoroethane",
    "pfc-116": "Perfluoroethane",
    "pfc-218": "Perfluoropropane",
    "pfc-318": "Perfluorocyclobutane",
    "pfc-51-14": "Perfluorohexane",
}

GAS_FACTS: Dict[str, GasFacts] = {g.name.lower(): g for g in _FACTS}
_BY_FORMULA: Dict[str, GasFacts] = {g.formula.lower(): g for g in _FACTS}

_warned: set = set()


def lookup(gas: str) -> Optional[GasFacts]:
    """Find the facts for a gas by name, alias or formula (case-insensitive)."""
    key = str(gas).strip().lower()
    if key in GAS_FACTS:
        return GAS_FACTS[key]
    if key in _ALIASES:
        return GAS_FACTS[_ALIASES[key].lower()]
    if key in _BY_FORMULA:
        return _BY_FORMULA[key]
    # "Perfluoromethane (PFC-14)" style names
    if "(" in key:
        head, _, tail = key.partition("(")
        return lookup(head) or lookup(tail.rstrip(")"))
    return None


def gwp(gas: str) -> float:
    facts = lookup(gas)
    if facts is None:
        if gas not in _warned:
            _warned.add(gas)
            logging.warning("gwp: no GWP for gas %r, using 1", gas)
        return 1.0
    return float(facts.gwp)


def fact_rows(gas: str) -> List[Tuple[str, str]]:
    """Label/value pairs for the gas detail panel; empty for unknown gases."""
    facts = lookup(gas)
    if facts is None:
        return []
    lifetime = f"{facts.lifetime_years:g} years" if facts.lifetime_years else "Variable (carbon cycle)"
    rows = [
        ("Formula", facts.formula),
        ("Global Warming Potential (100-yr)", f"{facts.gwp:,g}"),
        ("Lifetime in atmosphere", lifetime),
    ]
    if facts.common_sources:
        rows.append(("Common sources", facts.common_sources))
    if facts.impacts:
        rows.append(("Impacts", facts.impacts))
    return rows
