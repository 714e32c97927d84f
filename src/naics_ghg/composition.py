# per-gas breakdown of a selected leaf, for the pie chart
from dataclasses import dataclass
from typing import List, Optional

import pandas as pd

from naics_ghg.config import ONE_DEGREE_SHARE
from naics_ghg.gases import OTHER_GASES, gwp
from naics_ghg.records import BASE_COL, GHG_COL, MARGINS_COL, TOTAL_COL
from naics_ghg.selection import Selection

# selection emissions kind -> record column
KIND_COLUMNS = {"total": TOTAL_COL, "base": BASE_COL, "margin": MARGINS_COL}


@dataclass(frozen=True)
class GasAmount:
    gas: str
    amount: float


def compose_by_gas(records: Optional[pd.DataFrame], selection: Selection, co2e: bool = False,
                   min_share: float = ONE_DEGREE_SHARE) -> List[GasAmount]:
    """
    Sum the selected emissions kind per gas for the selected leaf.

    By-gas amounts are converted with each gas's GWP unless the records are
    already CO2 equivalents (`co2e=True`). Gases whose share of the pie is
    below `min_share` are merged into a trailing "Other gases" row. Returns an
    empty list for the root, for branches, and when nothing matches.
    """
    if records is None or records.empty:
        return []
    if not selection.terminal_node or selection.depth <= 0 or not selection.column:
        return []

    matched = records[records[selection.column] == selection.naics]
    if matched.empty:
        return []

    values = matched[KIND_COLUMNS[selection.selected_emissions]]
    if not co2e:
        values = values * matched[GHG_COL].map(gwp)
    by_gas = values.groupby(matched[GHG_COL], sort=True).sum()
    by_gas = by_gas.sort_values(ascending=False, kind="stable")

    total = by_gas.sum()
    if total <= 0:
        return []

    shares = by_gas / total
    kept = by_gas[shares >= min_share]
    tail = by_gas[shares < min_share]

    out = [GasAmount(str(gas), float(amount)) for gas, amount in kept.items()]
    if not tail.empty:
        out.append(GasAmount(OTHER_GASES, float(tail.sum())))
    return out
