"""
Base vs. margin emissions at the selected hierarchy level.

Down to industry groups the bars compare the children of the selected node.
From industries down, where the children are too few to be interesting, the
bars break the selected code down by gas instead, keeping the top gases and
folding the rest into one "Other gases" bar.
"""
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

import pandas as pd

from naics_ghg.gases import OTHER_GASES
from naics_ghg.records import BASE_COL, GHG_COL, HIERARCHY_COLUMNS, MARGINS_COL, label_for
from naics_ghg.selection import Selection

# deepest selection depth still compared by child node
LAST_CHILD_LEVEL = 3
DEFAULT_TOP_GASES = 4


@dataclass(frozen=True)
class LevelRow:
    key: str
    label: str
    base: float
    margin: float

    @property
    def combined(self) -> float:
        return self.base + self.margin


def _sums(frame: pd.DataFrame, by: str) -> pd.DataFrame:
    sums = frame.groupby(by, sort=True)[[BASE_COL, MARGINS_COL]].sum()
    sums["_combined"] = sums[BASE_COL] + sums[MARGINS_COL]
    return sums.sort_values("_combined", ascending=False, kind="stable")


def compare_at_level(records: Optional[pd.DataFrame], selection: Selection,
                     labels: Optional[Mapping[str, str]] = None,
                     top_gases: int = DEFAULT_TOP_GASES) -> List[LevelRow]:
    if records is None or records.empty:
        return []

    if selection.depth <= LAST_CHILD_LEVEL:
        frame = records
        if selection.depth > 0:
            frame = records[records[selection.column] == selection.naics]
        if frame.empty:
            return []
        sums = _sums(frame, HIERARCHY_COLUMNS[selection.depth])
        return [
            LevelRow(str(code), label_for(labels, str(code)), float(row[BASE_COL]), float(row[MARGINS_COL]))
            for code, row in sums.iterrows()
        ]

    frame = records[records[selection.column] == selection.naics]
    if frame.empty:
        return []
    sums = _sums(frame, GHG_COL)
    head, tail = sums.iloc[:top_gases], sums.iloc[top_gases:]
    rows = [
        LevelRow(str(gas), str(gas), float(row[BASE_COL]), float(row[MARGINS_COL]))
        for gas, row in head.iterrows()
    ]
    if not tail.empty:
        rows.append(LevelRow(OTHER_GASES, OTHER_GASES, float(tail[BASE_COL].sum()), float(tail[MARGINS_COL].sum())))
    return rows


def stack_keys(kind: str) -> Tuple[str, ...]:
    """Stack order for an emissions kind; margin sits before base when both are shown."""
    if kind == "total":
        return ("margin", "base")
    if kind in ("base", "margin"):
        return (kind,)
    raise ValueError(f"unknown emissions kind {kind!r}")


def stack_series(rows: List[LevelRow], kind: str) -> Dict[str, List[Tuple[float, float]]]:
    """Per stack key, the [start, end) extent of each row's segment."""
    keys = stack_keys(kind)
    series: Dict[str, List[Tuple[float, float]]] = {key: [] for key in keys}
    for row in rows:
        offset = 0.0
        for key in keys:
            value = row.base if key == "base" else row.margin
            series[key].append((offset, offset + value))
            offset += value
    return series
