"""
Dashboard controller.

Holds the loaded datasets, the hierarchy built from them and the selection
store, and keeps the derived view data in step with the store. Derived views
are recomputed from scratch on every notification; nothing is patched in
place, so a reader always sees a complete set of views.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

import pandas as pd

from naics_ghg.charts import (Bubble, BarSegment, PieSlice, bar_primitives, bubble_primitives,
                              pie_primitives)
from naics_ghg.comparison import LAST_CHILD_LEVEL, LevelRow, compare_at_level
from naics_ghg.composition import GasAmount, compose_by_gas
from naics_ghg.config import Settings, get_settings
from naics_ghg.hierarchy import Branch, Node, build_hierarchy, walk
from naics_ghg.layout import PackLayout, Viewport, pack_hierarchy
from naics_ghg.records import GHG_COL, load_emissions, load_labels
from naics_ghg.scheduling import Debouncer, TransitionTimeline
from naics_ghg.selection import Selection, SelectionStore


@dataclass
class Datasets:
    all_emissions: Optional[pd.DataFrame] = None
    equiv_emissions: Optional[pd.DataFrame] = None
    labels: Optional[Dict[str, str]] = None

    def loaded(self) -> Dict[str, bool]:
        return {
            "all_emissions": self.all_emissions is not None,
            "equiv_emissions": self.equiv_emissions is not None,
            "labels": self.labels is not None,
        }


def load_datasets(settings: Optional[Settings] = None) -> Datasets:
    """Load the three tables independently; a failed table stays None."""
    settings = settings or get_settings()
    return Datasets(
        all_emissions=load_emissions(settings.data_path(settings.all_emissions_file), settings.emissions_columns),
        equiv_emissions=load_emissions(settings.data_path(settings.equiv_emissions_file), settings.emissions_columns),
        labels=load_labels(settings.data_path(settings.labels_file), settings.label_columns),
    )


@dataclass
class Views:
    """Everything the three charts draw for one (records, selection, viewport) state."""
    selection: Selection
    bubbles: List[Bubble] = field(default_factory=list)
    gas_amounts: List[GasAmount] = field(default_factory=list)
    slices: List[PieSlice] = field(default_factory=list)
    level_rows: List[LevelRow] = field(default_factory=list)
    segments: List[BarSegment] = field(default_factory=list)


class Dashboard:

    def __init__(self, datasets: Datasets, settings: Optional[Settings] = None,
                 timer_factory: Optional[Callable] = None):
        self.settings = settings or get_settings()
        self.datasets = datasets
        self.store = SelectionStore(
            labels=datasets.labels,
            viewport=Viewport(self.settings.viewport_width, self.settings.viewport_height),
        )
        self.timeline = TransitionTimeline(self.settings.transition_ms)
        debounce_kwargs = {"timer_factory": timer_factory} if timer_factory else {}
        self._resize = Debouncer(self._apply_resize, self.settings.resize_debounce_ms, **debounce_kwargs)
        self.root: Branch = Branch(code=None, depth=0)
        self.layout: PackLayout = PackLayout({})
        self.views = Views(selection=self.store.current())
        self._nodes: Dict[str, Node] = {}
        self._unsubscribe = self.store.subscribe(self._on_selection)
        self.rebuild()

    # -- data --------------------------------------------------------------

    @property
    def hierarchy_records(self) -> Optional[pd.DataFrame]:
        # the CO2e table has one row per code, so its totals are comparable across codes
        return self.datasets.equiv_emissions

    def rebuild(self) -> None:
        """Rebuild tree and layout from the current datasets, then rebind the selection."""
        self.root = build_hierarchy(self.hierarchy_records)
        self.layout = pack_hierarchy(self.root)
        self._nodes = {node.key: node for node in walk(self.root)}
        logging.info("hierarchy rebuilt: %d nodes, total %.4f", len(self._nodes), self.root.value)
        self.store.set_labels(self.datasets.labels)
        self.store.bind_tree(self.root, self.layout)
        self.timeline.jump(self.store.zoom)

    def replace_datasets(self, datasets: Datasets) -> None:
        self.datasets = datasets
        self.rebuild()

    def node(self, key: str) -> Optional[Node]:
        return self._nodes.get(key)

    # -- interaction handlers ----------------------------------------------

    def click(self, key: str) -> None:
        node = self._nodes.get(key)
        if node is None:
            logging.debug("click on unknown node %s", key)
            return
        self.store.select_node(node)

    def go_to_parent(self) -> None:
        self.store.go_to_parent()

    def reset(self) -> None:
        self.store.reset()

    def set_emissions_kind(self, kind: str) -> None:
        self.store.set_emissions_kind(kind)

    def set_selected_gas(self, gas: Optional[str]) -> None:
        self.store.set_selected_gas(gas)

    def resize(self, width: float, height: float) -> None:
        self._resize.schedule(width, height)

    def poll(self) -> bool:
        """Apply a pending resize whose quiet window has passed. Call from the UI thread."""
        return self._resize.poll()

    def settle(self) -> None:
        """Apply a pending resize now instead of waiting out the quiet window."""
        self._resize.flush()

    def transition_ms(self) -> int:
        """Animation length for the next draw; 0 once the zoom has come to rest."""
        transition = self.timeline.current
        if transition is None or not self.timeline.is_running():
            return 0
        return transition.duration_ms

    def close(self) -> None:
        self._resize.cancel()
        self._unsubscribe()

    # -- derived views -----------------------------------------------------

    def _apply_resize(self, width: float, height: float) -> None:
        viewport = Viewport(width, height)
        if viewport == self.store.viewport:
            return
        self.store.set_viewport(viewport)
        self.timeline.jump(self.store.zoom)

    def _on_selection(self, selection: Selection) -> None:
        if self.timeline.view_at() != self.store.zoom:
            self.timeline.start(self.store.zoom)
        self.views = self.compute_views(selection)

    def compute_views(self, selection: Selection) -> Views:
        settings = self.settings
        gas_amounts = compose_by_gas(
            self.datasets.all_emissions, selection,
            co2e=not settings.apply_gwp, min_share=settings.min_gas_share,
        )
        # below industries the bars break a code down by gas, which needs the by-gas table
        bar_records = self.datasets.all_emissions if selection.depth > LAST_CHILD_LEVEL else self.datasets.equiv_emissions
        level_rows = compare_at_level(bar_records, selection, self.datasets.labels, top_gases=settings.top_gases)
        return Views(
            selection=selection,
            bubbles=bubble_primitives(self.root, self.layout, self.store.node, self.datasets.labels),
            gas_amounts=gas_amounts,
            slices=pie_primitives(gas_amounts),
            level_rows=level_rows,
            segments=bar_primitives(level_rows, selection.selected_emissions),
        )

    def gases(self) -> List[str]:
        """Gases present in the by-gas table, for the gas detail dropdown."""
        records = self.datasets.all_emissions
        if records is None or records.empty:
            return []
        return sorted(records[GHG_COL].unique().tolist())
