"""
Drill-down selection shared by the three views.

`SelectionStore` owns the one mutable piece of state in the dashboard: which
node is selected and how the views should present it. Views subscribe to it
and recompute when notified; only the explicit transitions below write to it.
"""
import dataclasses
import logging
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional

from naics_ghg.hierarchy import Branch, Node, find_node
from naics_ghg.layout import IDENTITY, PackLayout, Viewport, ZoomTransform, zoom_to
from naics_ghg.records import NAICS_COL, column_for_depth, label_for

EMISSION_KINDS = ("total", "base", "margin")


@dataclass(frozen=True)
class Selection:
    naics: str = ""
    depth: int = 0
    label: str = label_for(None, "")
    terminal_node: bool = False
    column: Optional[str] = None
    pie_radius: float = 0.0
    selected_emissions: str = "total"
    selected_gas: Optional[str] = None

    @property
    def is_root(self) -> bool:
        return self.depth == 0


DEFAULT_SELECTION = Selection()

Listener = Callable[[Selection], None]


class SelectionStore:

    def __init__(self, labels: Optional[Mapping[str, str]] = None,
                 viewport: Viewport = Viewport(720, 720)):
        self._labels = labels or {}
        self._viewport = viewport
        self._root: Optional[Branch] = None
        self._layout: Optional[PackLayout] = None
        self._node: Optional[Node] = None
        self._current = DEFAULT_SELECTION
        self._listeners: List[Listener] = []

    # -- reading -----------------------------------------------------------

    def current(self) -> Selection:
        return self._current

    @property
    def node(self) -> Optional[Node]:
        return self._node

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def zoom(self) -> ZoomTransform:
        """Transform centering the selected node (the root when nothing is selected)."""
        node = self._node or self._root
        if node is None or self._layout is None:
            return IDENTITY
        circle = self._layout.circle_for(node)
        if circle is None:
            return IDENTITY
        return zoom_to(circle, self._viewport, has_code=node.code is not None)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    # -- wiring ------------------------------------------------------------

    def set_labels(self, labels: Optional[Mapping[str, str]]) -> None:
        self._labels = labels or {}
        if self._node is not None and self._current.depth > 0:
            self._commit(dataclasses.replace(self._current, label=label_for(self._labels, self._current.naics)))

    def bind_tree(self, root: Branch, layout: Optional[PackLayout] = None) -> None:
        """Attach a freshly built tree, carrying the selection over by code and depth."""
        self._root = root
        self._layout = layout
        previous = self._current
        node = find_node(root, previous.naics, previous.depth)
        if node is None or node is root:
            if previous.depth > 0:
                logging.info("selection %s no longer in tree, resetting", previous.naics)
            self._node = root
            self._commit(dataclasses.replace(
                DEFAULT_SELECTION, selected_emissions=previous.selected_emissions,
                selected_gas=previous.selected_gas))
        else:
            self._select(node)

    def set_viewport(self, viewport: Viewport) -> None:
        self._viewport = viewport
        if self._node is not None and self._current.terminal_node:
            self._commit(dataclasses.replace(self._current, pie_radius=self._pie_radius(self._node)))
        else:
            self._notify()

    # -- transitions -------------------------------------------------------

    def select_node(self, node: Node) -> None:
        if self._root is None or node.tree_root() is not self._root:
            logging.debug("select_node: ignoring node %s outside the current tree", node.key)
            return
        self._select(node)

    def go_to_parent(self) -> None:
        node = self._node
        if node is None or node.parent is None:
            return
        parent = node.parent
        if parent.parent is None:
            self._node = parent
            self._commit(dataclasses.replace(
                DEFAULT_SELECTION, selected_emissions=self._current.selected_emissions,
                selected_gas=self._current.selected_gas))
            return
        self._node = parent
        self._commit(dataclasses.replace(
            self._current,
            naics=parent.code,
            depth=parent.depth,
            label=label_for(self._labels, parent.code),
            terminal_node=False,
            column=column_for_depth(parent.depth),
            pie_radius=0.0,
        ))

    def reset(self) -> None:
        self._node = self._root
        self._commit(Selection(selected_emissions=self._current.selected_emissions))

    def set_emissions_kind(self, kind: str) -> None:
        if kind not in EMISSION_KINDS:
            raise ValueError(f"unknown emissions kind {kind!r}, expected one of {EMISSION_KINDS}")
        self._commit(dataclasses.replace(self._current, selected_emissions=kind))

    def set_selected_gas(self, gas: Optional[str]) -> None:
        self._commit(dataclasses.replace(self._current, selected_gas=gas))

    # -- internals ---------------------------------------------------------

    def _pie_radius(self, node: Node) -> float:
        if self._layout is None:
            return 0.0
        circle = self._layout.circle_for(node)
        if circle is None:
            return 0.0
        return circle.r * zoom_to(circle, self._viewport, has_code=node.code is not None).scale

    def _select(self, node: Node) -> None:
        self._node = node
        if node.code is None:
            self._commit(dataclasses.replace(
                DEFAULT_SELECTION, selected_emissions=self._current.selected_emissions,
                selected_gas=self._current.selected_gas))
            return
        terminal = not node.children
        column = NAICS_COL if terminal else column_for_depth(node.depth)
        self._commit(dataclasses.replace(
            self._current,
            naics=node.code,
            depth=node.depth,
            label=label_for(self._labels, node.code),
            terminal_node=terminal,
            column=column,
            # the pie is only drawn for leaves
            pie_radius=self._pie_radius(node) if terminal else 0.0,
        ))

    def _commit(self, selection: Selection) -> None:
        self._current = selection
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._current)
