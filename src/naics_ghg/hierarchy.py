"""
NAICS hierarchy rollup.

The tree has a synthetic root (depth 0, no code) whose children are sectors,
then subsectors, industry groups, industries and finally 6-digit codes at
depth 5. Every node's value is the summed ``total`` of the records beneath it.
After the rollup, chains of single-child nodes are collapsed so that every
visible node below the root is either a branching point or a true leaf.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple, Union

import pandas as pd

from naics_ghg.records import HIERARCHY_COLUMNS, TOTAL_COL

ROOT_KEY = "root"


class _NodeMixin:

    @property
    def key(self) -> str:
        """Identifier unique within one tree."""
        if self.code is None:
            return ROOT_KEY
        return f"{self.depth}:{self.code}"

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def ancestors(self) -> List["Branch"]:
        out = []
        node = self.parent
        while node is not None:
            out.append(node)
            node = node.parent
        return out

    def tree_root(self) -> "Branch":
        node = self
        while node.parent is not None:
            node = node.parent
        return node


@dataclass(eq=False)
class Branch(_NodeMixin):
    code: Optional[str]
    depth: int
    value: float = 0.0
    children: List["Node"] = field(default_factory=list, repr=False)
    parent: Optional["Branch"] = field(default=None, repr=False)

    is_leaf = False


@dataclass(eq=False)
class Leaf(_NodeMixin):
    code: str
    depth: int
    value: float = 0.0
    parent: Optional[Branch] = field(default=None, repr=False)

    is_leaf = True

    @property
    def children(self) -> Tuple:
        return ()


Node = Union[Branch, Leaf]


def _settle(node: Branch) -> None:
    # post-order: branch value is the sum of its children, children sorted by value
    for child in node.children:
        if not child.is_leaf:
            _settle(child)
    # input arrives in ascending key order and sort() is stable, so ties keep key order
    node.children.sort(key=lambda n: n.value, reverse=True)
    node.value = sum(child.value for child in node.children)


def rollup(records: Optional[pd.DataFrame]) -> Branch:
    """Sum ``total`` at every hierarchy level without collapsing anything."""
    root = Branch(code=None, depth=0)
    if records is None or records.empty:
        return root

    leaf_totals = records.groupby(HIERARCHY_COLUMNS, sort=True)[TOTAL_COL].sum()
    branches: Dict[Tuple[str, ...], Branch] = {(): root}
    for key, total in leaf_totals.items():
        parent = root
        for depth in range(1, len(key)):
            prefix = key[:depth]
            node = branches.get(prefix)
            if node is None:
                node = Branch(code=key[depth - 1], depth=depth, parent=parent)
                parent.children.append(node)
                branches[prefix] = node
            parent = node
        parent.children.append(Leaf(code=key[-1], depth=len(key), value=float(total), parent=parent))

    _settle(root)
    return root


def _collapse(node: Node) -> Node:
    while not node.is_leaf and len(node.children) == 1:
        node = node.children[0]
    if not node.is_leaf:
        node.children = [_collapse(child) for child in node.children]
        for child in node.children:
            child.parent = node
    return node


def collapse_single_children(root: Branch) -> Branch:
    """Replace every non-root node that has exactly one child by that child, recursively."""
    root.children = [_collapse(child) for child in root.children]
    for child in root.children:
        child.parent = root
    return root


def build_hierarchy(records: Optional[pd.DataFrame]) -> Branch:
    return collapse_single_children(rollup(records))


def walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal."""
    yield node
    for child in node.children:
        yield from walk(child)


def find_node(root: Branch, code: Optional[str], depth: int) -> Optional[Node]:
    if not code:
        return root
    for node in walk(root):
        if node.code == code and node.depth == depth:
            return node
    return None
