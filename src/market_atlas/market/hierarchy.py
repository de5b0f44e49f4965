"""
Static category trees for the product and sales-channel taxonomies.

Nodes carry a structured ``path`` (tuple of names from the root). The flat
"Parent - Child" strings stored on records are only produced by ``label``,
so membership checks never rely on splitting or prefix-matching strings.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Union

LABEL_SEPARATOR = " - "

# Catalog source: a leaf is a plain name, a branch is (name, children)
CatalogEntry = Union[str, tuple[str, tuple[Any, ...]]]


@dataclass(frozen=True)
class HierarchyNode:
    """A node in a category tree."""

    name: str
    path: tuple[str, ...]
    children: tuple[HierarchyNode, ...] = ()

    @property
    def label(self) -> str:
        """Flat display value, e.g. "Skin Care - Serums"."""
        return LABEL_SEPARATOR.join(self.path)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def leaves(self) -> list[HierarchyNode]:
        """All descendant leaves, in catalog order (the node itself if it is a leaf)."""
        if self.is_leaf:
            return [self]
        found: list[HierarchyNode] = []
        for child in self.children:
            found.extend(child.leaves())
        return found

    def to_catalog_dict(self) -> dict[str, Any]:
        """Render a root node in the mainCategory/subCategories shape used by filter UIs."""
        return {
            "mainCategory": self.name,
            "subCategories": [_sub_to_dict(child) for child in self.children],
        }


def _sub_to_dict(node: HierarchyNode) -> str | dict[str, Any]:
    if node.is_leaf:
        return node.name
    return {"name": node.name, "children": [_sub_to_dict(c) for c in node.children]}


PRODUCT_CATALOG: tuple[CatalogEntry, ...] = (
    (
        "Skin Care",
        (
            "Serums",
            "Moisturizers & Creams",
            "Face Oils (Abhyanga / Ayurvedic oils)",
            "Face Wash & Cleansers",
            "Toners / Mists",
            "Sunscreen",
        ),
    ),
    (
        "Hair Care",
        (
            "Oils & Serums",
            "Shampoos",
            "Conditioners & Hair Masks",
            "Hair Growth & Scalp Treatments",
        ),
    ),
    (
        "Body Care",
        (
            "Body Oils (Ayurvedic Abhyangsnan, Massage Oils)",
            "Lotions & Butters",
            "Body Wash / Scrubs",
        ),
    ),
    (
        "Cosmetic & Beauty Enhancers",
        (
            "Makeup (base, eyes, lips)",
            "Nail & Hand Care",
        ),
    ),
    (
        "Cosmetology Kits",
        (
            "Facial Kits (Anti-Aging, Hydration, Acne)",
            "Hair Treatment Kits",
            "Seasonal Wellness Kits (Festive, Bridal, Ritual-based)",
            "Travel + Daily Routine Kits",
        ),
    ),
)

SALES_CHANNEL_CATALOG: tuple[CatalogEntry, ...] = (
    (
        "D2C & Digital Platforms",
        (
            "E-commerce Marketplaces (Amazon, Flipkart, etc.)",
            "Brand D2C Websites & Apps",
            "Quick Commerce Platforms",
            "Social / Influencer-led Commerce",
        ),
    ),
    (
        "Offline Retail",
        (
            "Supermarkets / Hypermarkets",
            "Beauty & Cosmetic Specialty Stores",
            "Pharmacies / Drugstores",
            "Neighbourhood / Convenience Stores",
            (
                "Professional & Institutional",
                (
                    "Salons & Spa Chains",
                    "Aesthetic / Dermatology Clinics",
                ),
            ),
        ),
    ),
    (
        "Others",
        ("Direct Selling, MLM Networks, etc.",),
    ),
)


def _build_node(entry: CatalogEntry, parent_path: tuple[str, ...]) -> HierarchyNode:
    if isinstance(entry, str):
        return HierarchyNode(name=entry, path=(*parent_path, entry))
    name, children = entry
    path = (*parent_path, name)
    return HierarchyNode(
        name=name,
        path=path,
        children=tuple(_build_node(child, path) for child in children),
    )


def build_hierarchy(catalog: Iterable[CatalogEntry]) -> tuple[HierarchyNode, ...]:
    """Build root nodes from a nested catalog definition."""
    return tuple(_build_node(entry, ()) for entry in catalog)


_PRODUCT_HIERARCHY = build_hierarchy(PRODUCT_CATALOG)
_SALES_CHANNEL_HIERARCHY = build_hierarchy(SALES_CHANNEL_CATALOG)


def get_product_hierarchy() -> tuple[HierarchyNode, ...]:
    """Two-level product taxonomy (main category -> sub categories)."""
    return _PRODUCT_HIERARCHY


def get_sales_channel_hierarchy() -> tuple[HierarchyNode, ...]:
    """Up to three-level sales-channel taxonomy."""
    return _SALES_CHANNEL_HIERARCHY


# Record fields whose values are encoded from a taxonomy
HIERARCHICAL_FIELDS: dict[str, tuple[HierarchyNode, ...]] = {
    "product_type": _PRODUCT_HIERARCHY,
    "sales_channel": _SALES_CHANNEL_HIERARCHY,
}


def hierarchy_for_field(field: str) -> tuple[HierarchyNode, ...] | None:
    return HIERARCHICAL_FIELDS.get(field)


def iter_nodes(hierarchy: Iterable[HierarchyNode]) -> Iterator[HierarchyNode]:
    """Depth-first, pre-order walk over every node."""
    for node in hierarchy:
        yield node
        yield from iter_nodes(node.children)


def node_index(hierarchy: Iterable[HierarchyNode]) -> dict[str, HierarchyNode]:
    """Flat label -> node lookup."""
    return {node.label: node for node in iter_nodes(hierarchy)}


def find_node(label: str, hierarchy: Iterable[HierarchyNode]) -> HierarchyNode | None:
    return node_index(hierarchy).get(label)


def top_level_labels(hierarchy: Iterable[HierarchyNode]) -> list[str]:
    return [node.label for node in hierarchy]


def is_parent(label: str, hierarchy: Iterable[HierarchyNode]) -> bool:
    node = find_node(label, hierarchy)
    return node is not None and not node.is_leaf


def flat_labels(hierarchy: Iterable[HierarchyNode]) -> list[str]:
    """
    Values as they appear on generated records: each main category followed
    by its leaves ("Parent", "Parent - Child", ...). Intermediate branch
    nodes are not record values.
    """
    labels: list[str] = []
    for root in hierarchy:
        labels.append(root.label)
        labels.extend(leaf.label for leaf in root.leaves() if leaf is not root)
    return labels


def walk_selected(
    hierarchy: Iterable[HierarchyNode],
    is_selected: Callable[[HierarchyNode], bool],
    collect: Callable[[HierarchyNode], None],
) -> None:
    """
    Visit the tree; every selected node hands all of its leaves to ``collect``.
    Unselected nodes are recursed into so deeper selections are still found.
    """
    for node in hierarchy:
        if is_selected(node):
            for leaf in node.leaves():
                collect(leaf)
        else:
            walk_selected(node.children, is_selected, collect)


def expand_selection(
    selected: Iterable[str], hierarchy: Iterable[HierarchyNode]
) -> set[str]:
    """
    Expand selected labels into leaf labels.

    Selected branch nodes contribute all descendant leaves; selected leaves
    and values unknown to the catalog are kept verbatim. Branch labels
    themselves are never part of the result.
    """
    hierarchy = tuple(hierarchy)
    selected_set = set(selected)
    expanded: set[str] = set()

    walk_selected(
        hierarchy,
        lambda node: node.label in selected_set,
        lambda leaf: expanded.add(leaf.label),
    )

    index = node_index(hierarchy)
    expanded.update(
        value
        for value in selected_set
        if value not in index or index[value].is_leaf
    )
    return expanded


def segment_members(
    selected: Iterable[str], hierarchy: Iterable[HierarchyNode]
) -> dict[str, set[str]]:
    """
    Map display entities to the record values they aggregate.

    - no selection: one entity per main category, aggregating its own
      records and every label beneath it
    - a selected branch: one entity per leaf beneath it
    - a selected leaf (or unknown value): itself
    """
    hierarchy = tuple(hierarchy)
    selected_list = [s for s in selected if s]
    members: dict[str, set[str]] = {}

    if not selected_list:
        for label in top_level_labels(hierarchy):
            root = find_node(label, hierarchy)
            members[label] = {node.label for node in iter_nodes([root])}
        return members

    for value in selected_list:
        if is_parent(value, hierarchy):
            for leaf in find_node(value, hierarchy).leaves():
                members.setdefault(leaf.label, {leaf.label})
        else:
            members.setdefault(value, {value})
    return members


def leaf_labels(node: HierarchyNode) -> list[str]:
    return [leaf.label for leaf in node.leaves()]
