"""
In-memory menu trees.

Menu items come out of the store as a flat, ordered list. They are turned
into `MenuNode` trees here and every later step (permission filtering,
module icon enrichment) works on those trees without touching the database.
All functions return new nodes and never mutate their input.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from menu_service.utils.roles import RoleTier

# /modules/<slug>/settings, optionally locale-prefixed (/tr/modules/hr/settings)
MODULE_SETTINGS_HREF = re.compile(r"/modules/[^/]+/settings/?$")


@dataclass(slots=True)
class MenuNode:
    id: int
    href: str
    label: dict[str, str] = field(default_factory=dict)
    menu_id: int | None = None
    parent_id: int | None = None
    icon: str | None = None
    target: str | None = None
    css_class: str | None = None
    description: dict[str, str] | None = None
    order: int = 0
    visible: bool = True
    module_slug: str | None = None
    menu_group: str | None = None
    required_role: str | None = None
    required_permission: str | None = None
    children: list[MenuNode] = field(default_factory=list)

    @classmethod
    def from_item(cls, item: Any) -> MenuNode:
        return cls(
            id=item.id,
            href=item.href,
            label=dict(item.label or {}),
            menu_id=item.menu_id,
            parent_id=item.parent_id,
            icon=item.icon,
            target=item.target,
            css_class=item.css_class,
            description=dict(item.description) if item.description else None,
            order=item.order or 0,
            visible=bool(item.visible),
            module_slug=item.module_slug,
            menu_group=item.menu_group,
            required_role=item.required_role,
            required_permission=item.required_permission,
        )


def build_menu_tree(items: Iterable[Any], visible_only: bool = True) -> list[MenuNode]:
    """
    Materialize flat menu item rows into root-level `MenuNode` trees.

    Roots are items without a parent. With `visible_only`, a hidden item is
    dropped together with its whole subtree. Items whose parent is not part
    of `items` are unreachable and therefore dropped as well.
    """
    nodes: dict[int, MenuNode] = {}
    children_of: dict[int | None, list[MenuNode]] = {}
    for item in items:
        if visible_only and not item.visible:
            continue
        node = MenuNode.from_item(item)
        nodes[node.id] = node
        children_of.setdefault(node.parent_id, []).append(node)

    def _attach(node: MenuNode, seen: frozenset[int]) -> MenuNode:
        kids = [
            _attach(child, seen | {child.id})
            for child in _ordered(children_of.get(node.id, []))
            if child.id not in seen
        ]
        return replace(node, children=kids)

    return [_attach(root, frozenset({root.id})) for root in _ordered(children_of.get(None, []))]


def _ordered(nodes: list[MenuNode]) -> list[MenuNode]:
    return sorted(nodes, key=lambda n: (n.order, n.id))


def is_module_settings_href(href: str | None) -> bool:
    return bool(href) and MODULE_SETTINGS_HREF.search(href) is not None


def is_item_allowed(node: MenuNode, role_name: str | None, tier: RoleTier) -> bool:
    if node.required_role and node.required_role != role_name:
        return False
    if is_module_settings_href(node.href) and not tier.is_admin:
        return False
    return True


def filter_by_permissions(nodes: Iterable[MenuNode], role_name: str | None, tier: RoleTier | None = None) -> list[MenuNode]:
    """
    Drop items the requester may not see, top-down.

    An item is dropped when its `required_role` differs from `role_name`
    (exact match) or when it is a module settings page and the requester is
    not admin tier. Children are only considered for surviving items, so a
    dropped parent takes its subtree with it.
    """
    if tier is None:
        tier = RoleTier.from_role_name(role_name)
    return [
        replace(node, children=filter_by_permissions(node.children, role_name, tier))
        for node in nodes
        if is_item_allowed(node, role_name, tier)
    ]


def is_module_root(node: MenuNode) -> bool:
    if not node.module_slug or not node.children:
        return False
    root = f"/modules/{node.module_slug}"
    return node.href.endswith(root) or node.href.endswith(f"{root}/dashboard")


def enrich_module_icons(nodes: Iterable[MenuNode], icon_map: Mapping[str, str]) -> list[MenuNode]:
    """
    Replace the icon of module root entries with the module's current icon.

    Only a module's group node (href `/modules/<slug>` or
    `/modules/<slug>/dashboard`, with at least one child) is touched; leaf
    pages that share the module slug keep their own icon.
    """
    enriched = []
    for node in nodes:
        icon = node.icon
        if is_module_root(node) and icon_map.get(node.module_slug):
            icon = icon_map[node.module_slug]
        enriched.append(replace(node, icon=icon, children=enrich_module_icons(node.children, icon_map)))
    return enriched


def count_nodes(nodes: Iterable[MenuNode]) -> int:
    return sum(1 + count_nodes(node.children) for node in nodes)
