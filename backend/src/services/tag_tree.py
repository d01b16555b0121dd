"""Hierarchical tag tree derived from an index snapshot."""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple

from ..models.tags import (
    FileTagRecord,
    SortKey,
    SortOrder,
    TagCompletion,
    TagLocation,
    TagNode,
)
from .tag_parser import split_tag

TagPath = Tuple[str, ...]


def build_tag_tree(
    snapshot: Mapping[str, FileTagRecord],
    sort_key: SortKey = SortKey.NAME,
    sort_order: SortOrder = SortOrder.ASC,
) -> TagNode:
    """
    Build the sorted tag hierarchy for ``snapshot``.

    Every occurrence of ``a/b/c`` visits the nodes ``a``, ``a/b`` and
    ``a/b/c``; only the terminal node receives the location. ``file_count``
    counts distinct files at or below a node, ``tag_count`` distinct full tag
    paths at or below it. The result depends only on the arguments.
    """
    root = TagNode()
    nodes: Dict[TagPath, TagNode] = {(): root}
    files: Dict[TagPath, Set[str]] = {(): set()}
    paths: Dict[TagPath, Set[TagPath]] = {(): set()}

    for file_path in sorted(snapshot):
        for occurrence in snapshot[file_path].occurrences:
            full_path = tuple(occurrence.path)
            node = root
            for depth in range(len(full_path) + 1):
                prefix = full_path[:depth]
                if prefix not in nodes:
                    node = TagNode(name=prefix[-1], parent_path=list(prefix[:-1]))
                    nodes[prefix[:-1]].children[node.name] = node
                    nodes[prefix] = node
                    files[prefix] = set()
                    paths[prefix] = set()
                node = nodes[prefix]
                files[prefix].add(file_path)
                paths[prefix].add(full_path)
            node.locations.append(TagLocation(file_path=file_path, range=occurrence.range))

    for prefix, node in nodes.items():
        node.file_count = len(files[prefix])
        node.tag_count = len(paths[prefix])

    _sort_children(root, SortKey(sort_key), SortOrder(sort_order))
    return root


def _sort_children(node: TagNode, sort_key: SortKey, sort_order: SortOrder) -> None:
    descending = sort_order is SortOrder.DESC
    children = list(node.children.values())

    if sort_key is SortKey.NAME:
        children.sort(key=lambda child: child.name, reverse=descending)
    else:
        def count(child: TagNode) -> int:
            if sort_key is SortKey.COUNT_FILES:
                return child.file_count
            return child.tag_count

        # Ties always fall back to ascending name.
        children.sort(key=lambda child: (-count(child) if descending else count(child), child.name))

    node.children = {child.name: child for child in children}
    for child in children:
        _sort_children(child, sort_key, sort_order)


def find_node(root: TagNode, path: Sequence[str]) -> Optional[TagNode]:
    """Follow ``path`` from ``root``; ``None`` when any segment is missing."""
    node = root
    for segment in path:
        child = node.children.get(segment)
        if child is None:
            return None
        node = child
    return node


def complete_tag(root: TagNode, prefix: str) -> List[TagCompletion]:
    """
    Return next-segment candidates for a partially typed tag.

    ``prefix`` may start with ``#``. Everything up to the last ``/`` must
    name an existing node; all of that node's children are returned in tree
    order and the segment being typed is left for the caller to filter.
    """
    text = (prefix or "").strip()
    if text.startswith("#"):
        text = text[1:]
    parent_text, _, _ = text.rpartition("/")
    node = find_node(root, split_tag(parent_text))
    if node is None:
        return []
    return [
        TagCompletion(
            name=child.name,
            full_path=child.full_path,
            file_count=child.file_count,
            tag_count=child.tag_count,
        )
        for child in node.children.values()
    ]


def find_references(
    root: TagNode, path: Sequence[str], include_descendants: bool = False
) -> List[TagLocation]:
    """Return the locations of ``path`` (and optionally of tags beneath it)."""
    node = find_node(root, path)
    if node is None or not path:
        return []
    if not include_descendants:
        return list(node.locations)

    locations: List[TagLocation] = []
    stack = [node]
    while stack:
        current = stack.pop()
        locations.extend(current.locations)
        stack.extend(reversed(list(current.children.values())))
    return locations


__all__ = ["build_tag_tree", "complete_tag", "find_node", "find_references"]
