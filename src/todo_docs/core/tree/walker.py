"""Parse rich-text JSON into document trees and walk them.

All traversals use an explicit stack, so nesting depth is bounded only by
memory.
"""

from collections.abc import Iterator, Mapping
from typing import Any

from todo_docs.models.node import TreeNode


def _make_node(data: Mapping[str, Any], children: tuple[TreeNode, ...]) -> TreeNode:
    kind = data.get("type")
    attrs = data.get("attrs")
    text = data.get("text")
    return TreeNode(
        kind=kind if isinstance(kind, str) else "",
        attributes=dict(attrs) if isinstance(attrs, Mapping) else {},
        children=children,
        text=text if isinstance(text, str) else None,
    )


def parse_tree(data: Mapping[str, Any]) -> TreeNode:
    """Convert a decoded Tiptap JSON object into a ``TreeNode``.

    Unexpected shapes are accepted: a missing or non-string ``type`` becomes
    an empty kind, non-mapping ``attrs`` become empty, and children that are
    not JSON objects are skipped.
    """
    # Number nodes in pre-order; a child always gets a higher index than its
    # parent, so building in reverse index order finishes children first.
    entries: list[tuple[Mapping[str, Any], list[int]]] = []
    pending: list[tuple[Mapping[str, Any], int | None]] = [(data, None)]
    while pending:
        node_data, parent = pending.pop()
        index = len(entries)
        entries.append((node_data, []))
        if parent is not None:
            entries[parent][1].append(index)
        raw_children = node_data.get("content")
        if isinstance(raw_children, list):
            pending.extend(
                (c, index) for c in reversed(raw_children) if isinstance(c, Mapping)
            )

    built: dict[int, TreeNode] = {}
    for index in range(len(entries) - 1, -1, -1):
        node_data, child_indexes = entries[index]
        built[index] = _make_node(node_data, tuple(built.pop(i) for i in child_indexes))
    return built[0]


def text_content(node: TreeNode) -> str:
    """Concatenate all leaf text beneath a node, depth-first, without separators."""
    parts: list[str] = []
    stack = [node]
    while stack:
        current = stack.pop()
        if current.text:
            parts.append(current.text)
        else:
            stack.extend(reversed(current.children))
    return "".join(parts)


def iter_preorder(node: TreeNode) -> Iterator[TreeNode]:
    """Yield a node and all of its descendants in depth-first pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))
