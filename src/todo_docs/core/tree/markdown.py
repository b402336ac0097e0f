"""Render document trees as markdown."""

import io

from todo_docs.core.tree.walker import text_content
from todo_docs.models.node import TreeNode

_LIST_KINDS = frozenset({"taskList", "bulletList", "orderedList"})
_ITEM_KINDS = frozenset({"taskItem", "listItem"})


def _write_item(node: TreeNode, depth: int, out: io.StringIO) -> None:
    indent = "    " * depth

    # Format checkbox
    prefix = "- "
    if node.is_task:
        prefix = "- [x] " if node.attributes.get("checked") is True else "- [ ] "

    own = [c for c in node.children if c.kind not in _LIST_KINDS]
    lines = "\n".join(text_content(c) for c in own).split("\n")
    out.write(f"{indent}{prefix}{lines[0]}\n")
    for line in lines[1:]:
        out.write(f"{indent}  {line}\n")


def render_tree_as_markdown(root: TreeNode) -> str:
    """Render a document tree as markdown with ``- [ ]`` / ``- [x]`` task lines.

    Nested lists are indented by four spaces per level. Empty paragraphs are
    dropped.
    """
    out = io.StringIO()
    stack: list[tuple[TreeNode, int]] = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        if node.kind in _ITEM_KINDS:
            _write_item(node, depth, out)
            stack.extend(
                (c, depth + 1) for c in reversed(node.children) if c.kind in _LIST_KINDS
            )
        elif node.kind == "heading":
            level = node.attributes.get("level")
            hashes = "#" * (level if isinstance(level, int) and 1 <= level <= 6 else 1)
            out.write(f"{hashes} {text_content(node)}\n")
        elif node.kind == "paragraph":
            text = text_content(node)
            if text:
                out.write(f"{text}\n")
        else:
            stack.extend((c, depth) for c in reversed(node.children))
    return out.getvalue()
