"""In-place edits of raw Tiptap JSON trees.

These operate on decoded JSON rather than ``TreeNode`` so that attributes
and marks the engine does not model survive the round trip.
"""

from collections.abc import Iterator
from typing import Any

from todo_docs.models.node import TASK_ITEM_KIND

JsonNode = dict[str, Any]

EMPTY_DOCUMENT: JsonNode = {
    "type": "doc",
    "content": [{"type": "paragraph", "content": []}],
}


def _children(node: JsonNode) -> list[JsonNode]:
    content = node.get("content")
    if not isinstance(content, list):
        return []
    return [c for c in content if isinstance(c, dict)]


def _iter_preorder(node: JsonNode) -> Iterator[JsonNode]:
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(_children(current)))


def find_task_item(node: JsonNode, node_id: str) -> JsonNode | None:
    """Return the last task item (pre-order) whose ``id`` attribute is ``node_id``.

    When an id occurs more than once, the last occurrence is the one a save
    keeps as the task record, so edits go there.
    """
    found: JsonNode | None = None
    for current in _iter_preorder(node):
        attrs = current.get("attrs")
        if current.get("type") == TASK_ITEM_KIND and isinstance(attrs, dict):
            if attrs.get("id") == node_id:
                found = current
    return found


def set_task_checked(root: JsonNode, node_id: str, checked: bool) -> bool:
    """Set a task item's ``checked`` attribute. Returns False if the task is absent."""
    task = find_task_item(root, node_id)
    if task is None:
        return False
    task["attrs"]["checked"] = checked
    return True


def _replace_paragraph_text(node: JsonNode, text: str) -> bool:
    for current in _iter_preorder(node):
        if current is not node and current.get("type") == "paragraph":
            current["content"] = [{"type": "text", "text": text}]
            return True
    return False


def set_task_text(root: JsonNode, node_id: str, text: str) -> bool:
    """Replace the first paragraph of a task item with a single text node.

    Returns False if the task is absent or holds no paragraph.
    """
    task = find_task_item(root, node_id)
    if task is None:
        return False
    return _replace_paragraph_text(task, text)


def make_task_item(node_id: str, text: str, *, checked: bool = False) -> JsonNode:
    paragraph: JsonNode = {"type": "paragraph", "content": []}
    if text:
        paragraph["content"].append({"type": "text", "text": text})
    return {
        "type": TASK_ITEM_KIND,
        "attrs": {"id": node_id, "checked": checked},
        "content": [paragraph],
    }


def append_task_item(root: JsonNode, node_id: str, text: str) -> None:
    """Append an unchecked task item to the document's last task list.

    A new task list is added at the end of the document when it has none at
    the top level.
    """
    item = make_task_item(node_id, text)
    content = root.get("content")
    if not isinstance(content, list):
        content = []
        root["content"] = content

    for block in reversed(content):
        if isinstance(block, dict) and block.get("type") == "taskList":
            block.setdefault("content", []).append(item)
            return
    content.append({"type": "taskList", "content": [item]})
