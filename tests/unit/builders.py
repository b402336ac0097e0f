"""Builders for Tiptap JSON documents used across tests."""

import json
from typing import Any


def text(value: str) -> dict[str, Any]:
    return {"type": "text", "text": value}


def paragraph(*parts: str) -> dict[str, Any]:
    return {"type": "paragraph", "content": [text(p) for p in parts]}


def task(
    node_id: str | None,
    label: str,
    *nested: dict[str, Any],
    checked: bool = False,
) -> dict[str, Any]:
    attrs: dict[str, Any] = {"checked": checked}
    if node_id is not None:
        attrs["id"] = node_id
    return {"type": "taskItem", "attrs": attrs, "content": [paragraph(label), *nested]}


def task_list(*items: dict[str, Any]) -> dict[str, Any]:
    return {"type": "taskList", "content": list(items)}


def doc(*blocks: dict[str, Any]) -> dict[str, Any]:
    return {"type": "doc", "content": list(blocks)}


def dumps(*blocks: dict[str, Any]) -> str:
    """Serialize a document made of the given top-level blocks."""
    return json.dumps(doc(*blocks))


EMPTY_DOC = json.dumps({"type": "doc", "content": [{"type": "paragraph", "content": []}]})


def nested_paragraphs(depth: int, leaf: str) -> dict[str, Any]:
    """A chain of ``depth`` paragraphs ending in one text node."""
    node = text(leaf)
    for _ in range(depth):
        node = {"type": "paragraph", "content": [node]}
    return node


def nested_tasks(depth: int) -> dict[str, Any]:
    """A task list whose only task holds the next task list, ``depth`` levels down."""
    node = task_list(task(f"t{depth - 1}", f"level {depth - 1}"))
    for level in range(depth - 2, -1, -1):
        node = task_list(task(f"t{level}", f"level {level}", node))
    return node
