"""Document tree models: parsed rich-text nodes and extracted tasks."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

TASK_ITEM_KIND = "taskItem"


@dataclass(frozen=True)
class TreeNode:
    """A single node in a rich-text document tree.

    ``kind`` discriminates the variant. Leaf text nodes carry ``text``;
    container nodes carry ``children``.
    """

    kind: str
    attributes: Mapping[str, Any] = field(default_factory=dict)
    children: tuple["TreeNode", ...] = ()
    text: str | None = None

    @property
    def is_task(self) -> bool:
        return self.kind == TASK_ITEM_KIND


@dataclass(frozen=True)
class TaskDescriptor:
    """A task found in a document tree during one synchronization pass."""

    text: str
    is_completed: bool
    order: int
    node_id: str
