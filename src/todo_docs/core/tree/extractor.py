"""Extract ordered task descriptors from a document tree."""

import random
import string

from todo_docs.core.tree.walker import iter_preorder, text_content
from todo_docs.models.node import TaskDescriptor, TreeNode

NODE_ID_ALPHABET = string.digits + string.ascii_lowercase
NODE_ID_LENGTH = 13


def generate_node_id(rng: random.Random) -> str:
    """Return a fresh base-36 identifier drawn from ``rng``."""
    return "".join(rng.choice(NODE_ID_ALPHABET) for _ in range(NODE_ID_LENGTH))


def _resolve_node_id(node: TreeNode, rng: random.Random) -> str:
    node_id = node.attributes.get("id")
    if isinstance(node_id, str) and node_id:
        return node_id
    return generate_node_id(rng)


def extract_tasks(root: TreeNode, rng: random.Random) -> list[TaskDescriptor]:
    """Collect task items in document order.

    Task items nested inside other task items are included after their
    parent; ``order`` counts task items only. Nodes without an ``id``
    attribute get a generated one, which is not written back to the tree.

    Args:
        root: Parsed document tree.
        rng: Entropy source for generated node ids.

    Returns:
        Task descriptors with zero-based, consecutive ``order`` values.
    """
    tasks: list[TaskDescriptor] = []
    for node in iter_preorder(root):
        if not node.is_task:
            continue
        tasks.append(
            TaskDescriptor(
                text=text_content(node),
                is_completed=node.attributes.get("checked") is True,
                order=len(tasks),
                node_id=_resolve_node_id(node, rng),
            )
        )
    return tasks
