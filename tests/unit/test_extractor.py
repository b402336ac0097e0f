"""Tests for extracting task descriptors from document trees."""

import random

from tests.unit.builders import doc, paragraph, task, task_list
from todo_docs.core.tree.extractor import NODE_ID_ALPHABET, extract_tasks, generate_node_id
from todo_docs.core.tree.walker import parse_tree
from todo_docs.models.node import TaskDescriptor


def _extract(tree: dict, seed: int = 0) -> list[TaskDescriptor]:
    return extract_tasks(parse_tree(tree), random.Random(seed))


def test_empty_document_has_no_tasks() -> None:
    assert _extract(doc(paragraph())) == []


def test_single_task() -> None:
    tasks = _extract(doc(task_list(task("a", "Buy milk"))))
    assert tasks == [TaskDescriptor(text="Buy milk", is_completed=False, order=0, node_id="a")]


def test_order_counts_only_task_nodes() -> None:
    tasks = _extract(
        doc(
            paragraph("intro"),
            task_list(task("a", "First")),
            paragraph("between"),
            task_list(task("b", "Second", checked=True)),
        )
    )
    assert [(t.node_id, t.order, t.is_completed) for t in tasks] == [
        ("a", 0, False),
        ("b", 1, True),
    ]


def test_nested_tasks_follow_their_parent_and_parent_text_includes_them() -> None:
    tasks = _extract(
        doc(task_list(task("outer", "Trip", task_list(task("inner", "Pack"))), task("last", "Go")))
    )
    assert [(t.node_id, t.order) for t in tasks] == [("outer", 0), ("inner", 1), ("last", 2)]
    assert tasks[0].text == "TripPack"
    assert tasks[1].text == "Pack"


def test_missing_or_empty_id_is_generated_from_rng() -> None:
    tree = doc(task_list(task(None, "No id"), task("", "Empty id")))
    first = _extract(tree, seed=42)
    second = _extract(tree, seed=42)

    assert [t.node_id for t in first] == [t.node_id for t in second]
    assert first[0].node_id != first[1].node_id
    for t in first:
        assert len(t.node_id) == 13
        assert set(t.node_id) <= set(NODE_ID_ALPHABET)


def test_generated_id_is_not_written_back_to_tree() -> None:
    tree = doc(task_list(task(None, "No id")))
    root = parse_tree(tree)
    extract_tasks(root, random.Random(1))
    assert "id" not in root.children[0].children[0].attributes
    assert "id" not in tree["content"][0]["content"][0]["attrs"]


def test_non_boolean_checked_counts_as_not_completed() -> None:
    item = task("a", "Maybe")
    item["attrs"]["checked"] = "yes"
    assert _extract(doc(task_list(item)))[0].is_completed is False


def test_duplicate_ids_are_kept() -> None:
    tasks = _extract(doc(task_list(task("dup", "One"), task("dup", "Two"))))
    assert [(t.node_id, t.text) for t in tasks] == [("dup", "One"), ("dup", "Two")]


def test_generate_node_id_is_deterministic_for_seeded_rng() -> None:
    assert generate_node_id(random.Random(3)) == generate_node_id(random.Random(3))
