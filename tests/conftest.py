"""Shared data instances for the test suite."""

import pytest

from cnd_layout.models.instance import DataInstance


def _relation(name, types, rows):
    return {
        "id": name,
        "name": name,
        "types": types,
        "tuples": [{"atoms": list(row), "types": types} for row in rows],
    }


PEOPLE = {
    "atoms": [
        {"id": "Alice", "type": "Person", "label": "Alice"},
        {"id": "Bob", "type": "Person", "label": "Bob"},
        {"id": "25", "type": "Int", "label": "25"},
        {"id": "30", "type": "Int", "label": "30"},
    ],
    "relations": [
        _relation("age", ["Person", "Int"], [("Alice", "25"), ("Bob", "30")]),
    ],
    "types": [
        {"id": "Person", "types": ["Person"]},
        {"id": "Int", "types": ["Int"], "isBuiltin": True},
    ],
}

# Binary tree: left = {3->1, 4->2}, right = {1->4, 3->0}
BINARY_TREE = {
    "atoms": [{"id": f"Node{i}", "type": "Node", "label": f"Node{i}"} for i in range(5)],
    "relations": [
        _relation("left", ["Node", "Node"], [("Node3", "Node1"), ("Node4", "Node2")]),
        _relation("right", ["Node", "Node"], [("Node1", "Node4"), ("Node3", "Node0")]),
    ],
}

# Linked list A -> B -> C -> D plus a detached E
CHAIN = {
    "atoms": [{"id": n, "type": "Item"} for n in "ABCDE"],
    "relations": [
        _relation("next", ["Item", "Item"], [("A", "B"), ("B", "C"), ("C", "D")]),
    ],
}

# Students with a ternary score relation and a subtype
SCHOOL = {
    "atoms": [
        {"id": "Ann", "type": "GradStudent", "label": "Ann"},
        {"id": "Ben", "type": "Student", "label": "Ben"},
        {"id": "Math", "type": "Course", "label": "Math"},
        {"id": "Art", "type": "Course", "label": "Art"},
        {"id": "A", "type": "Grade", "label": "A"},
        {"id": "B", "type": "Grade", "label": "B"},
    ],
    "relations": [
        _relation(
            "score",
            ["Student", "Course", "Grade"],
            [("Ann", "Math", "A"), ("Ann", "Art", "B"), ("Ben", "Math", "B")],
        ),
        _relation("takes", ["Student", "Course"], [("Ann", "Math"), ("Ben", "Art")]),
    ],
    "types": [
        {"id": "GradStudent", "types": ["GradStudent", "Student"]},
        {"id": "Student", "types": ["Student"]},
        {"id": "Course", "types": ["Course"]},
        {"id": "Grade", "types": ["Grade"]},
    ],
}


@pytest.fixture
def people_instance():
    return DataInstance.from_dict(PEOPLE)


@pytest.fixture
def tree_instance():
    return DataInstance.from_dict(BINARY_TREE)


@pytest.fixture
def chain_instance():
    return DataInstance.from_dict(CHAIN)


@pytest.fixture
def school_instance():
    return DataInstance.from_dict(SCHOOL)


@pytest.fixture
def tree_data():
    return BINARY_TREE


@pytest.fixture
def school_data():
    return SCHOOL
