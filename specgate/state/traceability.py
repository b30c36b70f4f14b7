"""
Traceability graph: requirements -> test specifications -> tasks.

Edges are only built between records that exist. A reference to an
unknown id never becomes an edge; it shows up as a gap instead.
"""

__all__ = ["build_edges", "find_gaps", "build_pyramid", "find_duplicates"]

from collections import Counter

from specgate.lib.types import (
    Duplicates,
    Edge,
    EdgeType,
    Gaps,
    Pyramid,
    Requirement,
    Task,
    TestSpecification,
)


def build_edges(
    requirements: list[Requirement],
    test_specs: list[TestSpecification],
    tasks: list[Task],
) -> list[Edge]:
    """Build requirement-to-test and test-to-task edges.

    Args:
        requirements: Parsed FR/SC requirements
        test_specs: Parsed scenarios with traceability tags
        tasks: Parsed tasks with TS-xxx references

    Returns:
        Edges in scenario order, then task order.
    """
    req_ids = {r.id for r in requirements}
    ts_ids = {t.id for t in test_specs}
    edges = []

    for spec in test_specs:
        for ref in spec.traceability:
            if ref in req_ids:
                edges.append(Edge(ref, spec.id, EdgeType.REQUIREMENT_TO_TEST))

    for task in tasks:
        for ref in task.test_spec_refs:
            if ref in ts_ids:
                edges.append(Edge(ref, task.id, EdgeType.TEST_TO_TASK))

    return edges


def find_gaps(
    requirements: list[Requirement],
    test_specs: list[TestSpecification],
    edges: list[Edge],
) -> Gaps:
    """Requirements with no scenario, and scenarios with no task."""
    tested = {e.from_id for e in edges if e.type == EdgeType.REQUIREMENT_TO_TEST}
    implemented = {e.from_id for e in edges if e.type == EdgeType.TEST_TO_TASK}

    return Gaps(
        untested_requirements=[r.id for r in requirements if r.id not in tested],
        unimplemented_tests=[t.id for t in test_specs if t.id not in implemented],
    )


def build_pyramid(test_specs: list[TestSpecification]) -> Pyramid:
    """Group test spec ids by type, preserving insertion order."""
    pyramid = Pyramid()
    for spec in test_specs:
        tier = pyramid.tier(spec.type)
        tier.ids.append(spec.id)
        tier.count += 1
    return pyramid


def _repeated(ids: list[str]) -> list[str]:
    counts = Counter(ids)
    return [i for i in dict.fromkeys(ids) if counts[i] > 1]


def find_duplicates(
    requirements: list[Requirement],
    test_specs: list[TestSpecification],
    tasks: list[Task],
) -> Duplicates:
    """Report ids that occur more than once. Collections are left as-is."""
    return Duplicates(
        requirements=_repeated([r.id for r in requirements]),
        test_specs=_repeated([t.id for t in test_specs]),
        tasks=_repeated([t.id for t in tasks]),
    )
