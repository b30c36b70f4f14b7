"""Tests for specgate.state.traceability module."""

from specgate.lib.types import (
    EdgeType,
    Requirement,
    RequirementKind,
    Task,
    TestSpecification,
    TestType,
)
from specgate.state.traceability import (
    build_edges,
    build_pyramid,
    find_duplicates,
    find_gaps,
)


def req(req_id):
    kind = RequirementKind.FUNCTIONAL if req_id.startswith("FR") else RequirementKind.SUCCESS_CRITERION
    return Requirement(req_id, kind)


def spec(ts_id, *trace, test_type=TestType.ACCEPTANCE):
    return TestSpecification(ts_id, f"Scenario {ts_id}", test_type, traceability=tuple(trace))


def task(task_id, *refs, checked=False):
    return Task(task_id, f"Do {task_id}", checked, test_spec_refs=tuple(refs))


class TestBuildEdges:
    """Test build_edges function."""

    def test_requirement_test_task_chain(self):
        requirements = [req("FR-001"), req("FR-002")]
        specs = [spec("TS-001", "FR-001")]
        tasks = [task("T001", "TS-001")]

        edges = build_edges(requirements, specs, tasks)

        assert [(e.from_id, e.to_id, e.type) for e in edges] == [
            ("FR-001", "TS-001", EdgeType.REQUIREMENT_TO_TEST),
            ("TS-001", "T001", EdgeType.TEST_TO_TASK),
        ]

    def test_unknown_requirement_ref_is_not_an_edge(self):
        edges = build_edges([req("FR-001")], [spec("TS-001", "FR-009")], [])
        assert edges == []

    def test_unknown_test_ref_is_not_an_edge(self):
        edges = build_edges([], [spec("TS-001")], [task("T001", "TS-404")])
        assert edges == []

    def test_story_tags_need_a_matching_requirement(self):
        edges = build_edges([req("FR-001")], [spec("TS-001", "US-001", "FR-001")], [])
        assert [(e.from_id, e.to_id) for e in edges] == [("FR-001", "TS-001")]

    def test_success_criteria_link(self):
        edges = build_edges([req("SC-001")], [spec("TS-001", "SC-001")], [])
        assert edges[0].from_id == "SC-001"

    def test_edge_to_dict(self):
        edges = build_edges([req("FR-001")], [spec("TS-001", "FR-001")], [])
        assert edges[0].to_dict() == {"from": "FR-001", "to": "TS-001", "type": "requirement-to-test"}


class TestFindGaps:
    """Test find_gaps function."""

    def test_reports_untested_and_unimplemented(self):
        requirements = [req("FR-001"), req("FR-002")]
        specs = [spec("TS-001", "FR-001")]
        edges = build_edges(requirements, specs, [])

        gaps = find_gaps(requirements, specs, edges)

        assert gaps.untested_requirements == ["FR-002"]
        assert gaps.unimplemented_tests == ["TS-001"]

    def test_fully_traced(self):
        requirements = [req("FR-001")]
        specs = [spec("TS-001", "FR-001")]
        edges = build_edges(requirements, specs, [task("T001", "TS-001")])

        gaps = find_gaps(requirements, specs, edges)

        assert gaps.untested_requirements == []
        assert gaps.unimplemented_tests == []

    def test_gaps_preserve_document_order(self):
        requirements = [req("FR-003"), req("FR-001"), req("SC-001")]
        gaps = find_gaps(requirements, [], [])
        assert gaps.untested_requirements == ["FR-003", "FR-001", "SC-001"]


class TestBuildPyramid:
    """Test build_pyramid function."""

    def test_groups_by_type(self):
        specs = [
            spec("TS-001"),
            spec("TS-002", test_type=TestType.CONTRACT),
            spec("TS-003", test_type=TestType.VALIDATION),
            spec("TS-004"),
        ]
        pyramid = build_pyramid(specs)

        assert pyramid.acceptance.count == 2
        assert pyramid.acceptance.ids == ["TS-001", "TS-004"]
        assert pyramid.contract.ids == ["TS-002"]
        assert pyramid.validation.count == 1

    def test_counts_sum_to_total(self):
        specs = [spec(f"TS-{i:03d}", test_type=t) for i, t in enumerate(TestType, 1)]
        pyramid = build_pyramid(specs)
        total = pyramid.acceptance.count + pyramid.contract.count + pyramid.validation.count
        assert total == len(specs)

    def test_empty(self):
        pyramid = build_pyramid([])
        assert pyramid.to_dict() == {
            "acceptance": {"count": 0, "ids": []},
            "contract": {"count": 0, "ids": []},
            "validation": {"count": 0, "ids": []},
        }


class TestFindDuplicates:
    """Test find_duplicates function."""

    def test_reports_repeated_ids_once(self):
        duplicates = find_duplicates(
            [req("FR-001"), req("FR-001"), req("FR-001"), req("FR-002")],
            [spec("TS-001"), spec("TS-001")],
            [task("T001"), task("T002")],
        )

        assert duplicates.requirements == ["FR-001"]
        assert duplicates.test_specs == ["TS-001"]
        assert duplicates.tasks == []
        assert not duplicates.is_empty()

    def test_no_duplicates(self):
        assert find_duplicates([req("FR-001")], [spec("TS-001")], [task("T001")]).is_empty()
