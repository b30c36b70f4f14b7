"""
specgate trace - Show the requirement -> test -> task traceability graph.
"""

from pathlib import Path

from specgate.lib.config import ProjectConfig
from specgate.lib.types import EdgeType
from specgate.state import load_feature_state


def _id_list(ids: list[str]) -> str:
    return ", ".join(ids) if ids else "none"


def cmd_trace(args, project_dir: Path, config: ProjectConfig) -> int:
    """Print records, edges, gaps and anomalies for one feature."""
    testify = load_feature_state(project_dir, args.feature, config).testify

    print(f"Requirements:   {len(testify.requirements)}")
    print(f"Test specs:     {len(testify.test_specs)}")
    print(f"Tasks:          {len(testify.tasks)}")
    print()

    by_requirement: dict[str, list[str]] = {}
    by_test: dict[str, list[str]] = {}
    for edge in testify.edges:
        target = by_requirement if edge.type == EdgeType.REQUIREMENT_TO_TEST else by_test
        target.setdefault(edge.from_id, []).append(edge.to_id)

    if testify.requirements:
        print("Traceability")
        print("-" * 60)
        for req in testify.requirements:
            tests = by_requirement.get(req.id, [])
            print(f"  {req.id}")
            if not tests:
                print("    (untested)")
            for ts_id in tests:
                tasks = by_test.get(ts_id, [])
                print(f"    -> {ts_id} -> {_id_list(tasks) if tasks else '(no task)'}")
        print()

    print("Pyramid")
    print("-" * 60)
    for tier_name in ("acceptance", "contract", "validation"):
        tier = getattr(testify.pyramid, tier_name)
        print(f"  {tier_name:<12} {tier.count:>3}  {_id_list(tier.ids)}")
    print()

    print(f"Untested requirements: {_id_list(testify.gaps.untested_requirements)}")
    print(f"Unimplemented tests:   {_id_list(testify.gaps.unimplemented_tests)}")

    if not testify.duplicates.is_empty():
        print()
        print("Duplicate ids")
        print("-" * 60)
        for label, ids in (
            ("requirements", testify.duplicates.requirements),
            ("test specs", testify.duplicates.test_specs),
            ("tasks", testify.duplicates.tasks),
        ):
            if ids:
                print(f"  {label:<12} {_id_list(ids)}")

    if testify.anomalies:
        print()
        print("Anomalies")
        print("-" * 60)
        for anomaly in testify.anomalies:
            print(f"  [{anomaly.kind}] {anomaly.file}:{anomaly.line} {anomaly.detail}")

    return 0
