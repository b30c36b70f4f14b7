"""
specgate analyze - Show the analysis health score, coverage heatmap and findings.
"""

from pathlib import Path

from specgate.lib.config import ProjectConfig
from specgate.state import load_feature_state

CELL_MARKS = {"covered": "+", "partial": "~", "missing": "-", "na": "."}


def cmd_analyze(args, project_dir: Path, config: ProjectConfig) -> int:
    analyze = load_feature_state(project_dir, args.feature, config).analyze

    if not analyze.exists:
        print(f"No {config.analysis} for {args.feature}")
        return 0

    health = analyze.health
    print(f"Health: {health.score}/100 ({health.zone.value})")
    print("-" * 60)
    for factor in health.factors.values():
        print(f"  {factor.label:<28} {factor.value:>3}")
    print()

    if analyze.heatmap:
        print("Coverage  (+ covered, ~ partial, - missing, . n/a)")
        print("-" * 60)
        print(f"  {'':<10} " + " ".join(f"{col:<6}" for col in analyze.heatmap_columns))
        for row in analyze.heatmap:
            marks = " ".join(f"{CELL_MARKS[row.cells[col].status]:<6}" for col in analyze.heatmap_columns)
            print(f"  {row.id:<10} {marks}")
        print()

    open_issues = [f for f in analyze.issues if not f.resolved]
    print(f"Findings: {len(analyze.issues)} ({len(open_issues)} open)")
    for finding in analyze.issues:
        state = "resolved" if finding.resolved else finding.severity
        print(f"  {finding.id:<6} {state:<9} {finding.summary}")

    return 0
