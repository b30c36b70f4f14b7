"""
specgate bugs - List reported bugs with fix task progress.
"""

from pathlib import Path

from specgate.lib.config import ProjectConfig
from specgate.state import load_feature_state


def cmd_bugs(args, project_dir: Path, config: ProjectConfig) -> int:
    bugs = load_feature_state(project_dir, args.feature, config).bugs

    if not bugs.exists:
        print(f"No {config.bugs} for {args.feature}")
        return 0

    summary = bugs.summary
    print(f"Bugs: {summary.total} ({summary.open} open, {summary.fixed} fixed)")
    if summary.highest_open_severity:
        print(f"Highest open severity: {summary.highest_open_severity}")
    print("-" * 60)
    for entry in bugs.bugs:
        bug = entry.bug
        fixes = entry.fix_tasks
        description = bug.description or ""
        if len(description) > 36:
            description = description[:36] + "..."
        print(f"  {bug.id:<9} {bug.severity:<9} {bug.status:<9} {fixes.checked}/{fixes.total}  {description}")
        if entry.issue_url:
            print(f"            {entry.issue_url}")

    if bugs.orphaned_tasks:
        print()
        print("Fix tasks for unknown bugs")
        print("-" * 60)
        for task in bugs.orphaned_tasks:
            print(f"  {task.id:<9} [{task.bug_tag}] {task.description}")

    return 0
