"""
specgate gate - Show checklist completion and the gate decision.

Exits 1 while the gate is blocked.
"""

from pathlib import Path

from specgate.lib.config import ProjectConfig
from specgate.lib.types import GateState
from specgate.state import load_feature_state


def cmd_gate(args, project_dir: Path, config: ProjectConfig) -> int:
    checklists = load_feature_state(project_dir, args.feature, config).checklists

    if checklists.files:
        print("Checklists")
        print("-" * 60)
        for f in checklists.files:
            print(f"  {f.name:<30} {f.checked:>3}/{f.total:<3} {f.percentage:>3}%  {f.color.value}")
        print()
    else:
        print("Checklists: none")
        print()

    print(checklists.gate.label)
    return 0 if checklists.gate.status == GateState.OPEN else 1
