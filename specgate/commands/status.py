"""
specgate status - Show pipeline phase status for a feature.
"""

from pathlib import Path

from specgate.lib.config import ProjectConfig
from specgate.lib.types import PhaseStatus
from specgate.state import load_feature_state

STATUS_MARKERS = {
    PhaseStatus.COMPLETE: "[x]",
    PhaseStatus.IN_PROGRESS: "[~]",
    PhaseStatus.SKIPPED: "[-]",
    PhaseStatus.NOT_STARTED: "[ ]",
}


def cmd_status(args, project_dir: Path, config: ProjectConfig) -> int:
    """Show the pipeline for one feature."""
    state = load_feature_state(project_dir, args.feature, config)

    print(f"Feature: {state.feature_id}")
    print("=" * 60)
    print()

    for phase in state.pipeline:
        name = phase.name.replace("\n", " ")
        line = f"  {STATUS_MARKERS[phase.status]} {name:<24} {phase.status.value:<12}"
        if phase.progress:
            line += f" {phase.progress:>4}"
        if phase.optional:
            line += "  (optional)"
        if phase.clarifications:
            line += f"  {phase.clarifications} clarification(s)"
        print(line.rstrip())

    print()
    gate = state.checklists.gate
    print(f"Checklists:     {gate.label} ({gate.level.value})")
    print(f"Integrity:      {state.testify.integrity.status.value}")

    return 0
