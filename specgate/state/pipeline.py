"""
Pipeline phase status.

Derives one status per workflow phase from which artifacts exist,
checklist and task completion, and the test-first policy. All inputs
are passed in explicitly; nothing here reads files or global state.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from specgate.lib.artifacts import constitution_requires_tdd
from specgate.lib.constants import PHASE_IDS, PHASE_NAMES, TDD_DETERMINATIONS, TDD_MANDATORY, UNCLARIFIED_PHASES
from specgate.lib.types import PhaseStatus, PipelinePhase, Task

from .checklists import ChecklistState, percentage

logger = logging.getLogger(__name__)


def resolve_tdd_required(determination: Optional[str], constitution: Optional[str]) -> bool:
    """Whether test-first is mandatory for this project.

    The persisted determination wins when present. Otherwise the
    constitution text is re-parsed for test-first language.
    """
    if determination in TDD_DETERMINATIONS:
        return determination == TDD_MANDATORY
    if determination is not None:
        logger.warning(f"Unknown tdd_determination '{determination}', falling back to constitution")
    return constitution_requires_tdd(constitution)


@dataclass
class PipelineInputs:
    """Everything the phase rules look at."""
    constitution_exists: bool = False
    premise_exists: bool = False
    spec_exists: bool = False
    plan_exists: bool = False
    tasks_exist: bool = False
    test_specs_exist: bool = False
    analysis_exists: bool = False
    tdd_required: bool = False
    checklists: ChecklistState = field(default_factory=ChecklistState)
    tasks: list[Task] = field(default_factory=list)
    clarifications: dict[str, int] = field(default_factory=dict)  # phase id -> count


def _exists(flag: bool) -> tuple[PhaseStatus, Optional[str]]:
    return (PhaseStatus.COMPLETE if flag else PhaseStatus.NOT_STARTED), None


def _checklist_phase(inputs: PipelineInputs) -> tuple[PhaseStatus, Optional[str]]:
    """Status from item completion; the gate is reported separately."""
    state = inputs.checklists
    if state.total == 0:
        return PhaseStatus.NOT_STARTED, None
    progress = f"{state.percentage}%"
    if state.checked == state.total:
        return PhaseStatus.COMPLETE, progress
    return PhaseStatus.IN_PROGRESS, progress


def _testify_phase(inputs: PipelineInputs) -> tuple[PhaseStatus, Optional[str]]:
    if inputs.test_specs_exist:
        return PhaseStatus.COMPLETE, None
    if not inputs.tdd_required and inputs.plan_exists:
        return PhaseStatus.SKIPPED, None
    return PhaseStatus.NOT_STARTED, None


def _implement_phase(inputs: PipelineInputs) -> tuple[PhaseStatus, Optional[str]]:
    total = len(inputs.tasks)
    checked = sum(1 for t in inputs.tasks if t.checked)
    if total == 0 or checked == 0:
        return PhaseStatus.NOT_STARTED, None
    progress = f"{percentage(checked, total)}%"
    if checked == total:
        return PhaseStatus.COMPLETE, progress
    return PhaseStatus.IN_PROGRESS, progress


def compute_pipeline_state(inputs: PipelineInputs) -> list[PipelinePhase]:
    """Return one phase per PHASE_IDS entry, in workflow order."""
    rules = {
        "constitution": _exists(inputs.constitution_exists),
        "spec": _exists(inputs.spec_exists),
        "plan": _exists(inputs.plan_exists),
        "checklist": _checklist_phase(inputs),
        "testify": _testify_phase(inputs),
        "tasks": _exists(inputs.tasks_exist),
        "analyze": _exists(inputs.analysis_exists),
        "implement": _implement_phase(inputs),
    }

    phases = []
    for phase_id in PHASE_IDS:
        status, progress = rules[phase_id]
        name = PHASE_NAMES[phase_id]
        if phase_id == "constitution" and inputs.premise_exists:
            name = "Premise &\nConstitution"
        phases.append(PipelinePhase(
            id=phase_id,
            name=name,
            status=status,
            progress=progress,
            optional=phase_id == "testify" and not inputs.tdd_required,
            clarifications=0 if phase_id in UNCLARIFIED_PHASES else inputs.clarifications.get(phase_id, 0),
        ))
    return phases
