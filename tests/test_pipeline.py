"""Tests for specgate.state.pipeline module."""

from specgate.lib.constants import PHASE_IDS, PHASE_NAMES
from specgate.lib.documents import NamedText
from specgate.lib.types import Color, GateState, PhaseStatus, Task
from specgate.state.checklists import compute_checklist_state
from specgate.state.pipeline import (
    PipelineInputs,
    compute_pipeline_state,
    resolve_tdd_required,
)


def phases_by_id(inputs):
    return {p.id: p for p in compute_pipeline_state(inputs)}


def tasks(checked, unchecked):
    return (
        [Task(f"T{i:03d}", "done", True) for i in range(checked)]
        + [Task(f"T{i:03d}", "open", False) for i in range(checked, checked + unchecked)]
    )


class TestResolveTddRequired:
    """Test resolve_tdd_required function."""

    def test_persisted_determination_wins(self):
        constitution = "TDD is NON-NEGOTIABLE."
        assert resolve_tdd_required("optional", constitution) is False
        assert resolve_tdd_required("forbidden", constitution) is False
        assert resolve_tdd_required("mandatory", None) is True

    def test_falls_back_to_constitution(self):
        assert resolve_tdd_required(None, "Tests MUST be written before code.") is True
        assert resolve_tdd_required(None, "No testing policy.") is False
        assert resolve_tdd_required(None, None) is False

    def test_unknown_determination_warns(self, caplog):
        assert resolve_tdd_required("sometimes", "TDD is required.") is True
        assert "Unknown tdd_determination 'sometimes'" in caplog.text


class TestComputePipelineState:
    """Test compute_pipeline_state function."""

    def test_phase_order(self):
        phases = compute_pipeline_state(PipelineInputs())
        assert tuple(p.id for p in phases) == PHASE_IDS

    def test_empty_project(self):
        phases = compute_pipeline_state(PipelineInputs())

        assert all(p.status == PhaseStatus.NOT_STARTED for p in phases)
        assert phases[0].name == "Constitution"

    def test_existence_phases(self):
        phases = phases_by_id(PipelineInputs(
            constitution_exists=True,
            spec_exists=True,
            plan_exists=True,
            tasks_exist=True,
            analysis_exists=True,
        ))

        for phase_id in ("constitution", "spec", "plan", "tasks", "analyze"):
            assert phases[phase_id].status == PhaseStatus.COMPLETE

    def test_premise_renames_constitution_phase(self):
        phases = compute_pipeline_state(PipelineInputs(premise_exists=True))
        assert phases[0].name == "Premise &\nConstitution"

    def test_clarification_counts(self):
        phases = phases_by_id(PipelineInputs(clarifications={"spec": 3, "plan": 1}))

        assert phases["spec"].clarifications == 3
        assert phases["plan"].clarifications == 1
        assert phases["constitution"].clarifications == 0
        assert phases["testify"].clarifications == 0
        assert phases["implement"].clarifications == 0

    def test_testify_and_implement_ignore_clarification_counts(self):
        phases = phases_by_id(PipelineInputs(clarifications={"testify": 4, "implement": 2}))

        assert phases["testify"].clarifications == 0
        assert phases["implement"].clarifications == 0

    def test_phase_names(self):
        names = [p.name for p in compute_pipeline_state(PipelineInputs())]
        assert names == [PHASE_NAMES[phase_id] for phase_id in PHASE_IDS]
        assert names[-1] == "Implement"


class TestChecklistPhase:
    """Test the checklist phase."""

    def test_no_items(self):
        phase = phases_by_id(PipelineInputs())["checklist"]
        assert phase.status == PhaseStatus.NOT_STARTED
        assert phase.progress is None

    def test_all_items_checked_is_complete_even_if_gate_blocked(self):
        state = compute_checklist_state([
            NamedText("a.md", "- [x] one\n"),
            NamedText("b.md", "# notes\n"),
        ])
        phase = phases_by_id(PipelineInputs(checklists=state))["checklist"]

        assert phase.status == PhaseStatus.COMPLETE
        assert phase.progress == "100%"
        assert state.gate.status == GateState.BLOCKED
        assert state.gate.level == Color.RED

    def test_partially_checked_is_in_progress(self):
        state = compute_checklist_state([
            NamedText("a.md", "- [x] one\n- [ ] two\n"),
            NamedText("b.md", "- [x] one\n"),
        ])
        phase = phases_by_id(PipelineInputs(checklists=state))["checklist"]

        assert phase.status == PhaseStatus.IN_PROGRESS
        assert phase.progress == "67%"

    def test_untouched_checklist_is_in_progress(self):
        state = compute_checklist_state([NamedText("a.md", "- [ ] one\n")])
        phase = phases_by_id(PipelineInputs(checklists=state))["checklist"]

        assert phase.status == PhaseStatus.IN_PROGRESS
        assert phase.progress == "0%"

    def test_gate_open_is_complete(self):
        state = compute_checklist_state([NamedText("a.md", "- [x] one\n- [X] two\n")])
        phase = phases_by_id(PipelineInputs(checklists=state))["checklist"]

        assert phase.status == PhaseStatus.COMPLETE
        assert phase.progress == "100%"


class TestTestifyPhase:
    """Test the testify phase."""

    def test_complete_when_scenarios_exist(self):
        phase = phases_by_id(PipelineInputs(test_specs_exist=True, tdd_required=True))["testify"]
        assert phase.status == PhaseStatus.COMPLETE
        assert phase.optional is False

    def test_skipped_when_optional_and_plan_exists(self):
        phase = phases_by_id(PipelineInputs(plan_exists=True))["testify"]
        assert phase.status == PhaseStatus.SKIPPED
        assert phase.optional is True

    def test_not_started_when_optional_without_plan(self):
        phase = phases_by_id(PipelineInputs())["testify"]
        assert phase.status == PhaseStatus.NOT_STARTED

    def test_required_never_skipped(self):
        phase = phases_by_id(PipelineInputs(plan_exists=True, tdd_required=True))["testify"]
        assert phase.status == PhaseStatus.NOT_STARTED
        assert phase.optional is False


class TestImplementPhase:
    """Test the implement phase."""

    def test_no_tasks(self):
        phase = phases_by_id(PipelineInputs())["implement"]
        assert phase.status == PhaseStatus.NOT_STARTED
        assert phase.progress is None

    def test_none_checked(self):
        phase = phases_by_id(PipelineInputs(tasks=tasks(0, 3)))["implement"]
        assert phase.status == PhaseStatus.NOT_STARTED

    def test_partially_checked(self):
        phase = phases_by_id(PipelineInputs(tasks=tasks(1, 3)))["implement"]
        assert phase.status == PhaseStatus.IN_PROGRESS
        assert phase.progress == "25%"

    def test_all_checked(self):
        phase = phases_by_id(PipelineInputs(tasks=tasks(2, 0)))["implement"]
        assert phase.status == PhaseStatus.COMPLETE
        assert phase.progress == "100%"
