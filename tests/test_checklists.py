"""Tests for specgate.state.checklists module."""

import pytest

from specgate.lib.documents import NamedText
from specgate.lib.types import ChecklistFile, Color, GateState
from specgate.state.checklists import (
    compute_checklist_state,
    compute_gate_status,
    evaluate_checklist,
    percentage,
    percentage_to_color,
)


def checklist(pct):
    return ChecklistFile(
        name="X", filename="x.md", total=100, checked=pct,
        percentage=pct, color=percentage_to_color(pct),
    )


def doc(name, checked, unchecked):
    lines = ["# Checklist", ""]
    lines += [f"- [x] CHK-{i:03d} done" for i in range(checked)]
    lines += [f"- [ ] CHK-{i:03d} open" for i in range(checked, checked + unchecked)]
    return NamedText(name, "\n".join(lines) + "\n")


class TestPercentage:
    """Test percentage function."""

    def test_empty(self):
        assert percentage(0, 0) == 0

    def test_rounds_half_up(self):
        assert percentage(1, 8) == 13  # 12.5
        assert percentage(1, 200) == 1  # 0.5

    def test_rounds_down_below_half(self):
        assert percentage(1, 3) == 33
        assert percentage(2, 3) == 67


class TestPercentageToColor:
    """Test percentage_to_color thresholds."""

    @pytest.mark.parametrize("pct,color", [
        (0, Color.RED),
        (33, Color.RED),
        (34, Color.YELLOW),
        (66, Color.YELLOW),
        (67, Color.GREEN),
        (100, Color.GREEN),
    ])
    def test_thresholds(self, pct, color):
        assert percentage_to_color(pct) == color


class TestComputeGateStatus:
    """Test compute_gate_status precedence."""

    def test_no_checklists_blocks(self):
        gate = compute_gate_status([])
        assert gate.status == GateState.BLOCKED
        assert gate.level == Color.RED
        assert gate.label == "GATE: BLOCKED"

    def test_any_untouched_checklist_is_red(self):
        gate = compute_gate_status([checklist(0), checklist(100)])
        assert gate.status == GateState.BLOCKED
        assert gate.level == Color.RED

    def test_partial_is_yellow(self):
        gate = compute_gate_status([checklist(50), checklist(80)])
        assert gate.status == GateState.BLOCKED
        assert gate.level == Color.YELLOW

    def test_all_complete_opens(self):
        gate = compute_gate_status([checklist(100), checklist(100)])
        assert gate.status == GateState.OPEN
        assert gate.level == Color.GREEN
        assert gate.label == "GATE: OPEN"

    def test_red_wins_over_yellow(self):
        gate = compute_gate_status([checklist(50), checklist(0), checklist(100)])
        assert gate.level == Color.RED


class TestEvaluateChecklist:
    """Test evaluate_checklist function."""

    def test_counts_and_colors(self):
        result = evaluate_checklist(doc("api-design.md", 3, 1))

        assert result.name == "Api Design"
        assert result.filename == "api-design.md"
        assert result.total == 4
        assert result.checked == 3
        assert result.percentage == 75
        assert result.color == Color.GREEN
        assert len(result.items) == 4

    def test_checklist_without_items(self):
        result = evaluate_checklist(NamedText("empty.md", "# Nothing yet\n"))
        assert result.total == 0
        assert result.percentage == 0
        assert result.color == Color.RED


class TestComputeChecklistState:
    """Test compute_checklist_state function."""

    def test_aggregates(self):
        state = compute_checklist_state([doc("a.md", 2, 2), doc("b.md", 4, 0)])

        assert [f.percentage for f in state.files] == [50, 100]
        assert state.total == 8
        assert state.checked == 6
        assert state.percentage == 75
        assert state.gate.level == Color.YELLOW

    def test_empty(self):
        state = compute_checklist_state([])
        assert state.files == []
        assert state.percentage == 0
        assert state.gate.status == GateState.BLOCKED
