"""
Checklist completion and the checklist gate.

The gate uses worst-case precedence, not an average: one untouched
checklist blocks progress no matter how complete the others are.
"""

from dataclasses import dataclass, field

from specgate.lib.artifacts import checklist_display_name, parse_checklist_items
from specgate.lib.documents import NamedText
from specgate.lib.types import ChecklistFile, Color, GateState, GateStatus, ToDictMixin

GATE_OPEN = GateStatus(GateState.OPEN, Color.GREEN, "GATE: OPEN")
GATE_BLOCKED_RED = GateStatus(GateState.BLOCKED, Color.RED, "GATE: BLOCKED")
GATE_BLOCKED_YELLOW = GateStatus(GateState.BLOCKED, Color.YELLOW, "GATE: BLOCKED")


def percentage(checked: int, total: int) -> int:
    """Rounded completion percentage, 0 for an empty list.

    Halves round up (0.5 -> 1) so results match the dashboard.
    """
    if total <= 0:
        return 0
    return int(checked * 100 / total + 0.5)


def percentage_to_color(pct: int) -> Color:
    if pct <= 33:
        return Color.RED
    if pct <= 66:
        return Color.YELLOW
    return Color.GREEN


def evaluate_checklist(doc: NamedText) -> ChecklistFile:
    """Count and colour one checklist document."""
    items = parse_checklist_items(doc.text)
    checked = sum(1 for item in items if item.checked)
    pct = percentage(checked, len(items))
    return ChecklistFile(
        name=checklist_display_name(doc.name),
        filename=doc.name,
        total=len(items),
        checked=checked,
        percentage=pct,
        color=percentage_to_color(pct),
        items=items,
    )


def compute_gate_status(files: list[ChecklistFile]) -> GateStatus:
    """Reduce per-file percentages to one gate decision.

    - no files            -> blocked / red
    - any file at 0%      -> blocked / red
    - every file at 100%  -> open / green
    - otherwise           -> blocked / yellow
    """
    if not files:
        return GATE_BLOCKED_RED
    if any(f.percentage == 0 for f in files):
        return GATE_BLOCKED_RED
    if all(f.percentage == 100 for f in files):
        return GATE_OPEN
    return GATE_BLOCKED_YELLOW


@dataclass
class ChecklistState(ToDictMixin):
    files: list[ChecklistFile] = field(default_factory=list)
    gate: GateStatus = GATE_BLOCKED_RED

    @property
    def total(self) -> int:
        return sum(f.total for f in self.files)

    @property
    def checked(self) -> int:
        return sum(f.checked for f in self.files)

    @property
    def percentage(self) -> int:
        return percentage(self.checked, self.total)


def compute_checklist_state(checklists: list[NamedText]) -> ChecklistState:
    """Evaluate every checklist document and the aggregate gate."""
    files = [evaluate_checklist(doc) for doc in checklists]
    return ChecklistState(files=files, gate=compute_gate_status(files))
