"""
Shared data types for specgate.

Records extracted from feature documents and the derived results built
from them. Kept in one module so parsers and the computation layer can
share them without circular imports.
"""

from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any, Optional


class RequirementKind(Enum):
    FUNCTIONAL = "functional"
    SUCCESS_CRITERION = "success-criterion"


class TestType(Enum):
    ACCEPTANCE = "acceptance"
    CONTRACT = "contract"
    VALIDATION = "validation"

    __test__ = False


class EdgeType(Enum):
    REQUIREMENT_TO_TEST = "requirement-to-test"
    TEST_TO_TASK = "test-to-task"


class IntegrityStatus(Enum):
    VALID = "valid"
    TAMPERED = "tampered"
    MISSING = "missing"


class Color(Enum):
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"


class GateState(Enum):
    OPEN = "open"
    BLOCKED = "blocked"


class PhaseStatus(Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"
    SKIPPED = "skipped"


def to_plain(value: Any) -> Any:
    """Convert dataclasses, enums and containers into JSON/YAML-safe data."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, ToDictMixin):
        return value.to_dict()
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {str(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value


class ToDictMixin:
    """Mixin giving dataclasses a to_dict() with wire values."""

    def to_dict(self) -> dict:
        return {f.name: to_plain(getattr(self, f.name)) for f in fields(self)}


# ---------------------------------------------------------------------------
# Extracted records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Requirement(ToDictMixin):
    """A functional requirement (FR-xxx) or success criterion (SC-xxx)."""
    id: str
    kind: RequirementKind
    text: str = ""


@dataclass(frozen=True)
class TestSpecification(ToDictMixin):
    """One tagged scenario from a .feature file."""
    id: str  # TS-xxx
    title: str
    type: TestType
    priority: str = "P3"
    traceability: tuple[str, ...] = ()  # FR/SC/US ids, ordered, unique
    file: Optional[str] = None
    line: Optional[int] = None

    __test__ = False  # keep pytest from collecting it


@dataclass(frozen=True)
class Task(ToDictMixin):
    """One checkbox line from tasks.md."""
    id: str  # T001 or T-B001
    description: str
    checked: bool
    test_spec_refs: tuple[str, ...] = ()
    story_tag: Optional[str] = None  # US1
    bug_tag: Optional[str] = None  # BUG-001
    parallel: bool = False

    @property
    def is_bug_fix(self) -> bool:
        return self.id.startswith("T-B")


@dataclass(frozen=True)
class UserStory(ToDictMixin):
    id: str  # US1
    title: str
    priority: str
    scenario_count: int = 0
    body: str = ""


@dataclass(frozen=True)
class StoryLink(ToDictMixin):
    """A user story mentioning a functional requirement."""
    from_id: str
    to_id: str

    def to_dict(self) -> dict:
        return {"from": self.from_id, "to": self.to_id}


@dataclass(frozen=True)
class Clarification(ToDictMixin):
    """A resolved question/answer pair from a clarification session."""
    session: str
    question: str
    answer: str
    refs: tuple[str, ...] = ()


@dataclass(frozen=True)
class ChecklistItem(ToDictMixin):
    text: str
    checked: bool
    chk_id: Optional[str] = None
    category: Optional[str] = None
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class ParseAnomaly(ToDictMixin):
    """Something extraction noticed but did not resolve on its own."""
    kind: str  # "missing-id-tag", "missing-type-tag"
    file: Optional[str]
    line: Optional[int]
    detail: str


# ---------------------------------------------------------------------------
# Derived results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Edge(ToDictMixin):
    from_id: str
    to_id: str
    type: EdgeType

    def to_dict(self) -> dict:
        return {"from": self.from_id, "to": self.to_id, "type": self.type.value}


@dataclass
class Gaps(ToDictMixin):
    untested_requirements: list[str] = field(default_factory=list)
    unimplemented_tests: list[str] = field(default_factory=list)


@dataclass
class PyramidTier(ToDictMixin):
    count: int = 0
    ids: list[str] = field(default_factory=list)


@dataclass
class Pyramid(ToDictMixin):
    acceptance: PyramidTier = field(default_factory=PyramidTier)
    contract: PyramidTier = field(default_factory=PyramidTier)
    validation: PyramidTier = field(default_factory=PyramidTier)

    def tier(self, test_type: TestType) -> PyramidTier:
        return getattr(self, test_type.value)


@dataclass
class Duplicates(ToDictMixin):
    """Ids occurring more than once, in first-occurrence order."""
    requirements: list[str] = field(default_factory=list)
    test_specs: list[str] = field(default_factory=list)
    tasks: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.requirements or self.test_specs or self.tasks)


@dataclass(frozen=True)
class IntegrityRecord(ToDictMixin):
    status: IntegrityStatus
    current_hash: Optional[str] = None
    stored_hash: Optional[str] = None


@dataclass
class ChecklistFile(ToDictMixin):
    name: str
    filename: str
    total: int
    checked: int
    percentage: int
    color: Color
    items: list[ChecklistItem] = field(default_factory=list)


@dataclass(frozen=True)
class GateStatus(ToDictMixin):
    status: GateState
    level: Color
    label: str


@dataclass
class PipelinePhase(ToDictMixin):
    id: str
    name: str
    status: PhaseStatus
    progress: Optional[str] = None  # "75%"
    optional: bool = False
    clarifications: int = 0


# ---------------------------------------------------------------------------
# Analysis report and bug list records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Finding(ToDictMixin):
    """One row of the analysis report's Findings table."""
    id: str
    category: str
    severity: str  # as written, e.g. "HIGH"
    resolved: bool
    location: str
    summary: str
    recommendation: str


@dataclass(frozen=True)
class CoverageEntry(ToDictMixin):
    """One row of the analysis report's Coverage Summary table."""
    id: str
    has_task: bool
    task_ids: tuple[str, ...] = ()
    has_test: bool = False
    test_ids: tuple[str, ...] = ()
    has_plan: Optional[bool] = None  # None when the table has no plan columns
    plan_refs: tuple[str, ...] = ()
    status: Optional[str] = None
    notes: str = ""


@dataclass
class AnalysisMetrics(ToDictMixin):
    total_requirements: int = 0
    total_tasks: int = 0
    total_test_specs: int = 0
    requirement_coverage: str = ""
    requirement_coverage_pct: int = 0
    test_coverage: Optional[str] = None
    test_coverage_pct: int = 100  # not reported counts as fully covered
    critical_issues: int = 0
    high_issues: int = 0
    medium_issues: int = 0
    low_issues: int = 0


@dataclass(frozen=True)
class AlignmentEntry(ToDictMixin):
    principle: str
    status: str  # ALIGNED, VIOLATION, ...
    evidence: str


@dataclass(frozen=True)
class PhaseViolation(ToDictMixin):
    artifact: str
    status: str
    severity: Optional[str] = None


@dataclass(frozen=True)
class Bug(ToDictMixin):
    """One ## BUG-NNN entry from bugs.md."""
    id: str
    severity: str = "medium"
    status: str = "reported"
    reported: Optional[str] = None
    github_issue: Optional[str] = None
    description: Optional[str] = None
    root_cause: Optional[str] = None
    fix_reference: Optional[str] = None
