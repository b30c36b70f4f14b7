"""
Analysis health: a 0-100 score and a requirement coverage heatmap
derived from the consistency report (analysis.md).

The score is the rounded mean of four factors: requirement coverage and
test coverage as reported, constitution compliance (share of ALIGNED
principles) and phase separation (100 minus severity penalties).
"""

import re
from dataclasses import dataclass, field, replace
from typing import Optional

from specgate.lib import artifacts
from specgate.lib.types import (
    AlignmentEntry,
    AnalysisMetrics,
    Color,
    CoverageEntry,
    Finding,
    PhaseViolation,
    Requirement,
    ToDictMixin,
)

from .checklists import percentage

SEVERITY_PENALTIES = {"CRITICAL": 25, "HIGH": 15, "MEDIUM": 5, "LOW": 2}

# Heatmap cell states
COVERED = "covered"
PARTIAL = "partial"
MISSING = "missing"
NOT_APPLICABLE = "na"

HEATMAP_COLUMNS = ("tasks", "tests", "plan")

PARTIAL_RE = re.compile(r'partial', re.IGNORECASE)


@dataclass(frozen=True)
class HealthFactor(ToDictMixin):
    value: int
    label: str


@dataclass
class HealthScore(ToDictMixin):
    score: int
    zone: Color
    factors: dict[str, HealthFactor] = field(default_factory=dict)


@dataclass(frozen=True)
class HeatmapCell(ToDictMixin):
    status: str
    refs: tuple[str, ...] = ()


@dataclass
class HeatmapRow(ToDictMixin):
    id: str
    text: str
    cells: dict[str, HeatmapCell] = field(default_factory=dict)


@dataclass
class AnalyzeState(ToDictMixin):
    exists: bool = False  # analysis.md present
    health: Optional[HealthScore] = None
    heatmap_columns: tuple[str, ...] = ()
    heatmap: list[HeatmapRow] = field(default_factory=list)
    issues: list[Finding] = field(default_factory=list)
    metrics: Optional[AnalysisMetrics] = None
    constitution_alignment: list[AlignmentEntry] = field(default_factory=list)


def compute_phase_separation_score(violations: list[PhaseViolation]) -> int:
    """100 minus the penalty of each violation's severity, floored at 0."""
    penalty = sum(SEVERITY_PENALTIES.get((v.severity or "").upper(), 0) for v in violations)
    return max(0, 100 - penalty)


def compute_constitution_compliance(entries: list[AlignmentEntry]) -> int:
    """Percentage of ALIGNED principles; 100 when none are listed."""
    if not entries:
        return 100
    aligned = sum(1 for e in entries if e.status.strip().upper() == "ALIGNED")
    return percentage(aligned, len(entries))


def health_zone(score: int) -> Color:
    if score <= 40:
        return Color.RED
    if score <= 70:
        return Color.YELLOW
    return Color.GREEN


def compute_health_score(
    requirements_coverage: int,
    constitution_compliance: int,
    phase_separation: int,
    test_coverage: int,
) -> HealthScore:
    """Equal-weight mean of the four factors, halves rounded up."""
    total = requirements_coverage + constitution_compliance + phase_separation + test_coverage
    score = int(total / 4 + 0.5)
    return HealthScore(
        score=score,
        zone=health_zone(score),
        factors={
            "requirements_coverage": HealthFactor(requirements_coverage, "Requirements Coverage"),
            "constitution_compliance": HealthFactor(constitution_compliance, "Constitution Compliance"),
            "phase_separation": HealthFactor(phase_separation, "Phase Separation"),
            "test_coverage": HealthFactor(test_coverage, "Test Coverage"),
        },
    )


def map_cell_status(has_artifact: bool, ids: tuple[str, ...], status_text: Optional[str] = None) -> HeatmapCell:
    if status_text and PARTIAL_RE.search(status_text):
        return HeatmapCell(PARTIAL, tuple(ids))
    if has_artifact and ids:
        return HeatmapCell(COVERED, tuple(ids))
    return HeatmapCell(MISSING)


def build_heatmap_rows(requirements: list[Requirement], coverage: list[CoverageEntry]) -> list[HeatmapRow]:
    """One row per requirement; requirements absent from the report are missing."""
    by_id = {entry.id: entry for entry in coverage}
    rows = []
    for req in requirements:
        entry = by_id.get(req.id)
        if entry is None:
            cells = {
                "tasks": HeatmapCell(MISSING),
                "tests": HeatmapCell(MISSING),
                "plan": HeatmapCell(NOT_APPLICABLE),
            }
        else:
            task_partial = "Partial" if entry.status == "Partial" and not entry.has_task else None
            cells = {
                "tasks": map_cell_status(entry.has_task, entry.task_ids, task_partial),
                "tests": map_cell_status(entry.has_test, entry.test_ids),
                "plan": (
                    map_cell_status(entry.has_plan, entry.plan_refs)
                    if entry.has_plan is not None
                    else HeatmapCell(NOT_APPLICABLE)
                ),
            }
        rows.append(HeatmapRow(req.id, req.text, cells))
    return rows


def compute_analyze_state(analysis: Optional[str], spec: Optional[str]) -> AnalyzeState:
    """Derive health, heatmap and issues; empty when there is no report."""
    if analysis is None:
        return AnalyzeState()

    metrics = artifacts.parse_analysis_metrics(analysis)
    alignment = artifacts.parse_constitution_alignment(analysis)
    violations = artifacts.parse_phase_separation(analysis)

    health = compute_health_score(
        requirements_coverage=metrics.requirement_coverage_pct,
        constitution_compliance=compute_constitution_compliance(alignment),
        phase_separation=compute_phase_separation_score(violations),
        test_coverage=metrics.test_coverage_pct,
    )

    return AnalyzeState(
        exists=True,
        health=health,
        heatmap_columns=HEATMAP_COLUMNS,
        heatmap=build_heatmap_rows(
            artifacts.parse_requirements(spec),
            artifacts.parse_analysis_coverage(analysis),
        ),
        issues=[replace(f, severity=f.severity.lower()) for f in artifacts.parse_analysis_findings(analysis)],
        metrics=metrics,
        constitution_alignment=alignment,
    )
