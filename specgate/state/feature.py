"""
Feature state: everything specgate derives for one feature.

compute_* functions are pure over a FeatureDocuments snapshot.
load_feature_state() is the only entry point that touches the disk, and
it does so once, before any computation starts.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from specgate.lib import artifacts
from specgate.lib.config import ProjectConfig, load_project_config
from specgate.lib.constants import FEATURE_PREFIX_PATTERN
from specgate.lib.context import parse_context
from specgate.lib.documents import FeatureDocuments, read_feature_documents, read_text
from specgate.lib.types import (
    Clarification,
    Duplicates,
    Edge,
    Gaps,
    IntegrityRecord,
    IntegrityStatus,
    ParseAnomaly,
    PipelinePhase,
    Pyramid,
    Requirement,
    StoryLink,
    Task,
    TestSpecification,
    ToDictMixin,
    UserStory,
)

from .analyze import AnalyzeState, compute_analyze_state
from .board import BoardState, compute_board_state
from .bugs import BugsState, compute_bugs_state
from .checklists import ChecklistState, compute_checklist_state
from .integrity import check_integrity, compute_assertion_hash
from .pipeline import PipelineInputs, compute_pipeline_state, resolve_tdd_required
from .traceability import build_edges, build_pyramid, find_duplicates, find_gaps

logger = logging.getLogger(__name__)


@dataclass
class TestifyState(ToDictMixin):
    """Traceability graph, coverage pyramid and assertion integrity."""
    requirements: list[Requirement] = field(default_factory=list)
    test_specs: list[TestSpecification] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    gaps: Gaps = field(default_factory=Gaps)
    pyramid: Pyramid = field(default_factory=Pyramid)
    integrity: IntegrityRecord = field(default_factory=lambda: IntegrityRecord(IntegrityStatus.MISSING))
    exists: bool = False  # any .feature files
    anomalies: list[ParseAnomaly] = field(default_factory=list)
    duplicates: Duplicates = field(default_factory=Duplicates)

    __test__ = False


@dataclass
class FeatureState(ToDictMixin):
    feature_id: str
    pipeline: list[PipelinePhase] = field(default_factory=list)
    checklists: ChecklistState = field(default_factory=ChecklistState)
    testify: TestifyState = field(default_factory=TestifyState)
    stories: list[UserStory] = field(default_factory=list)
    story_links: list[StoryLink] = field(default_factory=list)
    clarifications: list[Clarification] = field(default_factory=list)
    board: BoardState = field(default_factory=BoardState)
    analyze: AnalyzeState = field(default_factory=AnalyzeState)
    bugs: BugsState = field(default_factory=BugsState)


def compute_testify_state(docs: FeatureDocuments) -> TestifyState:
    """Parse requirements, scenarios and tasks, then link them."""
    requirements = artifacts.parse_requirements(docs.spec)
    scenarios = artifacts.parse_feature_files(docs.scenarios)
    tasks = artifacts.parse_tasks(docs.tasks)
    edges = build_edges(requirements, scenarios.specs, tasks)

    integrity = IntegrityRecord(IntegrityStatus.MISSING)
    if docs.scenarios:
        stored = parse_context(docs.feature_context, f"{docs.feature_id}/context.json")
        integrity = check_integrity(compute_assertion_hash(docs.scenario_text), stored.assertion_hash)

    for anomaly in scenarios.anomalies:
        logger.debug(f"{docs.feature_id}: {anomaly.kind} at {anomaly.file}:{anomaly.line}")

    return TestifyState(
        requirements=requirements,
        test_specs=scenarios.specs,
        tasks=tasks,
        edges=edges,
        gaps=find_gaps(requirements, scenarios.specs, edges),
        pyramid=build_pyramid(scenarios.specs),
        integrity=integrity,
        exists=bool(docs.scenarios),
        anomalies=scenarios.anomalies,
        duplicates=find_duplicates(requirements, scenarios.specs, tasks),
    )


def pipeline_inputs(docs: FeatureDocuments, config: ProjectConfig, checklists: ChecklistState, tasks: list[Task]) -> PipelineInputs:
    """Collect the phase rule inputs from a snapshot."""
    policy = parse_context(docs.project_context, config.project_context)
    marker = config.clarification_marker

    def count(text: Optional[str]) -> int:
        return artifacts.count_clarifications(text, marker)

    return PipelineInputs(
        constitution_exists=docs.constitution is not None,
        premise_exists=docs.premise is not None,
        spec_exists=docs.spec is not None,
        plan_exists=docs.plan is not None,
        tasks_exist=docs.tasks is not None,
        test_specs_exist=bool(docs.scenarios),
        analysis_exists=docs.analysis is not None,
        tdd_required=resolve_tdd_required(policy.tdd_determination, docs.constitution),
        checklists=checklists,
        tasks=tasks,
        clarifications={
            "constitution": count(docs.constitution),
            "spec": count(docs.spec),
            "plan": count(docs.plan),
            "checklist": count(docs.checklist_text),
            "tasks": count(docs.tasks),
            "analyze": count(docs.analysis),
        },
    )


def compute_feature_state(docs: FeatureDocuments, config: Optional[ProjectConfig] = None) -> FeatureState:
    """Derive the complete state for one feature from its documents."""
    config = config or ProjectConfig()
    testify = compute_testify_state(docs)
    checklists = compute_checklist_state(docs.checklists)
    stories = artifacts.parse_user_stories(docs.spec)

    return FeatureState(
        feature_id=docs.feature_id,
        pipeline=compute_pipeline_state(pipeline_inputs(docs, config, checklists, testify.tasks)),
        checklists=checklists,
        testify=testify,
        stories=stories,
        story_links=artifacts.parse_story_requirement_refs(docs.spec),
        clarifications=artifacts.parse_clarifications(docs.spec),
        board=compute_board_state(stories, testify.tasks),
        analyze=compute_analyze_state(docs.analysis, docs.spec),
        bugs=compute_bugs_state(docs.bugs, testify.tasks, docs.repo_url),
    )


def load_feature_state(project_dir: Path, feature_id: str, config: Optional[ProjectConfig] = None) -> FeatureState:
    """Read a feature's documents and compute its state.

    Raises:
        FeatureNotFound: if the feature directory doesn't exist
    """
    config = config or load_project_config(project_dir)
    docs = read_feature_documents(project_dir, feature_id, config)
    return compute_feature_state(docs, config)


@dataclass
class FeatureSummary(ToDictMixin):
    id: str  # directory name, e.g. 001-kanban-board
    name: str  # Kanban Board
    stories: int
    progress: str  # "checked/total" tasks


def feature_display_name(feature_id: str) -> str:
    """001-kanban-board -> Kanban Board"""
    slug = FEATURE_PREFIX_PATTERN.sub('', feature_id)
    return ' '.join(word[:1].upper() + word[1:] for word in slug.split('-'))


def list_features(project_dir: Path, config: Optional[ProjectConfig] = None) -> list[FeatureSummary]:
    """List feature directories (those containing a spec) in name order."""
    config = config or load_project_config(project_dir)
    specs_dir = project_dir / config.specs_dir
    if not specs_dir.is_dir():
        return []

    features = []
    for entry in sorted(specs_dir.iterdir(), key=lambda p: p.name):
        if not entry.is_dir():
            continue
        spec = read_text(entry / config.spec)
        if spec is None:
            logger.debug(f"Skipping {entry.name}: no {config.spec}")
            continue

        tasks = artifacts.parse_tasks(read_text(entry / config.tasks))
        checked = sum(1 for t in tasks if t.checked)
        features.append(FeatureSummary(
            id=entry.name,
            name=feature_display_name(entry.name),
            stories=len(artifacts.parse_user_stories(spec)),
            progress=f"{checked}/{len(tasks)}",
        ))
    return features
