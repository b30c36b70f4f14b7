"""
State computation for specgate.

Turns a snapshot of feature documents into pipeline status, the
traceability graph, checklist gate, assertion integrity, analysis
health and the bug list.
"""

from specgate.state.analyze import AnalyzeState, HealthScore, compute_analyze_state, compute_health_score
from specgate.state.board import BoardCard, BoardState, compute_board_state
from specgate.state.bugs import BugsState, compute_bugs_state, resolve_issue_url
from specgate.state.checklists import (
    ChecklistState,
    compute_checklist_state,
    compute_gate_status,
    percentage_to_color,
)
from specgate.state.feature import (
    FeatureState,
    FeatureSummary,
    TestifyState,
    compute_feature_state,
    compute_testify_state,
    list_features,
    load_feature_state,
)
from specgate.state.integrity import check_integrity, compute_assertion_hash
from specgate.state.pipeline import PipelineInputs, compute_pipeline_state, resolve_tdd_required
from specgate.state.traceability import build_edges, build_pyramid, find_duplicates, find_gaps

__all__ = [
    "AnalyzeState",
    "HealthScore",
    "compute_analyze_state",
    "compute_health_score",
    "BoardCard",
    "BoardState",
    "compute_board_state",
    "BugsState",
    "compute_bugs_state",
    "resolve_issue_url",
    "ChecklistState",
    "compute_checklist_state",
    "compute_gate_status",
    "percentage_to_color",
    "FeatureState",
    "FeatureSummary",
    "TestifyState",
    "compute_feature_state",
    "compute_testify_state",
    "list_features",
    "load_feature_state",
    "check_integrity",
    "compute_assertion_hash",
    "PipelineInputs",
    "compute_pipeline_state",
    "resolve_tdd_required",
    "build_edges",
    "build_pyramid",
    "find_duplicates",
    "find_gaps",
]
