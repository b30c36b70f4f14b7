"""Shared constants for specgate."""

import re

# Pipeline phases in workflow order
PHASE_IDS = (
    "constitution",
    "spec",
    "plan",
    "checklist",
    "testify",
    "tasks",
    "analyze",
    "implement",
)

PHASE_NAMES = {
    "constitution": "Constitution",
    "spec": "Spec",
    "plan": "Plan",
    "checklist": "Checklist",
    "testify": "Testify",
    "tasks": "Tasks",
    "analyze": "Analyze",
    "implement": "Implement",
}

# Phases that never carry a clarification badge
UNCLARIFIED_PHASES = ("testify", "implement")

# Persisted test-first policy values (context.json "tdd_determination")
TDD_MANDATORY = "mandatory"
TDD_OPTIONAL = "optional"
TDD_FORBIDDEN = "forbidden"
TDD_DETERMINATIONS = (TDD_MANDATORY, TDD_OPTIONAL, TDD_FORBIDDEN)

# Feature directories are named NNN-slug, e.g. 001-kanban-board
FEATURE_PREFIX_PATTERN = re.compile(r'^\d+-')

DEFAULT_CLARIFICATION_MARKER = r'^- Q: '
