"""
Project layout configuration for specgate.

Loads specgate.yaml from the project root to locate feature documents.
If no config file exists, returns defaults matching the standard layout:

    CONSTITUTION.md
    PREMISE.md
    .specify/context.json
    specs/<feature>/spec.md, plan.md, tasks.md, analysis.md, bugs.md, context.json
    specs/<feature>/checklists/*.md
    specs/<feature>/tests/features/*.feature

The test-first policy and the stored assertion hash are NOT configured
here. They live in the persisted context documents (see context.py).
"""

import logging
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import yaml

from .constants import DEFAULT_CLARIFICATION_MARKER

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "specgate.yaml"


@dataclass
class ProjectConfig:
    """Layout configuration from specgate.yaml.

    Project-level paths are relative to the project root; feature-level
    paths are relative to the feature directory.
    """
    specs_dir: str = "specs"
    constitution: str = "CONSTITUTION.md"
    premise: str = "PREMISE.md"
    project_context: str = ".specify/context.json"
    spec: str = "spec.md"
    plan: str = "plan.md"
    tasks: str = "tasks.md"
    analysis: str = "analysis.md"
    bugs: str = "bugs.md"
    feature_context: str = "context.json"
    checklists_dir: str = "checklists"
    checklist_exclude: list[str] = field(default_factory=lambda: ["requirements.md"])
    features_dir: str = "tests/features"
    clarification_marker: str = DEFAULT_CLARIFICATION_MARKER

    def clarification_pattern(self) -> re.Pattern:
        return re.compile(self.clarification_marker, re.MULTILINE)


def load_project_config(project_dir: Optional[Path]) -> ProjectConfig:
    """Load specgate.yaml and return ProjectConfig.

    If project_dir is None or the file doesn't exist, returns defaults.
    A broken file logs a warning and falls back to defaults.
    """
    if project_dir is None:
        return ProjectConfig()

    config_path = project_dir / CONFIG_FILENAME
    if not config_path.exists():
        return ProjectConfig()

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse {config_path}: {e}")
        return ProjectConfig()

    if data is None:
        return ProjectConfig()
    if not isinstance(data, dict):
        logger.warning(f"Ignoring {config_path}: expected a mapping, got {type(data).__name__}")
        return ProjectConfig()

    known = {f.name: f for f in fields(ProjectConfig)}
    values = {}
    for key, value in data.items():
        if key not in known:
            logger.warning(f"Unknown key '{key}' in {config_path}, ignoring")
            continue
        if key == "checklist_exclude":
            if not isinstance(value, list):
                logger.warning(f"'checklist_exclude' in {config_path} must be a list, ignoring")
                continue
            values[key] = [str(v) for v in value]
        elif isinstance(value, str) and value:
            values[key] = value
        else:
            logger.warning(f"'{key}' in {config_path} must be a non-empty string, ignoring")

    config = ProjectConfig(**values)

    try:
        config.clarification_pattern()
    except re.error as e:
        logger.warning(f"Invalid clarification_marker in {config_path}: {e}")
        config.clarification_marker = DEFAULT_CLARIFICATION_MARKER

    return config
