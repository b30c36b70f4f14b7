"""
Feature document snapshot.

Reads every document a feature's state depends on, once and up front,
into a FeatureDocuments value. Everything downstream works on that
snapshot and never touches the filesystem again.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .config import ProjectConfig
from .git import remote_url

logger = logging.getLogger(__name__)


class FeatureNotFound(FileNotFoundError):
    """The requested feature directory does not exist."""

    def __init__(self, feature_id: str, path: Path):
        self.feature_id = feature_id
        self.path = path
        super().__init__(f"Feature '{feature_id}' not found: {path}")


@dataclass(frozen=True)
class NamedText:
    """A document read from a directory listing."""
    name: str  # filename, e.g. "login.feature"
    text: str


@dataclass
class FeatureDocuments:
    """Raw text of a feature's documents. None means the document is absent."""
    feature_id: str
    constitution: Optional[str] = None
    premise: Optional[str] = None
    project_context: Optional[str] = None
    spec: Optional[str] = None
    plan: Optional[str] = None
    tasks: Optional[str] = None
    analysis: Optional[str] = None
    bugs: Optional[str] = None
    feature_context: Optional[str] = None
    checklists: list[NamedText] = field(default_factory=list)
    scenarios: list[NamedText] = field(default_factory=list)
    repo_url: Optional[str] = None  # origin remote, only looked up when bugs.md exists

    @property
    def scenario_text(self) -> str:
        """All scenario files joined in filename order."""
        return "\n".join(doc.text for doc in sorted(self.scenarios, key=lambda d: d.name))

    @property
    def checklist_text(self) -> str:
        return "\n".join(doc.text for doc in self.checklists)


def read_text(path: Path) -> Optional[str]:
    """Read a document as UTF-8, or None if it isn't there.

    Undecodable bytes are replaced rather than raised. Line endings are
    left untouched. Permission and other I/O errors propagate.
    """
    if not path.is_file():
        return None
    return path.read_bytes().decode("utf-8", errors="replace")


def read_dir(directory: Path, suffix: str, exclude: tuple[str, ...] | list[str] = ()) -> list[NamedText]:
    """Read all files with suffix in directory, sorted by filename.

    A missing directory yields an empty list.
    """
    if not directory.is_dir():
        logger.debug(f"No directory at {directory}")
        return []

    docs = []
    for path in sorted(directory.iterdir(), key=lambda p: p.name):
        if not path.is_file() or not path.name.endswith(suffix) or path.name in exclude:
            continue
        docs.append(NamedText(name=path.name, text=read_text(path) or ""))
    return docs


def feature_dir(project_dir: Path, feature_id: str, config: ProjectConfig) -> Path:
    return project_dir / config.specs_dir / feature_id


def read_feature_documents(project_dir: Path, feature_id: str, config: ProjectConfig) -> FeatureDocuments:
    """Snapshot every document for one feature.

    Raises:
        FeatureNotFound: if the feature directory doesn't exist
    """
    fdir = feature_dir(project_dir, feature_id, config)
    if not fdir.is_dir():
        raise FeatureNotFound(feature_id, fdir)

    bugs = read_text(fdir / config.bugs)

    return FeatureDocuments(
        feature_id=feature_id,
        constitution=read_text(project_dir / config.constitution),
        premise=read_text(project_dir / config.premise),
        project_context=read_text(project_dir / config.project_context),
        spec=read_text(fdir / config.spec),
        plan=read_text(fdir / config.plan),
        tasks=read_text(fdir / config.tasks),
        analysis=read_text(fdir / config.analysis),
        bugs=bugs,
        feature_context=read_text(fdir / config.feature_context),
        checklists=read_dir(fdir / config.checklists_dir, ".md", exclude=config.checklist_exclude),
        scenarios=read_dir(fdir / config.features_dir, ".feature"),
        repo_url=remote_url(project_dir) if bugs is not None else None,
    )
