"""
Bug tracking: bugs.md entries cross-referenced with their T-B fix tasks.
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from specgate.lib.artifacts import BUG_SEVERITIES, parse_bugs
from specgate.lib.types import Bug, Task, ToDictMixin

SSH_REMOTE_RE = re.compile(r'^git@([^:]+):(.+?)(?:\.git)?$')
ISSUE_NUMBER_RE = re.compile(r'#(\d+)')


@dataclass
class FixTasks(ToDictMixin):
    total: int = 0
    checked: int = 0
    tasks: list[Task] = field(default_factory=list)


@dataclass
class BugEntry(ToDictMixin):
    bug: Bug
    fix_tasks: FixTasks = field(default_factory=FixTasks)
    issue_url: Optional[str] = None

    def to_dict(self) -> dict:
        data = self.bug.to_dict()
        data["fix_tasks"] = self.fix_tasks.to_dict()
        data["issue_url"] = self.issue_url
        return data


@dataclass
class BugSummary(ToDictMixin):
    total: int = 0
    open: int = 0
    fixed: int = 0
    highest_open_severity: Optional[str] = None
    by_severity: dict[str, int] = field(default_factory=lambda: dict.fromkeys(BUG_SEVERITIES, 0))


@dataclass
class BugsState(ToDictMixin):
    exists: bool = False  # bugs.md present
    bugs: list[BugEntry] = field(default_factory=list)
    orphaned_tasks: list[Task] = field(default_factory=list)  # T-B tasks for unknown bugs
    summary: BugSummary = field(default_factory=BugSummary)
    repo_url: Optional[str] = None


def normalize_repo_url(url: str) -> str:
    """git@github.com:org/repo.git -> https://github.com/org/repo"""
    url = url.strip()
    ssh = SSH_REMOTE_RE.match(url)
    if ssh:
        url = f"https://{ssh.group(1)}/{ssh.group(2)}"
    return url[:-4] if url.endswith(".git") else url


def resolve_issue_url(issue_ref: Optional[str], repo_url: Optional[str]) -> Optional[str]:
    """Turn "#13" into <repo>/issues/13. Placeholders like _(none)_ give None."""
    if not issue_ref or not repo_url or issue_ref.startswith("_("):
        return None
    number = ISSUE_NUMBER_RE.search(issue_ref)
    if not number:
        return None
    return f"{normalize_repo_url(repo_url)}/issues/{number.group(1)}"


def _severity_rank(bug: Bug) -> int:
    return BUG_SEVERITIES.index(bug.severity) if bug.severity in BUG_SEVERITIES else len(BUG_SEVERITIES) - 1


def compute_bugs_state(content: Optional[str], tasks: list[Task], repo_url: Optional[str] = None) -> BugsState:
    """Bugs ordered by severity (critical first) then id, with fix progress.

    Args:
        content: bugs.md text, or None if the file doesn't exist
        tasks: Parsed tasks.md tasks
        repo_url: origin remote URL, used to link GitHub issue refs
    """
    if content is None:
        return BugsState()

    repo_url = normalize_repo_url(repo_url) if repo_url else None
    bugs = sorted(parse_bugs(content), key=lambda b: (_severity_rank(b), b.id))
    bug_ids = {b.id for b in bugs}

    by_bug: dict[str, list[Task]] = {}
    fix_tasks = [t for t in tasks if t.is_bug_fix and t.bug_tag]
    for task in fix_tasks:
        by_bug.setdefault(task.bug_tag, []).append(task)

    entries = []
    for bug in bugs:
        linked = by_bug.get(bug.id, [])
        entries.append(BugEntry(
            bug=bug,
            fix_tasks=FixTasks(len(linked), sum(1 for t in linked if t.checked), linked),
            issue_url=resolve_issue_url(bug.github_issue, repo_url),
        ))

    summary = BugSummary(total=len(bugs))
    for bug in bugs:
        if bug.status == "fixed":
            summary.fixed += 1
            continue
        summary.open += 1
        summary.by_severity[bug.severity] += 1
    summary.highest_open_severity = next((s for s in BUG_SEVERITIES if summary.by_severity[s]), None)

    return BugsState(
        exists=True,
        bugs=entries,
        orphaned_tasks=[t for t in fix_tasks if t.bug_tag not in bug_ids],
        summary=summary,
        repo_url=repo_url,
    )
