"""
Artifact parsers for specgate.

Extracts typed records from feature documents: requirements and user
stories from spec.md, scenarios from .feature files, tasks from tasks.md,
items from checklists, report tables from analysis.md and entries from
bugs.md. Every parser is line-oriented and pattern-based; a missing or
empty document yields an empty result.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from .constants import DEFAULT_CLARIFICATION_MARKER
from .types import (
    AlignmentEntry,
    AnalysisMetrics,
    Bug,
    ChecklistItem,
    Clarification,
    CoverageEntry,
    Finding,
    ParseAnomaly,
    PhaseViolation,
    Requirement,
    RequirementKind,
    StoryLink,
    Task,
    TestSpecification,
    TestType,
    UserStory,
)

logger = logging.getLogger(__name__)

# spec.md
REQUIREMENT_RE = re.compile(r'- \*\*(FR|SC)-(\d+)\*\*:\s*(.*)')
STORY_HEADING_RE = re.compile(r'### User Story (\d+) - (.+?) \(Priority: (P\d+)\)')
STORY_SCENARIO_RE = re.compile(r'^\d+\.\s+\*\*Given\*\*', re.MULTILINE)
FR_REF_RE = re.compile(r'FR-\d+')
CLARIFICATIONS_HEADING_RE = re.compile(r'^## Clarifications')
SESSION_RE = re.compile(r'^### Session (\d{4}-\d{2}-\d{2})')
QA_RE = re.compile(r'^- Q:\s*(.*?)\s*->\s*A:\s*(.*)')
Q_START_RE = re.compile(r'^- Q:\s*(.+)')
INLINE_ANSWER_RE = re.compile(r'->\s*A:\s*(.*)')
QA_REFS_RE = re.compile(r'\[((?:(?:FR|US|SC)-\w+(?:,\s*)?)+)\]\s*$')

# .feature files
TAG_RE = re.compile(r'@[\w-]+')
SCENARIO_RE = re.compile(r'^Scenario(?: Outline)?:\s*(.+)')
TS_ID_TAG_RE = re.compile(r'^@TS-\d+$')
TYPE_TAG_RE = re.compile(r'^@(acceptance|contract|validation)$')
PRIORITY_TAG_RE = re.compile(r'^@P\d+$')
TRACE_TAG_RE = re.compile(r'^@((?:FR|SC|US)-\d+)$')
TAG_RESET_PREFIXES = ('Feature:', 'Background:', 'Rule:', 'Examples:')

# tasks.md
TASK_RE = re.compile(r'- \[([ x])\] (T(?:-B)?\d+)\s+(\[P\]\s*)?(?:\[(US\d+|BUG-\d+)\]\s*)?(.*)')
BUG_TAG_RE = re.compile(r'^BUG-\d+$')
TS_REF_RE = re.compile(r'TS-\d+')

# checklists
CHECKLIST_HEADING_RE = re.compile(r'^#{2,3}\s+(.+)')
CHECKLIST_ITEM_RE = re.compile(r'^- \[([ xX])\]\s+(.*)')
CHK_ID_RE = re.compile(r'^(CHK-\d{3})\s+')
TRAILING_TAG_RE = re.compile(r'\[([^\]]+)\]\s*$')

# analysis.md
RESOLVED_SEVERITY_RE = re.compile(r'~~(\w+)~~\s*RESOLVED')
METRIC_BULLET_RE = re.compile(r'^-\s+(.+?):\s+(.+)$', re.MULTILINE)
PERCENT_RE = re.compile(r'(\d+)%')
LEADING_INT_RE = re.compile(r'^\s*(\d+)')
NONE_DETECTED_RE = re.compile(r'none detected', re.IGNORECASE)
EMPTY_CELLS = ('', '\u2014', '-', '\u2013')  # placeholder cells

# bugs.md
BUG_HEADING_RE = re.compile(r'^## (BUG-\d+)\s*$', re.MULTILINE)
BUG_SEVERITIES = ("critical", "high", "medium", "low")
BUG_STATUSES = ("reported", "fixed")

# CONSTITUTION.md (keep in sync with the authoring workflow's TDD assessment)
TDD_TERMS_RE = re.compile(
    r'\btdd\b|\bbdd\b|test-first|red-green-refactor|write tests before'
    r'|tests must be written before|test-driven|behavior-driven|behaviour-driven'
)
MANDATORY_TERMS_RE = re.compile(r'\bmust\b|\brequired\b|non-negotiable')


def _unique(items) -> tuple[str, ...]:
    """De-duplicate preserving first-occurrence order."""
    return tuple(dict.fromkeys(items))


def _lines(content: Optional[str]) -> list[str]:
    return content.split('\n') if content else []


# ---------------------------------------------------------------------------
# spec.md
# ---------------------------------------------------------------------------


def parse_requirements(content: Optional[str]) -> list[Requirement]:
    """Extract FR-xxx requirements then SC-xxx success criteria.

    Pattern: - **FR-001**: description
    """
    functional = []
    criteria = []
    for match in REQUIREMENT_RE.finditer(content or ""):
        prefix, number, text = match.groups()
        if prefix == "FR":
            functional.append(Requirement(f"FR-{number}", RequirementKind.FUNCTIONAL, text.strip()))
        else:
            criteria.append(Requirement(f"SC-{number}", RequirementKind.SUCCESS_CRITERION, text.strip()))
    return functional + criteria


def _story_sections(content: str) -> list[tuple[re.Match, str]]:
    """Split spec.md into (heading match, section text) per user story."""
    starts = list(STORY_HEADING_RE.finditer(content))
    sections = []
    for i, match in enumerate(starts):
        end = starts[i + 1].start() if i + 1 < len(starts) else len(content)
        sections.append((match, content[match.start():end]))
    return sections


def parse_user_stories(content: Optional[str]) -> list[UserStory]:
    """Extract user stories.

    Pattern: ### User Story 1 - Title (Priority: P1)
    """
    if not content:
        return []

    stories = []
    for match, section in _story_sections(content):
        _, _, body = section.partition('\n')
        separator = body.find('\n---')
        if separator >= 0:
            body = body[:separator]

        stories.append(UserStory(
            id=f"US{match.group(1)}",
            title=match.group(2).strip(),
            priority=match.group(3),
            scenario_count=len(STORY_SCENARIO_RE.findall(section)),
            body=body.strip(),
        ))
    return stories


def parse_story_requirement_refs(content: Optional[str]) -> list[StoryLink]:
    """Link each user story to every FR-xxx mentioned in its section."""
    if not content:
        return []

    links = []
    for match, section in _story_sections(content):
        story_id = f"US{match.group(1)}"
        for fr_id in _unique(FR_REF_RE.findall(section)):
            links.append(StoryLink(story_id, fr_id))
    return links


def _split_refs(answer: str) -> tuple[str, tuple[str, ...]]:
    """Split trailing [FR-001, US-2] references off an answer."""
    refs_match = QA_REFS_RE.search(answer)
    if not refs_match:
        return answer, ()
    refs = tuple(r.strip() for r in re.split(r',\s*', refs_match.group(1)) if r.strip())
    return answer[:answer.rfind('[')].strip(), refs


def _is_boundary(line: str) -> bool:
    return line.startswith('- Q:') or line.startswith('### ') or line.startswith('## ')


def parse_clarifications(content: Optional[str]) -> list[Clarification]:
    """Extract Q&A pairs from the ## Clarifications section.

    Sessions are opened by "### Session YYYY-MM-DD". Each entry is
    "- Q: question -> A: answer [FR-001]", either on one line or with the
    question and answer continued on indented lines.
    """
    lines = _lines(content)
    results = []
    session = None
    in_section = False

    for i, line in enumerate(lines):
        if CLARIFICATIONS_HEADING_RE.match(line):
            in_section = True
            continue
        if in_section and line.startswith('## '):
            break
        if not in_section:
            continue

        session_match = SESSION_RE.match(line)
        if session_match:
            session = session_match.group(1)
            continue
        if session is None:
            continue

        qa_match = QA_RE.match(line)
        if qa_match:
            answer, refs = _split_refs(qa_match.group(2).strip())
            results.append(Clarification(session, qa_match.group(1).strip(), answer, refs))
            continue

        q_match = Q_START_RE.match(line)
        if not q_match:
            continue

        # Multi-line entry: question continues until a line carrying "-> A:"
        question = q_match.group(1).strip()
        answer = None
        for j in range(i + 1, len(lines)):
            nxt = lines[j]
            if _is_boundary(nxt):
                break
            answer_match = INLINE_ANSWER_RE.search(nxt)
            if answer_match:
                before = nxt[:nxt.find('->')].strip()
                if before:
                    question += ' ' + before
                answer = answer_match.group(1).strip()
                for cont in lines[j + 1:]:
                    if _is_boundary(cont) or not cont.strip() or not cont[:1].isspace():
                        break
                    answer += ' ' + cont.strip()
                break
            if nxt[:1].isspace():
                question += ' ' + nxt.strip()

        if answer is not None:
            answer, refs = _split_refs(answer)
            results.append(Clarification(session, question, answer, refs))

    return results


def count_clarifications(content: Optional[str], marker: str = DEFAULT_CLARIFICATION_MARKER) -> int:
    """Count clarification marker lines (resolved "- Q:" entries by default)."""
    if not content:
        return 0
    return len(re.findall(marker, content, re.MULTILINE))


def constitution_requires_tdd(content: Optional[str]) -> bool:
    """Whether the constitution mandates test-first development.

    Needs both a test-first term and a mandatory term somewhere in the text.
    """
    if not content:
        return False
    lowered = content.lower()
    return bool(TDD_TERMS_RE.search(lowered)) and bool(MANDATORY_TERMS_RE.search(lowered))


# ---------------------------------------------------------------------------
# .feature files
# ---------------------------------------------------------------------------


@dataclass
class ScenarioParse:
    """Scenarios extracted from one or more .feature files."""
    specs: list[TestSpecification] = field(default_factory=list)
    anomalies: list[ParseAnomaly] = field(default_factory=list)


def parse_test_specs(content: Optional[str], filename: Optional[str] = None) -> ScenarioParse:
    """Extract tagged scenarios from .feature content.

    Tags on the lines above "Scenario:" / "Scenario Outline:" describe it:
    @TS-001 is the id, @acceptance/@contract/@validation the type, @P1 the
    priority and @FR-/@SC-/@US- tags the traceability links.

    A scenario without an id tag is not recorded. A scenario without a type
    tag is recorded as validation. Both are reported as anomalies.
    """
    result = ScenarioParse()
    pending: list[str] = []

    for lineno, line in enumerate(_lines(content), 1):
        stripped = line.strip()

        if stripped.startswith('@'):
            pending.extend(TAG_RE.findall(stripped))
            continue

        scenario_match = SCENARIO_RE.match(stripped)
        if scenario_match:
            title = scenario_match.group(1).strip()
            tags, pending = pending, []

            id_tag = next((t for t in tags if TS_ID_TAG_RE.match(t)), None)
            if id_tag is None:
                result.anomalies.append(ParseAnomaly(
                    "missing-id-tag", filename, lineno, f"Scenario '{title}' has no @TS-xxx tag"))
                logger.debug(f"Skipping scenario without id at {filename}:{lineno}")
                continue
            ts_id = id_tag[1:]

            type_tag = next((t for t in tags if TYPE_TAG_RE.match(t)), None)
            if type_tag is None:
                result.anomalies.append(ParseAnomaly(
                    "missing-type-tag", filename, lineno, f"{ts_id} has no type tag, assuming validation"))
                test_type = TestType.VALIDATION
            else:
                test_type = TestType(type_tag[1:])

            priority_tag = next((t for t in tags if PRIORITY_TAG_RE.match(t)), None)

            result.specs.append(TestSpecification(
                id=ts_id,
                title=title,
                type=test_type,
                priority=priority_tag[1:] if priority_tag else "P3",
                traceability=_unique(t[1:] for t in tags if TRACE_TAG_RE.match(t)),
                file=filename,
                line=lineno,
            ))
            continue

        if stripped.startswith(TAG_RESET_PREFIXES):
            pending = []

    return result


def parse_feature_files(files) -> ScenarioParse:
    """Parse (name, text) documents in filename order."""
    combined = ScenarioParse()
    for doc in sorted(files, key=lambda d: d.name):
        parsed = parse_test_specs(doc.text, doc.name)
        combined.specs.extend(parsed.specs)
        combined.anomalies.extend(parsed.anomalies)
    return combined


# ---------------------------------------------------------------------------
# tasks.md
# ---------------------------------------------------------------------------


def parse_tasks(content: Optional[str]) -> list[Task]:
    """Extract tasks with checkbox state, tags and TS-xxx references.

    Pattern: - [x] T001 [P] [US1] Description (must pass TS-001)
    Bug fix tasks use T-B001 ids and a [BUG-001] tag.
    """
    tasks = []
    for match in TASK_RE.finditer(content or ""):
        mark, task_id, parallel, tag, description = match.groups()
        is_bug_tag = bool(tag and BUG_TAG_RE.match(tag))
        description = description.strip()

        tasks.append(Task(
            id=task_id,
            description=description,
            checked=mark == 'x',
            test_spec_refs=_unique(TS_REF_RE.findall(description)),
            story_tag=tag if tag and not is_bug_tag else None,
            bug_tag=tag if is_bug_tag else None,
            parallel=parallel is not None,
        ))
    return tasks


# ---------------------------------------------------------------------------
# checklists
# ---------------------------------------------------------------------------


def checklist_display_name(filename: str) -> str:
    """api-design.md -> Api Design"""
    base = filename[:-3] if filename.endswith('.md') else filename
    return ' '.join(word[:1].upper() + word[1:] for word in base.split('-'))


def parse_checklist_items(content: Optional[str]) -> list[ChecklistItem]:
    """Extract checkbox items with their category, CHK id and trailing tags."""
    items = []
    category = None

    for line in _lines(content):
        heading = CHECKLIST_HEADING_RE.match(line)
        if heading:
            category = heading.group(1).strip()
            continue

        item_match = CHECKLIST_ITEM_RE.match(line)
        if not item_match:
            continue

        text = item_match.group(2).strip()
        chk_id = None
        chk_match = CHK_ID_RE.match(text)
        if chk_match:
            chk_id = chk_match.group(1)
            text = text[chk_match.end():]

        tags = []
        tag_match = TRAILING_TAG_RE.search(text)
        while tag_match:
            tags.insert(0, tag_match.group(1))
            text = text[:tag_match.start()].strip()
            tag_match = TRAILING_TAG_RE.search(text)

        items.append(ChecklistItem(
            text=text,
            checked=item_match.group(1).lower() == 'x',
            chk_id=chk_id,
            category=category,
            tags=tuple(tags),
        ))
    return items


# ---------------------------------------------------------------------------
# analysis.md
# ---------------------------------------------------------------------------


def extract_section(content: Optional[str], heading: str) -> Optional[str]:
    """Text under "## heading" up to the next "## " heading, stripped."""
    if not content:
        return None
    match = re.search(rf'^## {re.escape(heading)}\s*$', content, re.MULTILINE)
    if not match:
        return None
    end = content.find('\n## ', match.end())
    return content[match.end():end if end >= 0 else len(content)].strip()


def parse_markdown_table(text: str) -> list[list[str]]:
    """Rows of a pipe table, without the header and separator rows."""
    lines = [line for line in text.split('\n') if line.strip().startswith('|')]
    rows = []
    for line in lines[2:]:
        cells = [cell.strip() for cell in line.split('|')[1:-1]]
        if any(cells):
            rows.append(cells)
    return rows


def _cell(cells: list[str], index: int) -> str:
    return cells[index] if index < len(cells) else ''


def _is_yes(cell: str) -> bool:
    return cell.lower() == 'yes'


def parse_id_list(cell: str) -> tuple[str, ...]:
    """Split "T001, T002" into ids. A dash cell means none."""
    if cell in EMPTY_CELLS:
        return ()
    return tuple(s.strip() for s in cell.split(',') if s.strip() not in EMPTY_CELLS)


def parse_analysis_findings(content: Optional[str]) -> list[Finding]:
    """Rows of the Findings table.

    Columns: ID | Category | Severity | Location | Summary | Recommendation.
    A severity written as "~~HIGH~~ RESOLVED" is HIGH and resolved.
    """
    section = extract_section(content, 'Findings')
    if not section:
        return []

    findings = []
    for cells in parse_markdown_table(section):
        if len(cells) < 6:
            continue
        resolved = RESOLVED_SEVERITY_RE.search(cells[2])
        findings.append(Finding(
            id=cells[0],
            category=cells[1],
            severity=resolved.group(1) if resolved else cells[2],
            resolved=resolved is not None,
            location=cells[3],
            summary=cells[4],
            recommendation=cells[5],
        ))
    return findings


def parse_analysis_coverage(content: Optional[str]) -> list[CoverageEntry]:
    """Rows of the Coverage Summary table.

    The first row's width picks the format:
    - 3+ columns: Requirement | Has Task? | Notes
    - 6+ columns: ... | Task IDs | Has Test? | Test IDs | Status
    - 8+ columns: ... | Test IDs | Has Plan? | Plan Refs | Status
    """
    section = extract_section(content, 'Coverage Summary')
    if not section:
        return []
    rows = parse_markdown_table(section)
    if not rows:
        return []

    width = len(rows[0])
    entries = []
    for cells in rows:
        req_id = cells[0]
        has_task = _is_yes(_cell(cells, 1))

        if width < 6:
            entries.append(CoverageEntry(req_id, has_task, notes=_cell(cells, 2)))
            continue

        status_index = 7 if width >= 8 else 5
        status = _cell(cells, status_index)
        entries.append(CoverageEntry(
            id=req_id,
            has_task=has_task,
            task_ids=parse_id_list(_cell(cells, 2)),
            has_test=_is_yes(_cell(cells, 3)),
            test_ids=parse_id_list(_cell(cells, 4)),
            has_plan=_is_yes(_cell(cells, 5)) if width >= 8 else None,
            plan_refs=parse_id_list(_cell(cells, 6)) if width >= 8 else (),
            status=None if status in EMPTY_CELLS else status,
        ))
    return entries


def _leading_int(raw: Optional[str]) -> int:
    match = LEADING_INT_RE.match(raw or '')
    return int(match.group(1)) if match else 0


def _percent(raw: Optional[str]) -> Optional[int]:
    match = PERCENT_RE.search(raw or '')
    return int(match.group(1)) if match else None


def parse_analysis_metrics(content: Optional[str]) -> AnalysisMetrics:
    """Key/value pairs of the Metrics section.

    Accepts a "| Metric | Value |" table or "- Metric: Value" bullets.
    Keys are matched by case-insensitive substring.
    """
    section = extract_section(content, 'Metrics')
    if not section:
        return AnalysisMetrics()

    values = {}
    rows = parse_markdown_table(section)
    if rows:
        for cells in rows:
            if len(cells) >= 2:
                values[cells[0].lower()] = cells[1]
    else:
        for match in METRIC_BULLET_RE.finditer(section):
            values[match.group(1).strip().lower()] = match.group(2).strip()

    def find(key: str) -> Optional[str]:
        return next((v for k, v in values.items() if key in k), None)

    req_coverage = find('requirement coverage')
    test_coverage = find('test coverage')

    return AnalysisMetrics(
        total_requirements=_leading_int(find('total requirements')),
        total_tasks=_leading_int(find('total tasks')),
        total_test_specs=_leading_int(find('total test spec')),
        requirement_coverage=req_coverage or '',
        requirement_coverage_pct=_percent(req_coverage) or 0,
        test_coverage=test_coverage,
        test_coverage_pct=(_percent(test_coverage) or 0) if test_coverage else 100,
        critical_issues=_leading_int(find('critical')),
        high_issues=_leading_int(find('high')),
        medium_issues=_leading_int(find('medium')),
        low_issues=_leading_int(find('low')),
    )


def parse_constitution_alignment(content: Optional[str]) -> list[AlignmentEntry]:
    """Rows of the Constitution Alignment table (Principle | Status | Evidence)."""
    section = extract_section(content, 'Constitution Alignment')
    if not section:
        return []
    if NONE_DETECTED_RE.search(section) and '|' not in section:
        return []

    return [
        AlignmentEntry(principle=cells[0], status=cells[1], evidence=cells[2])
        for cells in parse_markdown_table(section)
        if len(cells) >= 3
    ]


def parse_phase_separation(content: Optional[str]) -> list[PhaseViolation]:
    """Rows of the Phase Separation Violations table (Artifact | Status | Severity).

    "None detected" ahead of any table means no violations.
    """
    section = extract_section(content, 'Phase Separation Violations')
    if not section:
        return []

    none_match = NONE_DETECTED_RE.search(section)
    table_start = section.find('|')
    if none_match and (table_start < 0 or none_match.start() < table_start):
        return []

    violations = []
    for cells in parse_markdown_table(section):
        if len(cells) < 2:
            continue
        severity = _cell(cells, 2)
        violations.append(PhaseViolation(
            artifact=cells[0],
            status=cells[1],
            severity=None if severity in EMPTY_CELLS else severity,
        ))
    return violations


# ---------------------------------------------------------------------------
# bugs.md
# ---------------------------------------------------------------------------


def _bug_field(section: str, name: str) -> Optional[str]:
    """Value of "**Name**: value"; placeholders like _(none)_ are None."""
    match = re.search(rf'\*\*{re.escape(name)}\*\*:[ \t]*(.+)', section)
    if not match:
        return None
    value = match.group(1).strip()
    if not value or value.startswith('_('):
        return None
    return value


def parse_bugs(content: Optional[str]) -> list[Bug]:
    """Extract bug entries opened by "## BUG-001" headings.

    Unknown severities read as medium and unknown statuses as reported.
    """
    if not content:
        return []

    starts = list(BUG_HEADING_RE.finditer(content))
    bugs = []
    for i, match in enumerate(starts):
        end = starts[i + 1].start() if i + 1 < len(starts) else len(content)
        section = content[match.start():end]

        severity = (_bug_field(section, 'Severity') or '').lower()
        status = (_bug_field(section, 'Status') or '').lower()
        bugs.append(Bug(
            id=match.group(1),
            severity=severity if severity in BUG_SEVERITIES else 'medium',
            status=status if status in BUG_STATUSES else 'reported',
            reported=_bug_field(section, 'Reported'),
            github_issue=_bug_field(section, 'GitHub Issue'),
            description=_bug_field(section, 'Description'),
            root_cause=_bug_field(section, 'Root Cause'),
            fix_reference=_bug_field(section, 'Fix Reference'),
        ))
    return bugs
