"""
Story board: user stories placed in todo / in_progress / done columns
by the completion of the tasks tagged for them.
"""

from dataclasses import dataclass, field

from specgate.lib.types import Task, ToDictMixin, UserStory

TODO = "todo"
IN_PROGRESS = "in_progress"
DONE = "done"


@dataclass
class BoardCard(ToDictMixin):
    id: str
    title: str
    priority: str
    column: str
    progress: str  # "checked/total"
    tasks: list[Task] = field(default_factory=list)
    is_bug_card: bool = False


@dataclass
class BoardState(ToDictMixin):
    todo: list[BoardCard] = field(default_factory=list)
    in_progress: list[BoardCard] = field(default_factory=list)
    done: list[BoardCard] = field(default_factory=list)

    def add(self, card: BoardCard) -> None:
        getattr(self, card.column).append(card)

    def cards(self) -> list[BoardCard]:
        return self.todo + self.in_progress + self.done


def _column(tasks: list[Task]) -> str:
    checked = sum(1 for t in tasks if t.checked)
    if not tasks or checked == 0:
        return TODO
    if checked == len(tasks):
        return DONE
    return IN_PROGRESS


def _card(card_id: str, title: str, priority: str, tasks: list[Task], is_bug_card: bool = False) -> BoardCard:
    checked = sum(1 for t in tasks if t.checked)
    return BoardCard(
        id=card_id,
        title=title,
        priority=priority,
        column=_column(tasks),
        progress=f"{checked}/{len(tasks)}",
        tasks=tasks,
        is_bug_card=is_bug_card,
    )


def compute_board_state(stories: list[UserStory], tasks: list[Task]) -> BoardState:
    """Assign each story a column, plus cards for untagged and bug-fix tasks.

    - todo: no tasks, or none checked
    - in_progress: some checked
    - done: all checked
    """
    by_story: dict[str, list[Task]] = {}
    by_bug: dict[str, list[Task]] = {}
    untagged: list[Task] = []

    for task in tasks:
        if task.story_tag:
            by_story.setdefault(task.story_tag, []).append(task)
        elif task.bug_tag:
            by_bug.setdefault(task.bug_tag, []).append(task)
        else:
            untagged.append(task)

    board = BoardState()
    for story in stories:
        board.add(_card(story.id, story.title, story.priority, by_story.get(story.id, [])))

    if untagged:
        board.add(_card("Unassigned", "Unassigned Tasks", "P3", untagged))

    for bug_id, bug_tasks in by_bug.items():
        board.add(_card(bug_id, f"Bug Fix: {bug_id}", "P2", bug_tasks, is_bug_card=True))

    return board
