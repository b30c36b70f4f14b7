"""
specgate board - Show user stories by task completion.
"""

from pathlib import Path

from specgate.lib.config import ProjectConfig
from specgate.state import load_feature_state

COLUMNS = (("todo", "To Do"), ("in_progress", "In Progress"), ("done", "Done"))


def cmd_board(args, project_dir: Path, config: ProjectConfig) -> int:
    board = load_feature_state(project_dir, args.feature, config).board

    for attr, title in COLUMNS:
        cards = getattr(board, attr)
        print(f"{title} ({len(cards)})")
        print("-" * 60)
        for card in cards:
            title_text = card.title[:40] + "..." if len(card.title) > 40 else card.title
            print(f"  {card.id:<12} {card.priority:<4} {title_text:<43} {card.progress}")
        print()

    return 0
