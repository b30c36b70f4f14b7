#!/usr/bin/env python3
"""specgate CLI entrypoint."""

import sys
import argparse
import logging
from pathlib import Path

from specgate.lib.config import load_project_config
from specgate.lib.documents import FeatureNotFound
from specgate.commands import list as cmd_list_module
from specgate.commands import status as cmd_status_module
from specgate.commands import trace as cmd_trace_module
from specgate.commands import integrity as cmd_integrity_module
from specgate.commands import gate as cmd_gate_module
from specgate.commands import board as cmd_board_module
from specgate.commands import show as cmd_show_module
from specgate.commands import analyze as cmd_analyze_module
from specgate.commands import bugs as cmd_bugs_module


def get_project_dir(args) -> Path:
    """Resolve the project root from --project or the working directory."""
    project_dir = Path(args.project).resolve() if args.project else Path.cwd()
    if not project_dir.is_dir():
        print(f"ERROR: Project directory not found: {project_dir}")
        sys.exit(2)
    return project_dir


def run_command(func, args) -> int:
    """Load config and run a command, turning a missing feature into exit 2."""
    project_dir = get_project_dir(args)
    config = load_project_config(project_dir)
    try:
        return func(args, project_dir, config)
    except FeatureNotFound as e:
        print(f"ERROR: {e}")
        return 2


def cmd_list(args):
    return run_command(cmd_list_module.cmd_list, args)


def cmd_status(args):
    return run_command(cmd_status_module.cmd_status, args)


def cmd_trace(args):
    return run_command(cmd_trace_module.cmd_trace, args)


def cmd_integrity(args):
    return run_command(cmd_integrity_module.cmd_integrity, args)


def cmd_gate(args):
    return run_command(cmd_gate_module.cmd_gate, args)


def cmd_board(args):
    return run_command(cmd_board_module.cmd_board, args)


def cmd_show(args):
    return run_command(cmd_show_module.cmd_show, args)


def cmd_analyze(args):
    return run_command(cmd_analyze_module.cmd_analyze, args)


def cmd_bugs(args):
    return run_command(cmd_bugs_module.cmd_bugs, args)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='specgate', description='Spec-driven workflow traceability and integrity')
    parser.add_argument('--project', '-p', help='Project root (default: current directory)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # specgate list
    p_list = subparsers.add_parser('list', help='List features')
    p_list.set_defaults(func=cmd_list)

    # specgate status
    p_status = subparsers.add_parser('status', help='Show pipeline phase status')
    p_status.add_argument('feature', help='Feature directory name (e.g., 001-kanban-board)')
    p_status.set_defaults(func=cmd_status)

    # specgate trace
    p_trace = subparsers.add_parser('trace', help='Show traceability graph and gaps')
    p_trace.add_argument('feature', help='Feature directory name')
    p_trace.set_defaults(func=cmd_trace)

    # specgate integrity
    p_integrity = subparsers.add_parser('integrity', help='Check locked assertions (exit 1 if tampered)')
    p_integrity.add_argument('feature', help='Feature directory name')
    p_integrity.set_defaults(func=cmd_integrity)

    # specgate gate
    p_gate = subparsers.add_parser('gate', help='Show checklist gate (exit 1 if blocked)')
    p_gate.add_argument('feature', help='Feature directory name')
    p_gate.set_defaults(func=cmd_gate)

    # specgate board
    p_board = subparsers.add_parser('board', help='Show story board')
    p_board.add_argument('feature', help='Feature directory name')
    p_board.set_defaults(func=cmd_board)

    # specgate show
    p_show = subparsers.add_parser('show', help='Dump full feature state')
    p_show.add_argument('feature', help='Feature directory name')
    p_show.add_argument('--format', '-f', choices=['json', 'yaml'], default='json', help='Output format')
    p_show.set_defaults(func=cmd_show)

    # specgate analyze
    p_analyze = subparsers.add_parser('analyze', help='Show analysis health and coverage heatmap')
    p_analyze.add_argument('feature', help='Feature directory name')
    p_analyze.set_defaults(func=cmd_analyze)

    # specgate bugs
    p_bugs = subparsers.add_parser('bugs', help='List bugs and fix task progress')
    p_bugs.add_argument('feature', help='Feature directory name')
    p_bugs.set_defaults(func=cmd_bugs)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
