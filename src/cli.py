#!/usr/bin/env python3
"""
cli.py - Query and toggle tasks in a vault from the command line

Usage:
    cli.py [--vault DIR] query <query text>
    cli.py [--vault DIR] query --file <query file>
    cli.py [--vault DIR] query -            (query text on stdin)
    cli.py [--vault DIR] toggle <path> <section_start> <section_index>

Examples:
    cli.py --vault ~/my-brain query "not done
    sort by urgency
    limit 5"
    cli.py --vault ~/my-brain query --file today.query
    cli.py toggle ~/my-brain/Projects.md 4 0
"""

import argparse
import os
import sys
from pathlib import Path

from cache.vault_cache import VaultCache
from engine.query import execute
from engine.toggle import toggle
from models.settings import DEFAULT_EXCLUDE_DIRS, Settings, parse_exclude_dirs
from models.task import OriginKey
from parsers.query_parser import parse_query
from utils.formatting import link_text, to_display_string, to_source_line


def _read_query(args) -> str:
    if args.file:
        return Path(args.file).read_text(encoding="utf-8")
    if args.text == "-":
        return sys.stdin.read()
    if args.text:
        return args.text
    print("Error: provide query text, '-' for stdin, or --file")
    sys.exit(1)


def query_cmd(args) -> None:
    """Run a query and print matching tasks."""
    query = parse_query(_read_query(args), args.settings)
    if query.error is not None:
        print(f"Tasks query: {query.error}")
        sys.exit(1)

    result = execute(query, args.cache.snapshot(), args.settings)
    layout = query.layout_options
    for task in result.tasks:
        checkbox = "[x]" if task.is_done else "[ ]"
        line = f"- {checkbox} {to_display_string(task, layout, args.settings)}"
        if not layout.hide_backlinks and link_text(task):
            line += f" ({link_text(task)})"
        print(line)

    if not layout.hide_task_count:
        print(f"{result.count} task{'s' if result.count != 1 else ''}")


def toggle_cmd(args) -> None:
    """Toggle a task and write the result back to its file."""
    path = Path(args.path).resolve()
    task = args.cache.find_task(OriginKey(path.as_posix(), args.section_start, args.section_index))
    if task is None:
        print(f"Error: no task at {path}:{args.section_start}:{args.section_index}")
        sys.exit(1)

    new_tasks = toggle(task)
    if not args.cache.replace_task(task, new_tasks):
        print("Error: task could not be written back (file changed?)")
        sys.exit(1)
    for new_task in new_tasks:
        print(to_source_line(new_task))


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Query tasks embedded in markdown files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument('--vault', default=os.environ.get("VAULT_ROOT", "."),
                        help='Vault root directory (default: $VAULT_ROOT or .)')
    parser.add_argument('--exclude', default=os.environ.get("EXCLUDE_DIRS", DEFAULT_EXCLUDE_DIRS),
                        help='Comma-separated directory names to skip')
    parser.add_argument('--global-filter', default=os.environ.get("TASKS_GLOBAL_FILTER", ""),
                        help='Only lines containing this text are tasks (e.g. #task)')
    parser.add_argument('--remove-global-filter', action='store_true',
                        default=Settings.from_env().remove_global_filter,
                        help='Hide the global filter in printed tasks (default: $TASKS_REMOVE_GLOBAL_FILTER)')
    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    # --- query ---
    query_p = subparsers.add_parser('query', help='Run a tasks query')
    query_p.add_argument('text', nargs='?', help="Query text, or '-' to read stdin")
    query_p.add_argument('--file', help='Read the query from a file')
    query_p.set_defaults(func=query_cmd)

    # --- toggle ---
    toggle_p = subparsers.add_parser('toggle', help='Toggle a task done/open')
    toggle_p.add_argument('path', help='Markdown file containing the task')
    toggle_p.add_argument('section_start', type=int, help='Line index of the section heading')
    toggle_p.add_argument('section_index', type=int, help='Index of the task within its section')
    toggle_p.set_defaults(func=toggle_cmd)

    args = parser.parse_args()
    if not hasattr(args, 'func'):
        parser.print_help()
        sys.exit(1)

    args.vault = Path(args.vault).resolve()
    if not args.vault.is_dir():
        print(f"Error: Vault directory not found: {args.vault}")
        sys.exit(1)

    args.settings = Settings(
        global_filter=args.global_filter,
        remove_global_filter=args.remove_global_filter,
    )
    args.cache = VaultCache(args.settings)
    args.cache.initialize(args.vault, parse_exclude_dirs(args.exclude))
    args.func(args)


if __name__ == '__main__':
    main()
