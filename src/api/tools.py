"""
MCP tool registrations.

Core logic lives in api.handlers (returns dicts); the wrappers here
serialize to JSON strings for the MCP transport.
"""

import json

from api.handlers import (
    handle_cache_status,
    handle_query,
    handle_task_priority,
    handle_task_toggle,
    handle_task_waiting,
)


def register_tools(mcp, cache) -> None:
    """Register all vault-tasks tools on a FastMCP server."""

    @mcp.tool()
    def task_query(query: str) -> str:
        """
        Run a tasks query over every task in the vault.

        The query is line-oriented, one directive per line, for example:

            not done
            due before tomorrow
            priority is above none
            path includes projects/
            sort by urgency
            limit 10

        Args:
            query: Query text

        Returns:
            JSON with "tasks" (and "count" unless hidden), or "error"
        """
        return json.dumps(handle_query(cache, query=query), indent=2)

    @mcp.tool()
    def task_toggle(path: str, section_start: int, section_index: int) -> str:
        """
        Toggle a task between open and done and write the result to its file.

        Completing a recurring task also inserts its next occurrence above it.

        Args:
            path: File path from the task's "path" field
            section_start: The task's "section_start" field
            section_index: The task's "section_index" field

        Returns:
            JSON with the replacement tasks, or "error"
        """
        return json.dumps(
            handle_task_toggle(
                cache, path=path, section_start=section_start, section_index=section_index
            ),
            indent=2,
        )

    @mcp.tool()
    def task_change_priority(
        path: str,
        section_start: int,
        section_index: int,
        increase: bool = True,
    ) -> str:
        """
        Raise or lower a task's priority by one step.

        Args:
            path: File path from the task's "path" field
            section_start: The task's "section_start" field
            section_index: The task's "section_index" field
            increase: True to raise, False to lower

        Returns:
            JSON with the updated task, or "error"
        """
        return json.dumps(
            handle_task_priority(
                cache,
                path=path,
                section_start=section_start,
                section_index=section_index,
                increase=increase,
            ),
            indent=2,
        )

    @mcp.tool()
    def task_toggle_waiting(path: str, section_start: int, section_index: int) -> str:
        """
        Mark a task as waiting, or bring a waiting task back as high priority.

        Returns:
            JSON with the updated task, or "error"
        """
        return json.dumps(
            handle_task_waiting(
                cache, path=path, section_start=section_start, section_index=section_index
            ),
            indent=2,
        )

    @mcp.tool()
    def cache_status() -> str:
        """
        Show vault cache statistics.

        Returns:
            JSON with state, file count, task count, last scan time, etc.
        """
        return json.dumps(handle_cache_status(cache), indent=2)
