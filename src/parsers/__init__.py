from .task_parser import parse_content, parse_file, parse_line, replace_task_with_tasks, strip_suffixes
from .query_parser import Query, QuerySyntaxError, SortKey, parse_query

__all__ = [
    "parse_content",
    "parse_file",
    "parse_line",
    "replace_task_with_tasks",
    "strip_suffixes",
    "Query",
    "QuerySyntaxError",
    "SortKey",
    "parse_query",
]
