"""REST API routes for vault-tasks."""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from api.handlers import (
    handle_cache_status,
    handle_query,
    handle_task_priority,
    handle_task_toggle,
    handle_task_waiting,
)


# ---------------------------------------------------------------------------
# Request body models
# ---------------------------------------------------------------------------


class QueryBody(BaseModel):
    query: str


class TaskRefBody(BaseModel):
    path: str
    section_start: int
    section_index: int


class TaskPriorityBody(TaskRefBody):
    increase: bool = True


# ---------------------------------------------------------------------------
# Route registration
# ---------------------------------------------------------------------------


def _raise_for_error(result: dict, status_code: int) -> dict:
    if "error" in result:
        raise HTTPException(status_code=status_code, detail=result["error"])
    return result


def register_routes(app_router: APIRouter, cache) -> None:
    """Attach all REST routes that use the shared cache."""

    @app_router.post("/query")
    def run_query(body: QueryBody):
        return _raise_for_error(handle_query(cache, query=body.query), 400)

    @app_router.post("/tasks/toggle")
    def toggle_task(body: TaskRefBody):
        return _raise_for_error(
            handle_task_toggle(
                cache,
                path=body.path,
                section_start=body.section_start,
                section_index=body.section_index,
            ),
            404,
        )

    @app_router.post("/tasks/priority")
    def change_task_priority(body: TaskPriorityBody):
        return _raise_for_error(
            handle_task_priority(
                cache,
                path=body.path,
                section_start=body.section_start,
                section_index=body.section_index,
                increase=body.increase,
            ),
            404,
        )

    @app_router.post("/tasks/waiting")
    def toggle_task_waiting(body: TaskRefBody):
        return _raise_for_error(
            handle_task_waiting(
                cache,
                path=body.path,
                section_start=body.section_start,
                section_index=body.section_index,
            ),
            404,
        )

    @app_router.get("/status")
    def cache_status():
        return handle_cache_status(cache)
