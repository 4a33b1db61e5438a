from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from fastapi import APIRouter, Depends

from hvacdesk.schemas.mixin import ErrorBody


def _error(description: str) -> Dict[str, Any]:
    return {"model": ErrorBody, "description": description}


# Documented on every route; bodies are rendered by the ServiceError handler in main
DEFAULT_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: _error("Validation error"),
    401: _error("Missing or invalid credential"),
    403: _error("Role or ownership does not allow the operation"),
    404: _error("Referenced record does not exist"),
    409: _error("Not permitted in the record's current state"),
    500: _error("Storage or internal error"),
}


def create_router(
    *,
    name: Optional[str] = None,
    dependencies: Optional[Sequence[Depends]] = None,
    responses: Optional[Dict[int, Dict[str, Any]]] = None,
) -> APIRouter:
    """Build an APIRouter that documents the service error responses.

    Args:
        name: Logical name of the router, kept as ``router.name``.
        dependencies: Dependencies applied to every route of the router.
        responses: Extra or overriding response docs, merged over the defaults.
    """
    router = APIRouter(
        dependencies=list(dependencies) if dependencies else None,
        responses={**DEFAULT_ERROR_RESPONSES, **(responses or {})},
    )
    if name:
        router.name = name
    return router
