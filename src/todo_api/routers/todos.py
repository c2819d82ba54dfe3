from __future__ import annotations

from typing import Any, Dict, List, Type, Union

from fastapi import APIRouter, Body, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..errors import ErrorCode, error_body
from ..schemas import TodoCreate, TodoOut, TodoUpdate, ValidationOutcome, validate_payload
from ..service import NotFound, Ok, StoreFailure, TodoService

_ERROR_RESPONSES = {
    404: {"description": "Todo not found"},
    500: {"description": "Data store failure"},
}


def _validation_failed(outcome: ValidationOutcome) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(
            ErrorCode.VALIDATION_ERROR,
            "Request validation failed",
            [e.to_dict() for e in outcome.errors],
        ),
    )


def _json_body(schema: Type[BaseModel]) -> Dict[str, Any]:
    """OpenAPI requestBody for a route that reads its body raw and validates it itself."""
    return {
        "requestBody": {
            "content": {"application/json": {"schema": schema.model_json_schema()}},
            "required": True,
        }
    }


def _failed(result: Union[NotFound, StoreFailure]) -> JSONResponse:
    """Translate a non-Ok service result into its HTTP error response."""
    if isinstance(result, NotFound):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=error_body(ErrorCode.NOT_FOUND, "Todo not found"),
        )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(ErrorCode.STORE_ERROR, f"Data store failure during {result.operation}"),
    )


# PUBLIC_INTERFACE
def build_router(service: TodoService) -> APIRouter:
    """
    Build the /todos router bound to the given service instance.

    Bodies are decoded as raw JSON and run through validate_payload before
    the service is called; invalid bodies get a 400 with one entry per field.
    """
    router = APIRouter(prefix="/todos", tags=["todos"])

    # Registered before /{todo_id} so 'all' is never read as an id
    # PUBLIC_INTERFACE
    @router.get(
        "/all",
        response_model=List[TodoOut],
        summary="List Todos",
        description="Return every Todo item. Order is the data store's.",
        responses={500: _ERROR_RESPONSES[500]},
    )
    async def list_todos():
        """
        List every Todo.
        """
        result = await service.list_todos()
        if not isinstance(result, Ok):
            return _failed(result)
        return [TodoOut(**t) for t in result.value]

    # PUBLIC_INTERFACE
    @router.get(
        "/{todo_id}",
        response_model=TodoOut,
        summary="Get Todo",
        description="Get a single Todo item by ID.",
        responses=_ERROR_RESPONSES,
    )
    async def get_todo(todo_id: str):
        """
        Retrieve a single Todo item by its ID.
        """
        result = await service.get_todo(todo_id)
        if not isinstance(result, Ok):
            return _failed(result)
        return TodoOut(**result.value)

    # PUBLIC_INTERFACE
    @router.post(
        "",
        response_model=TodoOut,
        status_code=status.HTTP_201_CREATED,
        summary="Create Todo",
        description="Create a new Todo item and return the created resource.",
        responses={400: {"description": "Validation error"}, 500: _ERROR_RESPONSES[500]},
        openapi_extra=_json_body(TodoCreate),
    )
    async def create_todo(body: Any = Body(None)):
        """
        Create a new Todo.
        """
        outcome = validate_payload(TodoCreate, body)
        if not outcome.ok:
            return _validation_failed(outcome)
        result = await service.create_todo(outcome.value)
        if not isinstance(result, Ok):
            return _failed(result)
        return TodoOut(**result.value)

    # PUBLIC_INTERFACE
    @router.patch(
        "/{todo_id}",
        response_model=TodoOut,
        summary="Update Todo",
        description="Partially update fields of a Todo item. Omitted fields are left unchanged.",
        responses={400: {"description": "Validation error"}, **_ERROR_RESPONSES},
        openapi_extra=_json_body(TodoUpdate),
    )
    async def update_todo(todo_id: str, body: Any = Body(None)):
        """
        Partial update of a Todo item.
        """
        outcome = validate_payload(TodoUpdate, body)
        if not outcome.ok:
            return _validation_failed(outcome)
        result = await service.update_todo(todo_id, outcome.value)
        if not isinstance(result, Ok):
            return _failed(result)
        return TodoOut(**result.value)

    # PUBLIC_INTERFACE
    @router.delete(
        "/{todo_id}",
        response_model=TodoOut,
        summary="Delete Todo",
        description="Delete a Todo item by ID and return it as it was.",
        responses=_ERROR_RESPONSES,
    )
    async def delete_todo(todo_id: str):
        """
        Delete a Todo. Returns the deleted item, 404 if not found.
        """
        result = await service.delete_todo(todo_id)
        if not isinstance(result, Ok):
            return _failed(result)
        return TodoOut(**result.value)

    return router
