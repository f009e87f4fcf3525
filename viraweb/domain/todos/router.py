"""Todo router"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import TodoCreate, TodoResponse, TodoUpdate
from .service import TodoService

router = APIRouter(prefix="/api/todos", tags=["Todos"])


def get_todo_service(db: Session = Depends(get_db)) -> TodoService:
    return TodoService(db)


@router.get("", response_model=list[TodoResponse])
async def get_todos(
    current_user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    return service.get_todos(current_user)


@router.post("", response_model=TodoResponse, status_code=201)
async def create_todo(
    data: TodoCreate,
    current_user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    return service.create_todo(data, current_user)


@router.patch("/{todo_id}", response_model=TodoResponse)
async def update_todo(
    todo_id: int,
    data: TodoUpdate,
    current_user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    return service.update_todo(todo_id, data, current_user)


@router.post("/{todo_id}/toggle", response_model=TodoResponse)
async def toggle_todo(
    todo_id: int,
    current_user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    return service.toggle_todo(todo_id, current_user)


@router.delete("/{todo_id}")
async def delete_todo(
    todo_id: int,
    current_user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    return service.delete_todo(todo_id, current_user)
