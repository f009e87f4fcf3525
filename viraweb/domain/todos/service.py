"""Todo service"""

from sqlalchemy.orm import Session

from ...error_messages import not_found
from ...models import Todo, User
from ...realtime import DELETE, INSERT, UPDATE, publish_change
from .repository import TodoRepository
from .schemas import TodoCreate, TodoUpdate


class TodoService:

    def __init__(self, db: Session):
        self.db = db
        self.repo = TodoRepository()

    def get_todos(self, user: User) -> list[Todo]:
        return self.repo.get_todos(self.db, user.id)

    def get_todo(self, todo_id: int, user: User) -> Todo:
        todo = self.repo.get_todo_by_id(self.db, todo_id, user.id)
        if not todo:
            raise not_found("todo")
        return todo

    def create_todo(self, data: TodoCreate, user: User) -> Todo:
        todo = self.repo.create_todo(self.db, user.id, completed=False, **data.model_dump())
        publish_change("todos", user.id, INSERT, todo)
        return todo

    def update_todo(self, todo_id: int, data: TodoUpdate, user: User) -> Todo:
        todo = self.repo.update_todo(
            self.db, self.get_todo(todo_id, user), **data.model_dump(exclude_unset=True)
        )
        publish_change("todos", user.id, UPDATE, todo)
        return todo

    def toggle_todo(self, todo_id: int, user: User) -> Todo:
        todo = self.get_todo(todo_id, user)
        todo = self.repo.update_todo(self.db, todo, completed=not todo.completed)
        publish_change("todos", user.id, UPDATE, todo)
        return todo

    def delete_todo(self, todo_id: int, user: User) -> dict:
        todo = self.get_todo(todo_id, user)
        snapshot = {"id": todo.id}
        self.repo.delete_todo(self.db, todo)
        publish_change("todos", user.id, DELETE, snapshot)
        return {"message": "Tarefa removida"}
