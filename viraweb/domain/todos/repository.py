"""Todo repository - Database operations for to-dos"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Todo


class TodoRepository:

    @staticmethod
    def get_todos(db: Session, user_id: int) -> list[Todo]:
        # Open items first, then by due date (undated last)
        return (
            db.query(Todo)
            .filter(Todo.user_id == user_id)
            .order_by(
                Todo.completed.asc(),
                Todo.due_date.is_(None).asc(),
                Todo.due_date.asc(),
                Todo.id.asc(),
            )
            .all()
        )

    @staticmethod
    def get_todo_by_id(db: Session, todo_id: int, user_id: int) -> Optional[Todo]:
        return db.query(Todo).filter(Todo.id == todo_id, Todo.user_id == user_id).first()

    @staticmethod
    def create_todo(db: Session, user_id: int, **data) -> Todo:
        todo = Todo(user_id=user_id, **data)
        db.add(todo)
        db.commit()
        db.refresh(todo)
        return todo

    @staticmethod
    def update_todo(db: Session, todo: Todo, **updates) -> Todo:
        for key, value in updates.items():
            if hasattr(todo, key):
                setattr(todo, key, value)
        db.commit()
        db.refresh(todo)
        return todo

    @staticmethod
    def delete_todo(db: Session, todo: Todo) -> None:
        db.delete(todo)
        db.commit()
