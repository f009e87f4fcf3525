"""Goal repository - Database operations for goals"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Goal


class GoalRepository:
    """Repository for goal database operations"""

    @staticmethod
    def get_goals(db: Session, user_id: int) -> list[Goal]:
        return (
            db.query(Goal)
            .filter(Goal.user_id == user_id)
            .order_by(Goal.created_at.desc(), Goal.id.desc())
            .all()
        )

    @staticmethod
    def get_goal_by_id(db: Session, goal_id: int, user_id: int) -> Optional[Goal]:
        return db.query(Goal).filter(Goal.id == goal_id, Goal.user_id == user_id).first()

    @staticmethod
    def get_active_goals_by_category(db: Session, user_id: int, category: str) -> list[Goal]:
        return (
            db.query(Goal)
            .filter(
                Goal.user_id == user_id,
                Goal.category == category,
                Goal.status == "em_progresso",
            )
            .all()
        )

    @staticmethod
    def create_goal(db: Session, user_id: int, **goal_data) -> Goal:
        goal = Goal(user_id=user_id, **goal_data)
        db.add(goal)
        db.commit()
        db.refresh(goal)
        return goal

    @staticmethod
    def update_goal(db: Session, goal: Goal, **updates) -> Goal:
        for key, value in updates.items():
            if value is not None and hasattr(goal, key):
                setattr(goal, key, value)
        db.commit()
        db.refresh(goal)
        return goal

    @staticmethod
    def delete_goal(db: Session, goal: Goal) -> None:
        db.delete(goal)
        db.commit()
