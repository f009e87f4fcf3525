"""Goal service - Business logic for goals and automatic progress"""

import logging

from sqlalchemy.orm import Session

from ...error_messages import not_found
from ...models import Goal, User
from ...realtime import DELETE, INSERT, UPDATE, publish_change
from .repository import GoalRepository
from .schemas import GoalCreate, GoalUpdate

logger = logging.getLogger(__name__)

# Which goal category each tracked action advances
ACTION_CATEGORIES = {
    "appointment": "agendamentos",
    "patient": "clientes",
    "payment": "financeiro",
    "professional": "profissionais",
}


class GoalService:
    """Service layer for goal business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = GoalRepository()

    def get_goals(self, user: User) -> list[Goal]:
        return self.repo.get_goals(self.db, user.id)

    def get_goal(self, goal_id: int, user: User) -> Goal:
        goal = self.repo.get_goal_by_id(self.db, goal_id, user.id)
        if not goal:
            raise not_found("goal")
        return goal

    def create_goal(self, data: GoalCreate, user: User) -> Goal:
        values = data.model_dump()
        if values["current_value"] >= values["target_value"] and values["status"] == "em_progresso":
            values["status"] = "concluida"
        goal = self.repo.create_goal(self.db, user.id, **values)
        publish_change("goals", user.id, INSERT, goal)
        return goal

    def update_goal(self, goal_id: int, data: GoalUpdate, user: User) -> Goal:
        goal = self.get_goal(goal_id, user)
        goal = self.repo.update_goal(self.db, goal, **data.model_dump(exclude_unset=True))
        publish_change("goals", user.id, UPDATE, goal)
        return goal

    def delete_goal(self, goal_id: int, user: User) -> dict:
        goal = self.get_goal(goal_id, user)
        snapshot = {"id": goal.id}
        self.repo.delete_goal(self.db, goal)
        publish_change("goals", user.id, DELETE, snapshot)
        return {"message": "Meta removida"}

    def record_progress(self, user_id: int, action_type: str, value: float = 1) -> list[Goal]:
        """
        Advance every in-progress goal tied to an action.

        action_type is one of appointment, patient, payment, professional;
        goals reaching their target are marked concluida.
        """
        category = ACTION_CATEGORIES.get(action_type)
        if not category:
            logger.warning(f"⚠️ Unknown goal action type: {action_type}")
            return []

        goals = self.repo.get_active_goals_by_category(self.db, user_id, category)
        for goal in goals:
            goal.current_value = (goal.current_value or 0) + value
            if goal.current_value >= goal.target_value:
                goal.status = "concluida"
                logger.info(f"🎯 Goal {goal.id} completed for user {user_id}")
        if goals:
            self.db.commit()
            for goal in goals:
                self.db.refresh(goal)
                publish_change("goals", user_id, UPDATE, goal)
        return goals
