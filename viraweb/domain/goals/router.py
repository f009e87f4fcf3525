"""Goal router - FastAPI endpoints for goals"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import GoalCreate, GoalResponse, GoalUpdate
from .service import GoalService

router = APIRouter(prefix="/api/goals", tags=["Goals"])


def get_goal_service(db: Session = Depends(get_db)) -> GoalService:
    """Dependency injection for GoalService"""
    return GoalService(db)


@router.get("", response_model=list[GoalResponse])
async def get_goals(
    current_user: User = Depends(get_current_user),
    service: GoalService = Depends(get_goal_service),
):
    return service.get_goals(current_user)


@router.get("/{goal_id}", response_model=GoalResponse)
async def get_goal(
    goal_id: int,
    current_user: User = Depends(get_current_user),
    service: GoalService = Depends(get_goal_service),
):
    return service.get_goal(goal_id, current_user)


@router.post("", response_model=GoalResponse, status_code=201)
async def create_goal(
    data: GoalCreate,
    current_user: User = Depends(get_current_user),
    service: GoalService = Depends(get_goal_service),
):
    return service.create_goal(data, current_user)


@router.patch("/{goal_id}", response_model=GoalResponse)
async def update_goal(
    goal_id: int,
    data: GoalUpdate,
    current_user: User = Depends(get_current_user),
    service: GoalService = Depends(get_goal_service),
):
    return service.update_goal(goal_id, data, current_user)


@router.delete("/{goal_id}")
async def delete_goal(
    goal_id: int,
    current_user: User = Depends(get_current_user),
    service: GoalService = Depends(get_goal_service),
):
    return service.delete_goal(goal_id, current_user)
