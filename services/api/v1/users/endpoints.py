from fastapi import Depends

from apps.entities.pull_requests.managers import PullRequestManager
from apps.entities.stores import UnitOfWork
from apps.entities.users.managers import UserManager
from apps.entities.users.schemas import UserSetIsActive
from core.types import EntityId
from services.api.deps import get_unit_of_work
from services.api.utils import get_router

router = get_router()


@router.post(
    path="/setIsActive",
    operation_id="users_set_is_active",
)
async def users_set_is_active(
    data: UserSetIsActive,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    user = await UserManager(uow).set_is_active(data.user_id, data.is_active)
    return {"user": user.as_response()}


@router.get(
    path="/getReview",
    operation_id="users_get_review",
)
async def users_get_review(
    user_id: EntityId,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    pull_requests = await PullRequestManager(uow).get_assigned_reviews_by_user_id(user_id)
    return {"user_id": str(user_id), "pull_requests": [pr.as_response() for pr in pull_requests]}
