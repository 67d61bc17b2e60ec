from fastapi import Depends
from starlette import status

from apps.entities.pull_requests.managers import PullRequestManager
from apps.entities.pull_requests.schemas import PullRequestCreate
from apps.entities.pull_requests.schemas import PullRequestMerge
from apps.entities.pull_requests.schemas import PullRequestReassign
from apps.entities.stores import UnitOfWork
from services.api.deps import get_unit_of_work
from services.api.utils import get_router

router = get_router()


@router.post(
    path="/create",
    operation_id="pull_request_create",
    status_code=status.HTTP_201_CREATED,
)
async def pull_request_create(
    data: PullRequestCreate,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await PullRequestManager(uow).create_and_assign(data.pull_request_id, data.pull_request_name, data.author_id)
    return {"pr": result.as_response()}


@router.post(
    path="/merge",
    operation_id="pull_request_merge",
)
async def pull_request_merge(
    data: PullRequestMerge,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    manager = PullRequestManager(uow)
    pr = await manager.set_merged(data.pull_request_id)
    # reviewers are frozen once merged, so a separate read is consistent
    result = await manager.get(pr.id)
    return {"pr": result.as_response()}


@router.post(
    path="/reassign",
    operation_id="pull_request_reassign",
)
async def pull_request_reassign(
    data: PullRequestReassign,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await PullRequestManager(uow).reassign(data.pull_request_id, data.old_user_id)
    return {"pr": result.as_response(), "replaced_by": str(result.replaced_by)}
