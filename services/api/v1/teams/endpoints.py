from fastapi import Depends
from starlette import status

from apps.entities.stores import UnitOfWork
from apps.entities.teams.managers import TeamManager
from apps.entities.teams.schemas import TeamCreate
from services.api.deps import get_unit_of_work
from services.api.utils import get_router

router = get_router()


@router.post(
    path="/add",
    operation_id="team_add",
    status_code=status.HTTP_201_CREATED,
)
async def team_add(
    data: TeamCreate,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    team = await TeamManager(uow).create(data)
    return {"team": team.as_response()}


@router.get(
    path="/get",
    operation_id="team_get",
)
async def team_get(
    team_name: str,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    team = await TeamManager(uow).get(team_name)
    return team.as_response()
