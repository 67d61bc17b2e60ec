from apps.entities.base import BaseManager
from apps.entities.stores import Stores
from apps.entities.users.schemas import User
from apps.entities.users.schemas import UserWithTeamName
from core.exceptions import NotFoundException
from core.exceptions import UserNotFoundException
from core.logs import get_logger
from core.types import EntityId

logger = get_logger(__name__)


class UserManager(BaseManager):
    async def get(self, user_id: EntityId) -> User:
        try:
            return await self.uow.stores().users.get_by_id(user_id)
        except NotFoundException:
            raise UserNotFoundException(identifier=user_id)

    async def set_is_active(self, user_id: EntityId, is_active: bool) -> UserWithTeamName:
        async def operation(stores: Stores) -> UserWithTeamName:
            try:
                user = await stores.users.set_active(user_id, is_active)
            except NotFoundException:
                raise UserNotFoundException(identifier=user_id)
            team = await stores.teams.get_by_id(user.team_id)
            return UserWithTeamName(id=user.id, username=user.username, is_active=user.is_active, team_name=team.name)

        result = await self.uow.do(operation)
        logger.info("user activity changed", user_id=str(user_id), is_active=is_active)
        return result
