from apps.entities.base import BaseManager
from apps.entities.stores import Stores
from apps.entities.teams.schemas import TeamCreate
from apps.entities.teams.schemas import TeamMember
from apps.entities.teams.schemas import TeamWithUsers
from apps.entities.users.schemas import User
from core.exceptions import ConflictException
from core.exceptions import NotFoundException
from core.exceptions import TeamExistsException
from core.exceptions import TeamNotFoundException
from core.exceptions import UsernameTakenException
from core.logs import get_logger
from core.types import EntityId

logger = get_logger(__name__)


class TeamManager(BaseManager):
    @staticmethod
    async def _put_member(stores: Stores, member: TeamMember, team_id: EntityId) -> User:
        user = User(id=member.user_id, username=member.username, is_active=member.is_active, team_id=team_id)
        try:
            await stores.users.get_by_id(user.id)
        except NotFoundException:
            put = stores.users.create(user.username, user.is_active, team_id, user_id=user.id)
        else:
            put = stores.users.update(user)

        try:
            return await put
        except ConflictException:
            raise UsernameTakenException(identifier=member.user_id)

    async def create(self, data: TeamCreate) -> TeamWithUsers:
        """Create a team with its members.

        Members that already exist are moved into the new team with the
        username and activity flag given here.
        """

        async def operation(stores: Stores) -> TeamWithUsers:
            try:
                team = await stores.teams.create(data.team_name)
            except ConflictException:
                raise TeamExistsException(identifier=data.team_name)

            users = []
            for member in data.members:
                users.append(await self._put_member(stores, member, team.id))

            return TeamWithUsers(team=team, users=users)

        result = await self.uow.do(operation)
        logger.info("team created", team_name=data.team_name, members=len(result.users))
        return result

    async def get(self, team_name: str) -> TeamWithUsers:
        stores = self.uow.stores()
        try:
            team = await stores.teams.get_by_name(team_name)
        except NotFoundException:
            raise TeamNotFoundException(identifier=team_name)
        return TeamWithUsers(team=team, users=await stores.users.get_all_by_team(team.id))
