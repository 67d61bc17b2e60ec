from apps.entities.teams.schemas import Team
from apps.entities.users.schemas import User
from core.types import EntityId
from core.types import IdFactory
from core.utils import new_id
from db.models import team
from db.models import users
from db.queries.base import BaseQuery


class TeamQuery(BaseQuery):
    table_model = team
    schema = Team

    def __init__(self, *, id_factory: IdFactory = new_id, **kwargs):
        super().__init__(**kwargs)
        self.id_factory = id_factory

    async def create(self, name: str) -> Team:
        return self.to_schema(await super().create(id=self.id_factory(), name=name))

    async def get_by_name(self, name: str) -> Team:
        return self.to_schema(await self.get_entity(filters={"name": name}), identifier=name)

    async def get_by_id(self, team_id: EntityId) -> Team:
        return self.to_schema(await self.get_entity(filters={"id": team_id}), identifier=team_id)


class UserQuery(BaseQuery):
    table_model = users
    schema = User

    def __init__(self, *, id_factory: IdFactory = new_id, **kwargs):
        super().__init__(**kwargs)
        self.id_factory = id_factory

    async def create(
        self, username: str, is_active: bool, team_id: EntityId, user_id: EntityId | None = None
    ) -> User:
        entity = await super().create(
            id=user_id or self.id_factory(), username=username, is_active=is_active, team_id=team_id
        )
        return self.to_schema(entity)

    async def get_by_id(self, user_id: EntityId) -> User:
        return self.to_schema(await self.get_entity(filters={"id": user_id}), identifier=user_id)

    async def set_active(self, user_id: EntityId, is_active: bool) -> User:
        entity = await super().update(values={"is_active": is_active}, filters={"id": user_id})
        return self.to_schema(entity, identifier=user_id)

    async def get_all_by_team(self, team_id: EntityId) -> list[User]:
        entities = await self.get_entities(filters={"team_id": team_id}, order_by=["username"])
        return [self.to_schema(entity) for entity in entities]

    async def update(self, user: User) -> User:
        entity = await super().update(
            values={"username": user.username, "is_active": user.is_active, "team_id": user.team_id},
            filters={"id": user.id},
        )
        return self.to_schema(entity, identifier=user.id)
