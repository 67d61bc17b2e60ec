from typing import Iterable

from apps.entities.pull_requests.schemas import PullRequest
from apps.entities.pull_requests.schemas import PullRequestStatus
from core.exceptions import NotFoundException
from core.types import Clock
from core.types import EntityId
from core.utils import utcnow
from db.models import pull_request
from db.models import pull_request_reviewer
from db.queries.base import BaseQuery


class PullRequestQuery(BaseQuery):
    table_model = pull_request
    schema = PullRequest

    def __init__(self, *, clock: Clock = utcnow, **kwargs):
        super().__init__(**kwargs)
        self.clock = clock

    async def create(self, pull_request_id: EntityId, name: str, author_id: EntityId) -> PullRequest:
        entity = await super().create(
            id=pull_request_id,
            name=name,
            author_id=author_id,
            status=PullRequestStatus.OPEN,
            created_at=self.clock(),
        )
        return self.to_schema(entity)

    async def get_by_id(self, pull_request_id: EntityId, for_update: bool = False) -> PullRequest:
        entity = await self.get_entity(filters={"id": pull_request_id}, for_update=for_update)
        return self.to_schema(entity, identifier=pull_request_id)

    async def get_by_ids(self, pull_request_ids: Iterable[EntityId]) -> list[PullRequest]:
        if not (ids := list(pull_request_ids)):
            return []
        return [self.to_schema(entity) for entity in await self.get_entities(filters={"id__in": ids})]

    async def set_merged(self, pull_request_id: EntityId) -> PullRequest:
        # conditional update: of two concurrent merges only one moves the row
        entity = await super().update(
            values={"status": PullRequestStatus.MERGED, "merged_at": self.clock()},
            filters={"id": pull_request_id, "status": PullRequestStatus.OPEN},
        )
        if entity is None:
            return await self.get_by_id(pull_request_id)
        return self.to_schema(entity)


class ReviewerQuery(BaseQuery):
    table_model = pull_request_reviewer

    async def assign_one(self, pull_request_id: EntityId, user_id: EntityId) -> None:
        await super().create(is_returning=False, pull_request_id=pull_request_id, user_id=user_id)

    async def remove_one(self, pull_request_id: EntityId, user_id: EntityId) -> None:
        removed = await super().delete(filters={"pull_request_id": pull_request_id, "user_id": user_id})
        if removed is None:
            raise NotFoundException("reviewer assignment not found", identifier=user_id)

    async def list_reviewers(self, pull_request_id: EntityId) -> set[EntityId]:
        entities = await self.get_entities(filters={"pull_request_id": pull_request_id}, return_fields=["user_id"])
        return {entity["user_id"] for entity in entities}

    async def list_by_user(self, user_id: EntityId) -> set[EntityId]:
        entities = await self.get_entities(filters={"user_id": user_id}, return_fields=["pull_request_id"])
        return {entity["pull_request_id"] for entity in entities}
