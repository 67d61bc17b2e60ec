"""In-memory stores with the same contracts as `db.queries`.

Transactions are serialized behind an asyncio lock. Each one works on a deep
copy of the committed state, which replaces the committed state only when the
operation returns, so a failing operation leaves nothing behind.
"""

import asyncio
import copy
from dataclasses import dataclass
from dataclasses import field
from typing import Awaitable
from typing import Callable
from typing import Iterable
from typing import TypeVar

from apps.entities.pull_requests.schemas import PullRequest
from apps.entities.pull_requests.schemas import PullRequestStatus
from apps.entities.teams.schemas import Team
from apps.entities.users.schemas import User
from core.contexts import TRANSACTION
from core.exceptions import ConflictException
from core.exceptions import NotFoundException
from core.types import Clock
from core.types import EntityId
from core.types import IdFactory
from core.utils import new_id
from core.utils import utcnow

T = TypeVar("T")


@dataclass
class MemoryState:
    teams: dict[EntityId, Team] = field(default_factory=dict)
    users: dict[EntityId, User] = field(default_factory=dict)
    pull_requests: dict[EntityId, PullRequest] = field(default_factory=dict)
    reviewers: set[tuple[EntityId, EntityId]] = field(default_factory=set)


class MemoryTeamStore:
    def __init__(self, state: MemoryState, id_factory: IdFactory):
        self.state = state
        self.id_factory = id_factory

    async def create(self, name: str) -> Team:
        if any(t.name == name for t in self.state.teams.values()):
            raise ConflictException("team name already taken", identifier=name)
        team = Team(id=self.id_factory(), name=name)
        self.state.teams[team.id] = team
        return team

    async def get_by_name(self, name: str) -> Team:
        for team in self.state.teams.values():
            if team.name == name:
                return team
        raise NotFoundException(identifier=name)

    async def get_by_id(self, team_id: EntityId) -> Team:
        if (team := self.state.teams.get(team_id)) is None:
            raise NotFoundException(identifier=team_id)
        return team


class MemoryUserStore:
    def __init__(self, state: MemoryState, id_factory: IdFactory):
        self.state = state
        self.id_factory = id_factory

    def _check_username(self, user: User) -> None:
        for other in self.state.users.values():
            if other.id != user.id and other.team_id == user.team_id and other.username == user.username:
                raise ConflictException("username already taken in team", identifier=user.username)

    async def create(
        self, username: str, is_active: bool, team_id: EntityId, user_id: EntityId | None = None
    ) -> User:
        user = User(id=user_id or self.id_factory(), username=username, is_active=is_active, team_id=team_id)
        if user.id in self.state.users:
            raise ConflictException("user already exists", identifier=user.id)
        self._check_username(user)
        self.state.users[user.id] = user
        return user

    async def get_by_id(self, user_id: EntityId) -> User:
        if (user := self.state.users.get(user_id)) is None:
            raise NotFoundException(identifier=user_id)
        return user

    async def set_active(self, user_id: EntityId, is_active: bool) -> User:
        user = (await self.get_by_id(user_id)).model_copy(update={"is_active": is_active})
        self.state.users[user_id] = user
        return user

    async def get_all_by_team(self, team_id: EntityId) -> list[User]:
        return sorted((u for u in self.state.users.values() if u.team_id == team_id), key=lambda u: u.username)

    async def update(self, user: User) -> User:
        await self.get_by_id(user.id)
        self._check_username(user)
        self.state.users[user.id] = user
        return user


class MemoryPullRequestStore:
    def __init__(self, state: MemoryState, clock: Clock):
        self.state = state
        self.clock = clock

    async def create(self, pull_request_id: EntityId, name: str, author_id: EntityId) -> PullRequest:
        if pull_request_id in self.state.pull_requests:
            raise ConflictException("pull request already exists", identifier=pull_request_id)
        if author_id not in self.state.users:
            raise NotFoundException("author not found", identifier=author_id)
        pr = PullRequest(id=pull_request_id, name=name, author_id=author_id, created_at=self.clock())
        self.state.pull_requests[pr.id] = pr
        return pr

    async def get_by_id(self, pull_request_id: EntityId, for_update: bool = False) -> PullRequest:
        # transactions are already serialized, nothing to lock
        if (pr := self.state.pull_requests.get(pull_request_id)) is None:
            raise NotFoundException(identifier=pull_request_id)
        return pr

    async def get_by_ids(self, pull_request_ids: Iterable[EntityId]) -> list[PullRequest]:
        return [self.state.pull_requests[i] for i in pull_request_ids if i in self.state.pull_requests]

    async def set_merged(self, pull_request_id: EntityId) -> PullRequest:
        pr = await self.get_by_id(pull_request_id)
        if pr.is_merged:
            return pr
        pr = pr.model_copy(update={"status": PullRequestStatus.MERGED, "merged_at": self.clock()})
        self.state.pull_requests[pr.id] = pr
        return pr


class MemoryReviewerStore:
    def __init__(self, state: MemoryState):
        self.state = state

    async def assign_one(self, pull_request_id: EntityId, user_id: EntityId) -> None:
        if (pull_request_id, user_id) in self.state.reviewers:
            raise ConflictException("reviewer already assigned", identifier=user_id)
        if pull_request_id not in self.state.pull_requests or user_id not in self.state.users:
            raise NotFoundException(identifier=(pull_request_id, user_id))
        self.state.reviewers.add((pull_request_id, user_id))

    async def remove_one(self, pull_request_id: EntityId, user_id: EntityId) -> None:
        try:
            self.state.reviewers.remove((pull_request_id, user_id))
        except KeyError:
            raise NotFoundException("reviewer assignment not found", identifier=user_id)

    async def list_reviewers(self, pull_request_id: EntityId) -> set[EntityId]:
        return {user_id for pr_id, user_id in self.state.reviewers if pr_id == pull_request_id}

    async def list_by_user(self, user_id: EntityId) -> set[EntityId]:
        return {pr_id for pr_id, uid in self.state.reviewers if uid == user_id}


class MemoryStores:
    def __init__(self, state: MemoryState, clock: Clock = utcnow, id_factory: IdFactory = new_id):
        self.teams = MemoryTeamStore(state, id_factory)
        self.users = MemoryUserStore(state, id_factory)
        self.pull_requests = MemoryPullRequestStore(state, clock)
        self.reviewers = MemoryReviewerStore(state)


class MemoryUnitOfWork:
    def __init__(self, clock: Clock = utcnow, id_factory: IdFactory = new_id):
        self.clock = clock
        self.id_factory = id_factory
        self.state = MemoryState()
        self._lock = asyncio.Lock()

    def _bind(self, state: MemoryState) -> MemoryStores:
        return MemoryStores(state, clock=self.clock, id_factory=self.id_factory)

    def stores(self) -> MemoryStores:
        return self._bind(self.state)

    async def do(self, operation: Callable[[MemoryStores], Awaitable[T]]) -> T:
        current = TRANSACTION.get()
        if current is not None and current[0] is self:
            return await operation(current[1])

        async with self._lock:
            working = copy.deepcopy(self.state)
            stores = self._bind(working)
            token = TRANSACTION.set((self, stores))
            try:
                result = await operation(stores)
            finally:
                TRANSACTION.reset(token)
            self.state = working
            return result
