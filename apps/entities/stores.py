"""Persistence contracts consumed by the managers.

Managers depend only on these protocols. `db.queries` provides the
PostgreSQL implementation and `db.memory` an in-memory one; both are wired
through a `UnitOfWork`, which hands a `Stores` bundle bound to a single
transaction to the operation it runs.

Store methods raise `core.exceptions.NotFoundException` for absent entities
and `core.exceptions.ConflictException` for unique-constraint violations.
Managers translate those kinds into operation-specific failures.
"""

from typing import Awaitable
from typing import Callable
from typing import Iterable
from typing import Protocol
from typing import TypeVar

from apps.entities.pull_requests.schemas import PullRequest
from apps.entities.teams.schemas import Team
from apps.entities.users.schemas import User
from core.types import EntityId

T = TypeVar("T")


class TeamStore(Protocol):
    async def create(self, name: str) -> Team:
        ...

    async def get_by_name(self, name: str) -> Team:
        ...

    async def get_by_id(self, team_id: EntityId) -> Team:
        ...


class UserStore(Protocol):
    async def create(
        self, username: str, is_active: bool, team_id: EntityId, user_id: EntityId | None = None
    ) -> User:
        """Raises ConflictException on a duplicate id or a username already taken in the team."""

    async def get_by_id(self, user_id: EntityId) -> User:
        ...

    async def set_active(self, user_id: EntityId, is_active: bool) -> User:
        ...

    async def get_all_by_team(self, team_id: EntityId) -> list[User]:
        ...

    async def update(self, user: User) -> User:
        ...


class PullRequestStore(Protocol):
    async def create(self, pull_request_id: EntityId, name: str, author_id: EntityId) -> PullRequest:
        """Creates an OPEN pull request stamped with the store clock."""

    async def get_by_id(self, pull_request_id: EntityId, for_update: bool = False) -> PullRequest:
        """With `for_update`, concurrent transactions asking for the same row wait until this one ends."""

    async def get_by_ids(self, pull_request_ids: Iterable[EntityId]) -> list[PullRequest]:
        """Unknown ids are dropped. No ordering guarantee."""

    async def set_merged(self, pull_request_id: EntityId) -> PullRequest:
        """Moves an OPEN pull request to MERGED and returns the stored row.

        A pull request that is already merged is returned untouched.
        """


class ReviewerStore(Protocol):
    async def assign_one(self, pull_request_id: EntityId, user_id: EntityId) -> None:
        """Raises ConflictException if the pair is already assigned."""

    async def remove_one(self, pull_request_id: EntityId, user_id: EntityId) -> None:
        """Raises NotFoundException if the pair is not assigned."""

    async def list_reviewers(self, pull_request_id: EntityId) -> set[EntityId]:
        ...

    async def list_by_user(self, user_id: EntityId) -> set[EntityId]:
        ...


class Stores(Protocol):
    teams: TeamStore
    users: UserStore
    pull_requests: PullRequestStore
    reviewers: ReviewerStore


class UnitOfWork(Protocol):
    async def do(self, operation: Callable[[Stores], Awaitable[T]]) -> T:
        """Run `operation` inside one transaction.

        Commits when the operation returns, rolls back when it raises. A call
        made while a transaction of the same unit of work is already open
        joins that transaction instead of starting a new one.
        """

    def stores(self) -> Stores:
        """Stores outside of any transaction, for read-only queries."""
