from typing import Awaitable
from typing import Callable
from typing import TypeVar

from databases import Database
from databases.core import Connection

from core.contexts import TRANSACTION
from core.types import Clock
from core.types import IdFactory
from core.utils import new_id
from core.utils import utcnow
from db.queries.pull_requests import PullRequestQuery
from db.queries.pull_requests import ReviewerQuery
from db.queries.teams import TeamQuery
from db.queries.teams import UserQuery

T = TypeVar("T")


class PostgresStores:
    def __init__(self, conn: Database | Connection, clock: Clock = utcnow, id_factory: IdFactory = new_id):
        self.teams = TeamQuery(conn=conn, id_factory=id_factory)
        self.users = UserQuery(conn=conn, id_factory=id_factory)
        self.pull_requests = PullRequestQuery(conn=conn, clock=clock)
        self.reviewers = ReviewerQuery(conn=conn)


class PostgresUnitOfWork:
    """Runs operations in a PostgreSQL transaction on one pooled connection.

    The stores handed to the operation are bound to that connection, and the
    pair (unit of work, stores) is published in `core.contexts.TRANSACTION` so
    that a nested `do` joins the open transaction.
    """

    def __init__(self, database: Database, clock: Clock = utcnow, id_factory: IdFactory = new_id):
        self.database = database
        self.clock = clock
        self.id_factory = id_factory

    def _bind(self, conn: Database | Connection) -> PostgresStores:
        return PostgresStores(conn, clock=self.clock, id_factory=self.id_factory)

    def stores(self) -> PostgresStores:
        return self._bind(self.database)

    async def do(self, operation: Callable[[PostgresStores], Awaitable[T]]) -> T:
        current = TRANSACTION.get()
        if current is not None and current[0] is self:
            return await operation(current[1])

        async with self.database.connection() as conn:
            async with conn.transaction():
                stores = self._bind(conn)
                token = TRANSACTION.set((self, stores))
                try:
                    return await operation(stores)
                finally:
                    TRANSACTION.reset(token)
