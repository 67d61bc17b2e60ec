import sqlalchemy
from databases import Database
from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateIndex
from sqlalchemy.schema import CreateTable

from core import settings
from core.settings import DBConfig

config = DBConfig().get_default()


metadata = sqlalchemy.MetaData()


def new_database(disable_jit=True, force_rollback=False) -> Database:
    server_settings = {}

    if disable_jit:
        server_settings["jit"] = "off"

    return Database(
        config.url,
        min_size=config.min_pool_size,
        max_size=config.pool_size,
        force_rollback=force_rollback,
        server_settings=server_settings,
    )


class _DbRouter:
    database: Database | None = None

    def get(self):
        if self.database is None:
            self.database = new_database(force_rollback=settings.TESTING)
        return self.database


_db_router = _DbRouter()
del _DbRouter

get_database = _db_router.get


async def create_tables(database: Database) -> None:
    import db.models  # noqa: F401  registers tables on metadata

    dialect = postgresql.dialect()
    for table in metadata.sorted_tables:
        await database.execute(str(CreateTable(table, if_not_exists=True).compile(dialect=dialect)))
        for index in table.indexes:
            await database.execute(str(CreateIndex(index, if_not_exists=True).compile(dialect=dialect)))
