from apps.entities.stores import UnitOfWork
from db import get_database
from db.transaction import PostgresUnitOfWork


async def get_unit_of_work() -> UnitOfWork:
    return PostgresUnitOfWork(get_database())
