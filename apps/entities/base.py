from apps.entities.stores import UnitOfWork
from db import get_database
from db.transaction import PostgresUnitOfWork


class BaseManager:
    validator = None

    def __init__(self, uow: UnitOfWork | None = None):
        self.uow = uow or PostgresUnitOfWork(get_database())
