from functools import wraps
from typing import Any

from asyncpg.exceptions import UniqueViolationError
from databases import Database
from databases.core import Connection
from databases.interfaces import Record
from sqlalchemy import asc
from sqlalchemy import delete
from sqlalchemy import desc
from sqlalchemy import select
from sqlalchemy import Table
from sqlalchemy import update
from sqlalchemy.dialects.postgresql import insert

from core.exceptions import ConflictException
from core.exceptions import NotFoundException
from core.utils import ImmutableModel


class BaseQuery:
    table_model: Table | None = None
    schema: type[ImmutableModel] | None = None

    ORDER_BY: str = "-"

    _select_conditions = {
        "__in": lambda column, value: column.in_(value),
        "": lambda column, value: column == value,  # default
    }

    def __init__(self, *, conn: Database | Connection, table_model: Table | None = None) -> None:
        self.conn = conn

        if table_model is not None:
            self.table_model = table_model

    def filters(self, q, **kwargs):
        for key, value in (kwargs.get("filters") or {}).items():
            for suffix, condition in self._select_conditions.items():
                if column_name := get_column_name(key, suffix):
                    column = self.table_model.columns.get(column_name)
                    if column is not None:
                        q = q.where(condition(column, value))
                        break
        return q

    def order_by(self, q, **kwargs):
        for key in kwargs.get("order_by") or []:
            if key.startswith(self.ORDER_BY):
                q = q.order_by(desc(self.table_model.columns[key.removeprefix(self.ORDER_BY)]))
            else:
                q = q.order_by(asc(self.table_model.columns[key]))

        return q

    def _select_query(self, **kwargs):
        return select(
            *[self.table_model.columns[column] for column in kwargs.get("return_fields") or self.table_model.columns.keys()]
        )

    def prepare_query(self, **kwargs):
        q = self._select_query(**kwargs)
        q = self.filters(q=q, **kwargs)
        q = self.order_by(q=q, **kwargs)
        if kwargs.get("for_update"):
            q = q.with_for_update()

        return q

    @staticmethod
    def convertor(fn):
        @wraps(fn)
        async def wrapper(*args, **kwargs) -> list[dict] | dict | None:
            response = await fn(*args, **kwargs)

            if isinstance(response, list):
                return [dict(db_entity._mapping) for db_entity in response]

            elif isinstance(response, Record):
                return dict(response._mapping)

        return wrapper

    def to_schema(self, entity: dict | None, identifier: Any = None):
        if entity is None:
            raise NotFoundException(identifier=identifier)
        return self.schema.model_validate(entity)

    async def get_entity(self, **kwargs) -> dict | None:
        q = self.prepare_query(**kwargs)

        return await self.get_entity_by_query(q=q.limit(1))

    async def get_entities(self, limit: int = None, offset: int = None, **kwargs) -> list[dict]:
        q = self.prepare_query(**kwargs)

        return await self.get_entities_by_query(q=q, limit=limit, offset=offset)

    async def create(self, is_returning: bool = True, **kwargs) -> dict | None:
        q = insert(self.table_model).values(**kwargs)

        try:
            if is_returning:
                return await self.get_entity_by_query(q.returning(self.table_model))

            await self.conn.execute(q)

        except UniqueViolationError as e:
            raise ConflictException() from e

    async def update(self, values: dict, is_returning=True, **kwargs) -> dict | None:
        q = update(self.table_model).values(**values)
        q = self.filters(q=q, **kwargs)

        try:
            if is_returning:
                return await self.get_entity_by_query(q.returning(self.table_model))
            return await self.conn.execute(q)

        except UniqueViolationError as e:
            raise ConflictException() from e

    async def delete(self, filters: dict) -> dict | None:
        q = delete(self.table_model)
        q = self.filters(q=q, filters=filters)

        return await self.get_entity_by_query(q.returning(self.table_model))

    @convertor
    async def get_entity_by_query(self, q) -> dict | None:
        return await self.conn.fetch_one(q)

    @convertor
    async def get_entities_by_query(self, q, limit: int = None, offset: int = None) -> list[dict]:
        return await self.conn.fetch_all(q.limit(limit).offset(offset))


def get_column_name(key, suffix) -> str:
    if not suffix:
        return key

    if key.endswith(suffix):
        return key.removesuffix(suffix)

    return ""
