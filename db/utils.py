from functools import partial

from sqlalchemy import Column
from sqlalchemy import DateTime
from sqlalchemy import ForeignKey
from sqlalchemy import func
from sqlalchemy.dialects.postgresql import UUID


class TimeStampedFields:
    _created = partial(Column, "created", DateTime(timezone=False), server_default=func.now())
    _modified = partial(Column, "modified", DateTime(timezone=False), onupdate=func.now())

    @property
    def created(self):
        return self._created()

    @property
    def modified(self):
        return self._modified()

    @property
    def all(self):
        return self.created, self.modified


def id_column():
    return Column("id", UUID(as_uuid=True), primary_key=True)


def foreign_id_column(name: str, target: str, ondelete: str = "RESTRICT", **kwargs):
    table = target.split(".")[0]
    return Column(
        name,
        UUID(as_uuid=True),
        ForeignKey(target, name=f"{table}_id_fk", ondelete=ondelete),
        nullable=False,
        **kwargs,
    )
