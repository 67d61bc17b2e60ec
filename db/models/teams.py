from sqlalchemy import Boolean
from sqlalchemy import Column
from sqlalchemy import String
from sqlalchemy import Table
from sqlalchemy import UniqueConstraint
from sqlalchemy import true

from db import metadata
from db.utils import foreign_id_column
from db.utils import id_column
from db.utils import TimeStampedFields

__all__ = ["team", "users"]

team = Table(
    "team",
    metadata,
    id_column(),
    Column("name", String(length=255), nullable=False, unique=True),
    *TimeStampedFields().all,
)


users = Table(
    "users",
    metadata,
    id_column(),
    Column("username", String(length=255), nullable=False),
    Column("is_active", Boolean(), nullable=False, server_default=true()),
    foreign_id_column("team_id", "team.id", index=True),
    *TimeStampedFields().all,
    UniqueConstraint("team_id", "username", name="users_team_username_unique"),
)
