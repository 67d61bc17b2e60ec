from sqlalchemy import Column
from sqlalchemy import DateTime
from sqlalchemy import Enum
from sqlalchemy import PrimaryKeyConstraint
from sqlalchemy import String
from sqlalchemy import Table

from apps.entities.pull_requests.schemas import PullRequestStatus
from db import metadata
from db.utils import foreign_id_column
from db.utils import id_column

__all__ = ["pull_request", "pull_request_reviewer"]

pull_request = Table(
    "pull_request",
    metadata,
    id_column(),
    Column("name", String(length=255), nullable=False),
    foreign_id_column("author_id", "users.id"),
    Column(
        "status",
        Enum(PullRequestStatus, native_enum=False, length=16, name="pull_request_status"),
        nullable=False,
        default=PullRequestStatus.OPEN,
    ),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("merged_at", DateTime(timezone=True), nullable=True),
)


pull_request_reviewer = Table(
    "pull_request_reviewer",
    metadata,
    foreign_id_column("pull_request_id", "pull_request.id", ondelete="CASCADE"),
    foreign_id_column("user_id", "users.id", index=True),
    PrimaryKeyConstraint("pull_request_id", "user_id", name="pull_request_reviewer_pk"),
)
