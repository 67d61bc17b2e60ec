import datetime
from enum import Enum
from enum import unique

from core.types import EntityId
from core.types import NonEmptyStr
from core.utils import ImmutableModel


@unique
class PullRequestStatus(str, Enum):
    OPEN = "OPEN"
    MERGED = "MERGED"


class PullRequest(ImmutableModel):
    id: EntityId
    name: str
    author_id: EntityId
    status: PullRequestStatus = PullRequestStatus.OPEN
    created_at: datetime.datetime
    merged_at: datetime.datetime | None = None

    @property
    def is_merged(self) -> bool:
        return self.status == PullRequestStatus.MERGED


class PullRequestShort(ImmutableModel):
    id: EntityId
    name: str
    author_id: EntityId
    status: PullRequestStatus

    @classmethod
    def from_pull_request(cls, pr: PullRequest) -> "PullRequestShort":
        return cls(id=pr.id, name=pr.name, author_id=pr.author_id, status=pr.status)

    def as_response(self) -> dict:
        return {
            "pull_request_id": str(self.id),
            "pull_request_name": self.name,
            "author_id": str(self.author_id),
            "status": self.status.value,
        }


class PullRequestWithReviewers(ImmutableModel):
    pull_request: PullRequest
    reviewers: list[EntityId]

    def as_response(self) -> dict:
        pr = self.pull_request
        return {
            "pull_request_id": str(pr.id),
            "pull_request_name": pr.name,
            "author_id": str(pr.author_id),
            "status": pr.status.value,
            "assigned_reviewers": [str(r) for r in self.reviewers],
            "createdAt": pr.created_at.isoformat(),
            "mergedAt": pr.merged_at.isoformat() if pr.merged_at else None,
        }


class ReassignResult(PullRequestWithReviewers):
    replaced_by: EntityId


class PullRequestCreate(ImmutableModel):
    pull_request_id: EntityId
    pull_request_name: NonEmptyStr
    author_id: EntityId


class PullRequestMerge(ImmutableModel):
    pull_request_id: EntityId


class PullRequestReassign(ImmutableModel):
    pull_request_id: EntityId
    old_user_id: EntityId
