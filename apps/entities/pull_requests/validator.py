from apps.entities.pull_requests.schemas import PullRequest
from core.exceptions import PullRequestMergedException
from core.exceptions import ReviewerNotAssignedException
from core.types import EntityId


class PullRequestValidator:
    @staticmethod
    def validate_reassign(pr: PullRequest, reviewers: set[EntityId], old_user_id: EntityId) -> None:
        if pr.is_merged:
            raise PullRequestMergedException(identifier=pr.id)
        if old_user_id not in reviewers:
            raise ReviewerNotAssignedException(identifier=old_user_id)
