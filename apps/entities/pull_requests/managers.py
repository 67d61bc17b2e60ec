import random
from typing import Callable

from apps.entities.base import BaseManager
from apps.entities.pull_requests.schemas import PullRequest
from apps.entities.pull_requests.schemas import PullRequestShort
from apps.entities.pull_requests.schemas import PullRequestWithReviewers
from apps.entities.pull_requests.schemas import ReassignResult
from apps.entities.pull_requests.selection import eligible_candidates
from apps.entities.pull_requests.selection import pick_replacement
from apps.entities.pull_requests.selection import pick_reviewers
from apps.entities.pull_requests.validator import PullRequestValidator
from apps.entities.stores import Stores
from apps.entities.stores import UnitOfWork
from core.exceptions import AuthorNotFoundException
from core.exceptions import ConflictException
from core.exceptions import NoCandidateException
from core.exceptions import NotFoundException
from core.exceptions import PullRequestExistsException
from core.exceptions import PullRequestNotFoundException
from core.exceptions import ReviewerNotAssignedException
from core.logs import get_logger
from core.types import EntityId

logger = get_logger(__name__)


class PullRequestManager(BaseManager):
    """Reviewer assignment engine.

    Every mutating operation runs in a single unit-of-work transaction: the
    existence and state checks and the writes that depend on them commit
    together or not at all.
    """

    validator = PullRequestValidator
    max_reviewers = 2

    def __init__(self, uow: UnitOfWork | None = None, rng_factory: Callable[[], random.Random] = random.Random):
        super().__init__(uow)
        self.rng_factory = rng_factory

    @staticmethod
    async def _get_pull_request(stores: Stores, pull_request_id: EntityId, for_update: bool = False) -> PullRequest:
        try:
            return await stores.pull_requests.get_by_id(pull_request_id, for_update=for_update)
        except NotFoundException:
            raise PullRequestNotFoundException(identifier=pull_request_id)

    async def create_and_assign(
        self, pull_request_id: EntityId, name: str, author_id: EntityId
    ) -> PullRequestWithReviewers:
        async def operation(stores: Stores) -> PullRequestWithReviewers:
            try:
                author = await stores.users.get_by_id(author_id)
            except NotFoundException:
                raise AuthorNotFoundException(identifier=author_id)

            try:
                pr = await stores.pull_requests.create(pull_request_id, name, author_id)
            except ConflictException:
                raise PullRequestExistsException(identifier=pull_request_id)

            teammates = await stores.users.get_all_by_team(author.team_id)
            candidates = eligible_candidates(teammates, exclude={author_id})
            reviewers = pick_reviewers(candidates, self.rng_factory(), limit=self.max_reviewers)
            for user_id in reviewers:
                await stores.reviewers.assign_one(pr.id, user_id)

            return PullRequestWithReviewers(pull_request=pr, reviewers=reviewers)

        result = await self.uow.do(operation)
        logger.info(
            "pull request created",
            pull_request_id=str(pull_request_id),
            author_id=str(author_id),
            reviewers=[str(r) for r in result.reviewers],
        )
        return result

    async def set_merged(self, pull_request_id: EntityId) -> PullRequest:
        async def operation(stores: Stores) -> PullRequest:
            pr = await self._get_pull_request(stores, pull_request_id, for_update=True)
            if pr.is_merged:
                return pr

            try:
                return await stores.pull_requests.set_merged(pull_request_id)
            except NotFoundException:
                raise PullRequestNotFoundException(identifier=pull_request_id)

        pr = await self.uow.do(operation)
        logger.info("pull request merged", pull_request_id=str(pull_request_id), merged_at=pr.merged_at.isoformat())
        return pr

    async def reassign(self, pull_request_id: EntityId, old_user_id: EntityId) -> ReassignResult:
        async def operation(stores: Stores) -> ReassignResult:
            pr = await self._get_pull_request(stores, pull_request_id, for_update=True)
            reviewers = await stores.reviewers.list_reviewers(pr.id)
            self.validator.validate_reassign(pr, reviewers, old_user_id)

            author = await stores.users.get_by_id(pr.author_id)
            teammates = await stores.users.get_all_by_team(author.team_id)
            candidates = eligible_candidates(teammates, exclude={pr.author_id, old_user_id, *reviewers})
            if not candidates:
                logger.warning(
                    "no replacement candidate", pull_request_id=str(pr.id), old_user_id=str(old_user_id)
                )
                raise NoCandidateException(identifier=old_user_id)

            replacement = pick_replacement(candidates, self.rng_factory())
            try:
                await stores.reviewers.remove_one(pr.id, old_user_id)
            except NotFoundException:
                # removed by a concurrent reassignment that committed first
                raise ReviewerNotAssignedException(identifier=old_user_id)
            await stores.reviewers.assign_one(pr.id, replacement)

            updated = await stores.reviewers.list_reviewers(pr.id)
            return ReassignResult(pull_request=pr, reviewers=sorted(updated), replaced_by=replacement)

        result = await self.uow.do(operation)
        logger.info(
            "reviewer reassigned",
            pull_request_id=str(pull_request_id),
            old_user_id=str(old_user_id),
            replaced_by=str(result.replaced_by),
        )
        return result

    async def get(self, pull_request_id: EntityId) -> PullRequestWithReviewers:
        stores = self.uow.stores()
        pr = await self._get_pull_request(stores, pull_request_id)
        reviewers = await stores.reviewers.list_reviewers(pr.id)
        return PullRequestWithReviewers(pull_request=pr, reviewers=sorted(reviewers))

    async def get_assigned_reviews_by_user_id(self, user_id: EntityId) -> list[PullRequestShort]:
        stores = self.uow.stores()
        if not (pull_request_ids := await stores.reviewers.list_by_user(user_id)):
            return []

        prs = await stores.pull_requests.get_by_ids(pull_request_ids)
        return [PullRequestShort.from_pull_request(pr) for pr in sorted(prs, key=lambda p: (p.created_at, p.id))]
