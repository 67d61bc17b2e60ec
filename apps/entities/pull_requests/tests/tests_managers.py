import asyncio
import random
import uuid

import pytest

from apps.entities.pull_requests.managers import PullRequestManager
from apps.entities.pull_requests.schemas import PullRequestStatus
from core.exceptions import AuthorNotFoundException
from core.exceptions import NoCandidateException
from core.exceptions import NotFoundException
from core.exceptions import PullRequestExistsException
from core.exceptions import PullRequestMergedException
from core.exceptions import PullRequestNotFoundException
from core.exceptions import ReviewerNotAssignedException
from db.memory import MemoryPullRequestStore
from db.memory import MemoryReviewerStore


@pytest.fixture
def manager(uow):
    return PullRequestManager(uow)


async def reviewers_of(uow, pull_request_id) -> set:
    return await uow.stores().reviewers.list_reviewers(pull_request_id)


@pytest.mark.parametrize("k", [0, 1, 2, 3, 5])
async def test_create_assigns_min_of_k_and_two(manager, create_team, k):
    members = {"author": True, **{f"rev{i}": True for i in range(k)}}
    team = await create_team("backend", members)
    author = team["author"]

    result = await manager.create_and_assign(uuid.uuid4(), "feature", author.id)

    assert len(result.reviewers) == min(k, 2)
    assert len(set(result.reviewers)) == len(result.reviewers)
    assert author.id not in result.reviewers
    assert result.pull_request.status == PullRequestStatus.OPEN
    assert result.pull_request.merged_at is None
    assert await reviewers_of(manager.uow, result.pull_request.id) == set(result.reviewers)


async def test_create_picks_two_of_three_teammates(manager, create_team):
    team = await create_team("backend", {"A": True, "B": True, "C": True, "D": True})

    result = await manager.create_and_assign(uuid.uuid4(), "feature", team["A"].id)

    assert len(result.reviewers) == 2
    assert set(result.reviewers) <= {team["B"].id, team["C"].id, team["D"].id}


async def test_create_with_author_alone_has_no_reviewers(manager, create_team):
    team = await create_team("solo", {"author": True})

    result = await manager.create_and_assign(uuid.uuid4(), "feature", team["author"].id)

    assert result.reviewers == []


async def test_create_skips_inactive_and_other_teams(manager, create_team):
    team = await create_team("backend", {"author": True, "sleepy": False, "awake": True})
    await create_team("frontend", {"outsider": True, "another": True})

    result = await manager.create_and_assign(uuid.uuid4(), "feature", team["author"].id)

    assert result.reviewers == [team["awake"].id]


async def test_create_unknown_author(manager):
    pull_request_id = uuid.uuid4()

    with pytest.raises(AuthorNotFoundException):
        await manager.create_and_assign(pull_request_id, "feature", uuid.uuid4())

    with pytest.raises(PullRequestNotFoundException):
        await manager.get(pull_request_id)


async def test_create_duplicate_id_keeps_original(manager, create_team):
    team = await create_team("backend", {"author": True, "r1": True, "r2": True, "r3": True})
    pull_request_id = uuid.uuid4()
    original = await manager.create_and_assign(pull_request_id, "original", team["author"].id)

    with pytest.raises(PullRequestExistsException) as exc_info:
        await manager.create_and_assign(pull_request_id, "duplicate", team["r1"].id)

    assert exc_info.value.identifier == pull_request_id
    stored = await manager.get(pull_request_id)
    assert stored.pull_request == original.pull_request
    assert set(stored.reviewers) == set(original.reviewers)


async def test_seeded_random_source_is_reproducible(uow, create_team):
    team = await create_team("backend", {f"user{i}": True for i in range(8)})
    author = team["user0"]

    first = await PullRequestManager(uow, rng_factory=lambda: random.Random(7)).create_and_assign(
        uuid.uuid4(), "first", author.id
    )
    second = await PullRequestManager(uow, rng_factory=lambda: random.Random(7)).create_and_assign(
        uuid.uuid4(), "second", author.id
    )

    assert first.reviewers == second.reviewers


async def test_set_merged_is_idempotent(manager, create_team):
    team = await create_team("backend", {"author": True, "r1": True})
    created = await manager.create_and_assign(uuid.uuid4(), "feature", team["author"].id)

    first = await manager.set_merged(created.pull_request.id)
    second = await manager.set_merged(created.pull_request.id)

    assert first.status == second.status == PullRequestStatus.MERGED
    assert first.merged_at is not None
    assert first.merged_at == second.merged_at
    assert first.created_at == created.pull_request.created_at


async def test_set_merged_unknown(manager):
    with pytest.raises(PullRequestNotFoundException):
        await manager.set_merged(uuid.uuid4())


async def test_reassign_replaces_one_reviewer(manager, create_team):
    team = await create_team("backend", {"author": True, "r1": True, "r2": True, "r3": True, "off": False})
    created = await manager.create_and_assign(uuid.uuid4(), "feature", team["author"].id)
    old = created.reviewers[0]

    result = await manager.reassign(created.pull_request.id, old)

    assert len(result.reviewers) == len(created.reviewers)
    assert old not in result.reviewers
    assert result.replaced_by in result.reviewers
    assert result.replaced_by not in created.reviewers
    assert result.replaced_by not in (team["author"].id, team["off"].id)
    assert set(await reviewers_of(manager.uow, created.pull_request.id)) == set(result.reviewers)


async def test_reassign_unknown_pull_request(manager):
    with pytest.raises(PullRequestNotFoundException):
        await manager.reassign(uuid.uuid4(), uuid.uuid4())


async def test_reassign_after_merge(manager, create_team):
    team = await create_team("backend", {"author": True, "r1": True, "r2": True, "r3": True})
    created = await manager.create_and_assign(uuid.uuid4(), "feature", team["author"].id)
    await manager.set_merged(created.pull_request.id)

    with pytest.raises(PullRequestMergedException):
        await manager.reassign(created.pull_request.id, created.reviewers[0])

    assert await reviewers_of(manager.uow, created.pull_request.id) == set(created.reviewers)


async def test_reassign_not_assigned_user(manager, create_team):
    team = await create_team("backend", {"author": True, "r1": True, "r2": True, "r3": True})
    created = await manager.create_and_assign(uuid.uuid4(), "feature", team["author"].id)
    (outsider,) = {team["r1"].id, team["r2"].id, team["r3"].id} - set(created.reviewers)

    with pytest.raises(ReviewerNotAssignedException):
        await manager.reassign(created.pull_request.id, outsider)

    assert await reviewers_of(manager.uow, created.pull_request.id) == set(created.reviewers)


async def test_reassign_without_candidates_keeps_old_reviewer(manager, create_team):
    team = await create_team("backend", {"author": True, "r1": True, "r2": True, "off": False})
    created = await manager.create_and_assign(uuid.uuid4(), "feature", team["author"].id)
    old = created.reviewers[0]

    # the other assigned reviewer is not eligible as a replacement
    with pytest.raises(NoCandidateException):
        await manager.reassign(created.pull_request.id, old)

    assert old in await reviewers_of(manager.uow, created.pull_request.id)


async def test_reassign_single_reviewer_team(manager, create_team):
    team = await create_team("backend", {"author": True, "r1": True})
    created = await manager.create_and_assign(uuid.uuid4(), "feature", team["author"].id)

    with pytest.raises(NoCandidateException):
        await manager.reassign(created.pull_request.id, team["r1"].id)

    assert await reviewers_of(manager.uow, created.pull_request.id) == {team["r1"].id}


async def test_assigned_reviews_empty(manager, create_team):
    team = await create_team("backend", {"author": True})

    assert await manager.get_assigned_reviews_by_user_id(team["author"].id) == []
    assert await manager.get_assigned_reviews_by_user_id(uuid.uuid4()) == []


async def test_assigned_reviews_follow_reassignment(manager, create_team):
    team = await create_team("backend", {"author": True, "r1": True, "r2": True, "r3": True})
    first = await manager.create_and_assign(uuid.uuid4(), "first", team["author"].id)
    second = await manager.create_and_assign(uuid.uuid4(), "second", team["author"].id)
    reviewer = next(r for r in first.reviewers if r in second.reviewers)

    reviews = await manager.get_assigned_reviews_by_user_id(reviewer)
    assert [pr.id for pr in reviews] == [first.pull_request.id, second.pull_request.id]
    assert all(pr.status == PullRequestStatus.OPEN for pr in reviews)

    await manager.reassign(first.pull_request.id, reviewer)

    reviews = await manager.get_assigned_reviews_by_user_id(reviewer)
    assert [pr.name for pr in reviews] == ["second"]


async def test_concurrent_creations_of_same_id(manager, create_team):
    team = await create_team("backend", {"author": True, "r1": True})
    pull_request_id = uuid.uuid4()

    results = await asyncio.gather(
        manager.create_and_assign(pull_request_id, "one", team["author"].id),
        manager.create_and_assign(pull_request_id, "two", team["author"].id),
        return_exceptions=True,
    )

    assert sum(isinstance(r, PullRequestExistsException) for r in results) == 1
    assert sum(not isinstance(r, Exception) for r in results) == 1


async def test_concurrent_merges(manager, create_team):
    team = await create_team("backend", {"author": True, "r1": True})
    created = await manager.create_and_assign(uuid.uuid4(), "feature", team["author"].id)

    first, second = await asyncio.gather(
        manager.set_merged(created.pull_request.id),
        manager.set_merged(created.pull_request.id),
    )

    assert first == second


async def test_concurrent_reassign_of_same_reviewer(manager, create_team):
    team = await create_team("backend", {"author": True, "r1": True, "r2": True, "r3": True, "r4": True})
    created = await manager.create_and_assign(uuid.uuid4(), "feature", team["author"].id)
    old = created.reviewers[0]

    results = await asyncio.gather(
        manager.reassign(created.pull_request.id, old),
        manager.reassign(created.pull_request.id, old),
        return_exceptions=True,
    )

    assert sum(isinstance(r, ReviewerNotAssignedException) for r in results) == 1
    reviewers = await reviewers_of(manager.uow, created.pull_request.id)
    assert len(reviewers) == 2
    assert old not in reviewers


async def test_reassign_when_reviewer_removed_after_check(manager, create_team, monkeypatch):
    team = await create_team("backend", {"author": True, "r1": True, "r2": True, "r3": True})
    created = await manager.create_and_assign(uuid.uuid4(), "feature", team["author"].id)
    old = created.reviewers[0]

    async def already_removed(self, pull_request_id, user_id):
        raise NotFoundException("reviewer assignment not found", identifier=user_id)

    monkeypatch.setattr(MemoryReviewerStore, "remove_one", already_removed)

    with pytest.raises(ReviewerNotAssignedException) as exc_info:
        await manager.reassign(created.pull_request.id, old)

    assert exc_info.value.identifier == old
    assert await reviewers_of(manager.uow, created.pull_request.id) == set(created.reviewers)


async def test_reassign_and_merge_lock_the_pull_request(manager, create_team, monkeypatch):
    team = await create_team("backend", {"author": True, "r1": True, "r2": True, "r3": True})
    created = await manager.create_and_assign(uuid.uuid4(), "feature", team["author"].id)
    locked = []
    get_by_id = MemoryPullRequestStore.get_by_id

    async def recording_get_by_id(self, pull_request_id, for_update=False):
        locked.append(for_update)
        return await get_by_id(self, pull_request_id, for_update=for_update)

    monkeypatch.setattr(MemoryPullRequestStore, "get_by_id", recording_get_by_id)

    await manager.reassign(created.pull_request.id, created.reviewers[0])
    assert locked == [True]

    locked.clear()
    await manager.set_merged(created.pull_request.id)
    assert locked[0] is True
