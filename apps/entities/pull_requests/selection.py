"""Uniform random reviewer selection.

The random source is always passed in. Callers create one per operation, so
no generator state is shared between concurrent requests, and tests can seed
it to make a draw reproducible.
"""

import random
from typing import Iterable

from apps.entities.users.schemas import User
from core.types import EntityId


def eligible_candidates(users: Iterable[User], exclude: set[EntityId]) -> list[EntityId]:
    """Active users whose id is not excluded, in the order given."""
    return [user.id for user in users if user.is_active and user.id not in exclude]


def pick_reviewers(candidates: list[EntityId], rng: random.Random, limit: int) -> list[EntityId]:
    pool = list(candidates)
    rng.shuffle(pool)
    return pool[:limit]


def pick_replacement(candidates: list[EntityId], rng: random.Random) -> EntityId:
    return rng.choice(candidates)
