import uuid
from datetime import datetime
from datetime import timezone

from pydantic import BaseModel
from pydantic import ConfigDict


class ImmutableModel(BaseModel):
    model_config = ConfigDict(frozen=True, validate_default=True)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> uuid.UUID:
    return uuid.uuid4()
