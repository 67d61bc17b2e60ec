from datetime import datetime
from typing import Annotated
from typing import Callable
from uuid import UUID

from pydantic import StringConstraints

EntityId = UUID
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]

Clock = Callable[[], datetime]
IdFactory = Callable[[], EntityId]
