from core.types import EntityId
from core.utils import ImmutableModel


class User(ImmutableModel):
    id: EntityId
    username: str
    is_active: bool
    team_id: EntityId


class UserWithTeamName(ImmutableModel):
    id: EntityId
    username: str
    is_active: bool
    team_name: str

    def as_response(self) -> dict:
        return {
            "user_id": str(self.id),
            "username": self.username,
            "team_name": self.team_name,
            "is_active": self.is_active,
        }


class UserSetIsActive(ImmutableModel):
    user_id: EntityId
    is_active: bool
