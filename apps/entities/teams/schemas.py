from pydantic import Field
from pydantic import model_validator

from apps.entities.users.schemas import User
from core.types import EntityId
from core.types import NonEmptyStr
from core.utils import ImmutableModel


class Team(ImmutableModel):
    id: EntityId
    name: str


class TeamMember(ImmutableModel):
    user_id: EntityId
    username: NonEmptyStr
    is_active: bool = True


class TeamCreate(ImmutableModel):
    team_name: NonEmptyStr
    members: list[TeamMember] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_members(self):
        if len({m.user_id for m in self.members}) != len(self.members):
            raise ValueError("members contain duplicated user_id")
        if len({m.username for m in self.members}) != len(self.members):
            raise ValueError("members contain duplicated username")
        return self


class TeamWithUsers(ImmutableModel):
    team: Team
    users: list[User]

    def as_response(self) -> dict:
        return {
            "team_name": self.team.name,
            "members": [
                {"user_id": str(u.id), "username": u.username, "is_active": u.is_active} for u in self.users
            ],
        }
