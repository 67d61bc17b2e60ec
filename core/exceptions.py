from typing import Any


class ServiceException(Exception):
    code: str = "INTERNAL"
    message: str = "internal server error"

    def __init__(self, message: str | None = None, identifier: Any = None):
        if message is not None:
            self.message = message
        self.identifier = identifier
        super().__init__(str(self))

    def __str__(self):
        if self.identifier is None:
            return self.message
        return f"{self.message}: {self.identifier}"


# store-level kinds


class NotFoundException(ServiceException):
    code = "NOT_FOUND"
    message = "entity not found"


class ConflictException(ServiceException):
    code = "CONFLICT"
    message = "entity already exists"


class InvalidStateException(ServiceException):
    code = "INVALID_STATE"
    message = "operation is not allowed in the current state"


class ReviewerNotAssignedException(ServiceException):
    code = "NOT_ASSIGNED"
    message = "reviewer is not assigned to this pull request"


class NoCandidateException(ServiceException):
    code = "NO_CANDIDATE"
    message = "no active replacement candidate in team"


# operation-level failures


class AuthorNotFoundException(NotFoundException):
    message = "author not found"


class TeamNotFoundException(NotFoundException):
    message = "team not found"


class UserNotFoundException(NotFoundException):
    message = "user not found"


class PullRequestNotFoundException(NotFoundException):
    message = "pull request not found"


class TeamExistsException(ConflictException):
    code = "TEAM_EXISTS"
    message = "team already exists"


class UsernameTakenException(ConflictException):
    message = "username already taken in team"


class PullRequestExistsException(ConflictException):
    code = "PR_EXISTS"
    message = "pull request already exists"


class PullRequestMergedException(InvalidStateException):
    code = "PR_MERGED"
    message = "cannot reassign on merged pull request"
