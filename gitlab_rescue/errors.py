"""Error taxonomy for gitlab-rescue."""

from __future__ import annotations


class GitLabRescueError(Exception):
    """Base class for every error reported to the user."""

    label = "Error"

    def display(self) -> str:
        return f"[{self.label}] {self}"


class InvalidInputError(GitLabRescueError):
    """Bad command-line input or an unusable filesystem target."""

    label = "InvalidInputError"


class ApiError(GitLabRescueError):
    """Transport failure, error response or malformed API payload."""

    label = "ApiError"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class VariableNotFoundError(ApiError):
    """The API has no variable with the requested name and scope."""


class CliError(GitLabRescueError):
    """Operational failure while producing output."""

    label = "CliError"
