"""Data models and constants for gitlab-rescue."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from gitlab_rescue.errors import ApiError

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_GITLAB_URL = "https://gitlab.com"
API_V4 = "/api/v4"

# Pagination
MAX_PER_PAGE = 100
DEFAULT_PER_PAGE = 100
DEFAULT_PARALLEL = os.cpu_count() or 1
TOTAL_HEADER = "x-total"

# GitLab only accepts letters, digits and underscores in variable keys
VARIABLE_KEY_PATTERN = re.compile(r"[A-Za-z0-9_]+")

# Retry configuration
DEFAULT_MAX_RETRIES = 3
DEFAULT_TIMEOUT = 30.0  # seconds, per request
RETRY_BACKOFF_FACTOR = 0.5  # seconds
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

# Environment scopes
ALL_ENVIRONMENTS = "*"
ALL_ENVIRONMENTS_ALIAS = "All"
DEFAULT_ENVIRONMENT = ALL_ENVIRONMENTS_ALIAS


def normalize_environment(environment: str | None) -> str:
    """Map the user-facing "All" environment to the API wildcard scope."""
    if environment is None or environment in (ALL_ENVIRONMENTS_ALIAS, ALL_ENVIRONMENTS):
        return ALL_ENVIRONMENTS
    return environment


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ContainerType(Enum):
    PROJECT = "project"
    GROUP = "group"


class VariableType(Enum):
    ENV_VAR = "env_var"
    FILE = "file"


class ShellType(Enum):
    """Shell dialects supported by dotenv generation."""

    POSIX = "posix"
    FISH = "fish"

    @classmethod
    def from_name(cls, name: str) -> ShellType:
        """bash and zsh share the POSIX dialect."""
        return cls.FISH if name == "fish" else cls.POSIX

    def export_command(self, key: str, value: str) -> str:
        if self is ShellType.FISH:
            escaped = _escape(value, '\\"$')
            return f'set -gx {key} "{escaped}"'
        escaped = _escape(value, '\\"$`')
        return f'export {key}="{escaped}"'


def _escape(value: str, special: str) -> str:
    return "".join(f"\\{ch}" if ch in special else ch for ch in value)


# ---------------------------------------------------------------------------
# Data Classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Container:
    """A project or a group that owns CI/CD variables."""

    type: ContainerType
    id: str

    @classmethod
    def from_options(cls, project: str | None, group: str | None) -> Container:
        """Build a container from mutually exclusive --project/--group values."""
        if bool(project) == bool(group):
            raise ValueError("Exactly one of project or group must be set")
        if project:
            return cls(ContainerType.PROJECT, project)
        return cls(ContainerType.GROUP, group)

    @property
    def endpoint(self) -> str:
        return "projects" if self.type == ContainerType.PROJECT else "groups"


@dataclass(frozen=True)
class Variable:
    """A CI/CD variable as returned by the GitLab API."""

    key: str
    value: str
    variable_type: VariableType = VariableType.ENV_VAR
    environment_scope: str = ALL_ENVIRONMENTS

    @classmethod
    def from_api(cls, data: Any) -> Variable:
        if not isinstance(data, dict):
            raise ApiError(f"Unexpected variable payload: {data!r}")
        key = data.get("key")
        if not key or not isinstance(key, str):
            raise ApiError("Variable without a key in API response")
        if not VARIABLE_KEY_PATTERN.fullmatch(key):
            raise ApiError(f"Invalid variable key in API response: {key!r}")
        try:
            variable_type = VariableType(data.get("variable_type") or VariableType.ENV_VAR.value)
        except ValueError:
            raise ApiError(f"Unknown type '{data.get('variable_type')}' for variable {key}") from None
        value = data.get("value")
        return cls(
            key=key,
            value="" if value is None else str(value),
            variable_type=variable_type,
            environment_scope=data.get("environment_scope") or ALL_ENVIRONMENTS,
        )


@dataclass
class PageResult:
    """One page of a paginated variable listing."""

    items: list[Variable]
    total: int


@dataclass(frozen=True)
class RetrievalRequest:
    """Parameters of a single page request, handed to pool workers by value."""

    container: Container
    page: int
    per_page: int


@dataclass(frozen=True)
class Settings:
    """Connection settings resolved once at startup."""

    url: str
    token: str
    max_retries: int = DEFAULT_MAX_RETRIES
    timeout: float = DEFAULT_TIMEOUT
