"""Base class and registry for commands."""

from __future__ import annotations

import argparse
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from gitlab_rescue.logging_utils import LOGGER_NAME
from gitlab_rescue.models import DEFAULT_ENVIRONMENT, DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT, MAX_PER_PAGE

if TYPE_CHECKING:
    from gitlab_rescue.client import GitLabClient

# ---------------------------------------------------------------------------
# Command Registry
# ---------------------------------------------------------------------------

_command_registry: dict[str, type[Command]] = {}


def register_command(name: str):
    """Decorator to register a command class under a CLI subcommand name."""

    def decorator(cls):
        _command_registry[name] = cls
        cls.command_name = name
        return cls

    return decorator


def get_command_registry() -> dict[str, type[Command]]:
    """Get the command registry."""
    return _command_registry


# ---------------------------------------------------------------------------
# Shared arguments
# ---------------------------------------------------------------------------


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: '{value}'") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def per_page_int(value: str) -> int:
    number = positive_int(value)
    if number > MAX_PER_PAGE:
        raise argparse.ArgumentTypeError(f"must be at most {MAX_PER_PAGE}, got {number}")
    return number


def add_instance_arguments(parser: argparse.ArgumentParser) -> None:
    """Arguments describing how to reach the GitLab instance."""
    parser.add_argument(
        "--url",
        "-u",
        default=None,
        help="URL of the GitLab instance (default: from GITLAB_URL env or https://gitlab.com)",
    )
    parser.add_argument(
        "--token",
        "-t",
        default=None,
        help="GitLab API token (default: from GITLAB_API_TOKEN or GITLAB_TOKEN env)",
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        default=DEFAULT_MAX_RETRIES,
        help=f"Maximum retry attempts for transient errors (default: {DEFAULT_MAX_RETRIES})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Timeout in seconds for each API request (default: {DEFAULT_TIMEOUT:g})",
    )


def add_environment_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--environment",
        "-e",
        default=DEFAULT_ENVIRONMENT,
        help=f"Name of GitLab CI/CD environment (default: {DEFAULT_ENVIRONMENT})",
    )


# ---------------------------------------------------------------------------
# Command Base Class
# ---------------------------------------------------------------------------


class Command(ABC):
    """Base class for all commands."""

    command_name: str = ""

    def __init__(self, client: GitLabClient, args: argparse.Namespace):
        self.client = client
        self.args = args
        self.logger = logging.getLogger(LOGGER_NAME)

    @staticmethod
    @abstractmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        """Add command-specific CLI arguments."""
        ...

    @abstractmethod
    def run(self) -> None:
        """Execute the command, raising GitLabRescueError on failure."""
        ...
