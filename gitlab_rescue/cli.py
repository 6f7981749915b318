"""CLI entry point for gitlab-rescue."""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Mapping

# Ensure all commands are registered by importing the commands package
import gitlab_rescue.commands  # noqa: F401
from gitlab_rescue.client import GitLabClient
from gitlab_rescue.commands import get_command_registry
from gitlab_rescue.errors import GitLabRescueError, InvalidInputError
from gitlab_rescue.logging_utils import setup_logging
from gitlab_rescue.models import DEFAULT_GITLAB_URL, Settings


def resolve_settings(args: argparse.Namespace, environ: Mapping[str, str]) -> Settings:
    """Resolve connection settings from flags, then environment, then defaults."""
    url = args.url or environ.get("GITLAB_URL") or DEFAULT_GITLAB_URL
    token = args.token or environ.get("GITLAB_API_TOKEN") or environ.get("GITLAB_TOKEN")
    if not token:
        raise InvalidInputError("Please set a valid GitLab API token (-t, --token or $GITLAB_API_TOKEN variable)")
    if args.max_retries < 0:
        raise InvalidInputError(f"--max-retries must not be negative, got {args.max_retries}")
    if args.timeout <= 0:
        raise InvalidInputError(f"--timeout must be positive, got {args.timeout}")
    return Settings(url=url, token=token, max_retries=args.max_retries, timeout=args.timeout)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitlab-rescue",
        description="CLI tool for getting and exporting GitLab CI/CD variables (read only).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
    GITLAB_API_TOKEN - GitLab API token (GITLAB_TOKEN is also accepted)
    GITLAB_URL       - GitLab instance URL (default: https://gitlab.com)

Examples:
    # Print a variable of a project, scoped to the "dev" environment
    gitlab-rescue get DATABASE_URL -p myorg/myproject -e dev

    # Same, falling back to the "All" environment when there is no "dev" value
    gitlab-rescue get DATABASE_URL -p myorg/myproject -e dev --from-all-if-missing

    # Print a group variable
    gitlab-rescue get DEPLOY_KEY -g myorg

    # Load every "prod" variable into the current shell
    eval "$(gitlab-rescue dotenv myorg/myproject -e prod)"

    # Write a fish dotenv file, storing File variables under ./secrets
    gitlab-rescue dotenv 1234 -s fish --folder secrets -o prod.fish
""",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--json", action="store_true", dest="json_output", help="Output log messages as JSON lines (to stderr)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to perform")

    registry = get_command_registry()
    for name, cmd_cls in sorted(registry.items()):
        sub = subparsers.add_parser(name, help=cmd_cls.__doc__)
        cmd_cls.add_arguments(sub)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logger = setup_logging(json_mode=args.json_output, verbose=args.verbose)

    try:
        settings = resolve_settings(args, os.environ)
        client = GitLabClient.from_settings(settings)
        logger.debug(f"Using GitLab instance {settings.url}")

        command = get_command_registry()[args.command](client=client, args=args)
        command.run()
    except GitLabRescueError as e:
        logger.error(e.display())
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
