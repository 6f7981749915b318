"""Print a single variable."""

from __future__ import annotations

import argparse

from gitlab_rescue.commands.base import (
    Command,
    add_environment_argument,
    add_instance_arguments,
    register_command,
)
from gitlab_rescue.errors import InvalidInputError
from gitlab_rescue.models import Container, normalize_environment
from gitlab_rescue.resolver import resolve


@register_command("get")
class GetVariableCommand(Command):
    """Print a variable value in STDOUT."""

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("variable_name", metavar="VARIABLE_NAME", help="Name of GitLab CI/CD variable")
        owner = parser.add_mutually_exclusive_group(required=True)
        owner.add_argument(
            "--project",
            "-p",
            help="ID or NAMESPACE/PROJECT_NAME of the project (not with --group)",
        )
        owner.add_argument("--group", "-g", help="ID or path of the group (not with --project)")
        add_environment_argument(parser)
        parser.add_argument(
            "--from-all-if-missing",
            action="store_true",
            help='If the variable is not found in the environment (-e), try the "All" environment',
        )
        add_instance_arguments(parser)

    def run(self) -> None:
        try:
            container = Container.from_options(self.args.project, self.args.group)
        except ValueError as e:
            raise InvalidInputError(str(e)) from None

        variable = resolve(
            self.client,
            container,
            self.args.variable_name,
            environment=normalize_environment(self.args.environment),
            from_all_if_missing=self.args.from_all_if_missing,
        )
        self.logger.info(f"Variable {variable.key} obtained successfully")
        print(variable.value)
