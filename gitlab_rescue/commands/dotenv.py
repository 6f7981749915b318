"""Export project variables as shell statements."""

from __future__ import annotations

import argparse

from gitlab_rescue.commands.base import (
    Command,
    add_environment_argument,
    add_instance_arguments,
    per_page_int,
    positive_int,
    register_command,
)
from gitlab_rescue.export import (
    emit_statements,
    files_to_create,
    filter_by_environment,
    generate_export_statements,
    merge_variables,
    write_files,
)
from gitlab_rescue.models import (
    DEFAULT_PARALLEL,
    DEFAULT_PER_PAGE,
    Container,
    ContainerType,
    ShellType,
    Variable,
    normalize_environment,
)
from gitlab_rescue.pagination import collect_all


@register_command("dotenv")
class DotEnvCommand(Command):
    """Export project variables for the current shell."""

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "project", metavar="GITLAB_PROJECT", help="ID or NAMESPACE/PROJECT_NAME of the project"
        )
        add_environment_argument(parser)
        parser.add_argument("--output", "-o", default=None, help="Write dotenv to a file instead of stdout")
        parser.add_argument(
            "--shell",
            "-s",
            default="bash",
            choices=["bash", "zsh", "posix", "fish"],
            help="Generate dotenv for this shell type (default: bash)",
        )
        parser.add_argument(
            "--folder",
            default=None,
            help='Path where variables of type "File" are stored as <KEY>.var (default: .env.<ENVIRONMENT>)',
        )
        parser.add_argument(
            "--per-page",
            type=per_page_int,
            default=DEFAULT_PER_PAGE,
            help=f"Number of variables per request, at most 100 (default: {DEFAULT_PER_PAGE})",
        )
        parser.add_argument(
            "--parallel",
            type=positive_int,
            default=DEFAULT_PARALLEL,
            help="Number of threads for GitLab API requests (default: number of CPUs)",
        )
        parser.add_argument(
            "--with-group-vars",
            action="store_true",
            help="Also export variables of the group the project belongs to",
        )
        add_instance_arguments(parser)

    def run(self) -> None:
        environment = normalize_environment(self.args.environment)
        folder = self.args.folder or f".env.{self.args.environment}"
        project = Container(ContainerType.PROJECT, self.args.project)

        self.logger.info(f"Getting variables from project {project.id}...")
        variables = self._collect(project, environment)
        if self.args.with_group_vars:
            variables = merge_variables(self._group_variables(project, environment), variables)

        self.logger.info("Creating files for variables of type File...")
        write_files(folder, files_to_create(folder, variables))

        self.logger.info("Creating dotenv command list...")
        statements = generate_export_statements(ShellType.from_name(self.args.shell), variables, folder)
        emit_statements(statements, self.args.output)

    def _collect(self, container: Container, environment: str) -> list[Variable]:
        variables = collect_all(self.client, container, per_page=self.args.per_page, parallel=self.args.parallel)
        return filter_by_environment(variables, environment)

    def _group_variables(self, project: Container, environment: str) -> list[Variable]:
        namespace = self.client.get_project(project.id).get("namespace") or {}
        if namespace.get("kind") != "group":
            self.logger.info(f"Project {project.id} does not belong to a group, no group variables to export")
            return []

        group = Container(ContainerType.GROUP, str(namespace.get("id") or namespace["full_path"]))
        self.logger.info(f"Getting variables from group {namespace.get('full_path', group.id)}...")
        return self._collect(group, environment)
