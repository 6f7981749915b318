"""Environment filtering and dotenv generation for CI/CD variables."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable

from gitlab_rescue.errors import CliError, InvalidInputError
from gitlab_rescue.logging_utils import LOGGER_NAME
from gitlab_rescue.models import ALL_ENVIRONMENTS, ShellType, Variable, VariableType

# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------


def filter_by_environment(variables: Iterable[Variable], environment: str) -> list[Variable]:
    """Keep variables scoped to ``environment`` or to all environments."""
    return [v for v in variables if v.environment_scope in (ALL_ENVIRONMENTS, environment)]


def merge_variables(group_variables: Iterable[Variable], project_variables: Iterable[Variable]) -> list[Variable]:
    """Combine group and project variables; project variables win on key clashes."""
    project_variables = list(project_variables)
    project_keys = {v.key for v in project_variables}
    return [v for v in group_variables if v.key not in project_keys] + project_variables


# ---------------------------------------------------------------------------
# Materialization
# ---------------------------------------------------------------------------


def variable_file_path(folder: str, key: str) -> str:
    return f"{folder}/{key}.var"


def files_to_create(folder: str, variables: Iterable[Variable]) -> dict[str, bytes]:
    """Map the file path of every File-type variable to its raw content."""
    return {
        variable_file_path(folder, v.key): v.value.encode("utf-8")
        for v in variables
        if v.variable_type == VariableType.FILE
    }


def generate_export_statements(shell: ShellType, variables: Iterable[Variable], folder: str) -> list[str]:
    """
    Build one export statement per variable, in input order.

    File-type variables export the path of their file, not their content.
    """
    return [
        shell.export_command(
            v.key,
            variable_file_path(folder, v.key) if v.variable_type == VariableType.FILE else v.value,
        )
        for v in variables
    ]


def write_files(folder: str, files: dict[str, bytes]) -> None:
    """Create ``folder`` if needed and write every file into it."""
    try:
        os.makedirs(folder, exist_ok=True)
    except OSError as e:
        raise InvalidInputError(f"Folder {folder} could not be created. Error: {e}") from e

    for path, content in files.items():
        try:
            with open(path, "wb") as fh:
                fh.write(content)
        except OSError as e:
            raise CliError(f"Some files could not be created. Error: {e}") from e


def emit_statements(statements: list[str], output_file: str | None = None) -> None:
    """
    Write statements to ``output_file``, or print them to stdout.

    If the output file cannot be written the statements are printed instead.
    """
    if output_file:
        try:
            with open(output_file, "w", encoding="utf-8") as fh:
                fh.write("\n".join(statements) + "\n")
            return
        except OSError as e:
            logging.getLogger(LOGGER_NAME).warning(
                f"Output file could not be created. Error: {e}. Printing dotenv in STDOUT..."
            )

    for statement in statements:
        print(statement)
