"""Single variable lookup with fallback to the "All" environment."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gitlab_rescue.errors import VariableNotFoundError
from gitlab_rescue.logging_utils import LOGGER_NAME
from gitlab_rescue.models import ALL_ENVIRONMENTS, Container, ContainerType, Variable

if TYPE_CHECKING:
    from gitlab_rescue.client import GitLabClient


def resolve(
    client: GitLabClient,
    container: Container,
    name: str,
    environment: str = ALL_ENVIRONMENTS,
    from_all_if_missing: bool = False,
) -> Variable:
    """
    Get a variable by name.

    For projects the lookup is scoped to ``environment``. If nothing is found
    there and ``from_all_if_missing`` is set, one more lookup is made in the
    "All" (``*``) environment. Groups have no environment scope, so they are
    looked up directly without fallback.
    """
    logger = logging.getLogger(LOGGER_NAME)

    if container.type == ContainerType.GROUP:
        logger.info(f"Getting variable from group {container.id}...")
        return client.get_variable(container, name)

    logger.info(f"Getting variable from project {container.id}...")
    try:
        return client.get_variable(container, name, environment)
    except VariableNotFoundError:
        if environment == ALL_ENVIRONMENTS or not from_all_if_missing:
            raise
    logger.info('Getting variable from "All" environment...')
    return client.get_variable(container, name, ALL_ENVIRONMENTS)
