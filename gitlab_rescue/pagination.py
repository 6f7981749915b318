"""Concurrent retrieval of paginated variable listings."""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from gitlab_rescue.logging_utils import LOGGER_NAME
from gitlab_rescue.models import DEFAULT_PARALLEL, DEFAULT_PER_PAGE, Container, RetrievalRequest, Variable

if TYPE_CHECKING:
    from gitlab_rescue.client import GitLabClient


def num_requests(remaining: int, per_page: int) -> int:
    """
    Number of extra page requests needed for ``remaining`` items.

    Always at least one: callers only ask when the first page fell short.
    """
    return max(1, math.ceil(remaining / per_page))


def collect_all(
    client: GitLabClient,
    container: Container,
    per_page: int = DEFAULT_PER_PAGE,
    parallel: int = DEFAULT_PARALLEL,
) -> list[Variable]:
    """
    Fetch every variable of a container.

    The first page is fetched on its own to learn the total count. Remaining
    pages are fetched concurrently by at most ``parallel`` workers. All
    dispatched requests are awaited before results are combined; if any page
    failed, the first failure (in page order) is raised.
    """
    logger = logging.getLogger(LOGGER_NAME)

    first = client.get_page(RetrievalRequest(container, page=1, per_page=per_page))
    items = list(first.items)
    if len(items) >= first.total:
        return items

    extra = num_requests(first.total - len(items), per_page)
    logger.debug(f"{first.total} variables in total, fetching {extra} more page(s) with {parallel} worker(s)")

    page_requests = [RetrievalRequest(container, page=page, per_page=per_page) for page in range(2, extra + 2)]
    with ThreadPoolExecutor(max_workers=parallel) as executor:
        futures = [executor.submit(client.get_page, request) for request in page_requests]
    # Leaving the with block waits for every future

    errors = [future.exception() for future in futures if future.exception() is not None]
    if errors:
        if len(errors) > 1:
            logger.debug(f"{len(errors)} of {extra} page requests failed")
        raise errors[0]

    for future in futures:
        items.extend(future.result().items)
    return items
