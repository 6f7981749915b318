"""Shared test fixtures for gitlab-rescue tests."""

import json
import sys
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlparse

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from gitlab_rescue.client import GitLabClient

# Constants for use in tests - pytest makes conftest.py fixtures available,
# but these constants need to be imported directly from tests
MOCK_GITLAB_URL = "https://gitlab.example.com"
MOCK_API_URL = f"{MOCK_GITLAB_URL}/api/v4"


def make_variable(
    key: str, value: str = "value", variable_type: str = "env_var", environment_scope: str = "*"
) -> dict[str, Any]:
    """Variable object as returned by the GitLab API."""
    return {
        "variable_type": variable_type,
        "key": key,
        "value": value,
        "protected": False,
        "masked": False,
        "environment_scope": environment_scope,
    }


def query_of(request) -> dict[str, str]:
    """Query string of a recorded request, decoded to single values."""
    return {k: v[0] for k, v in parse_qs(urlparse(request.url).query).items()}


def paginated_callback(variables: list[dict[str, Any]]):
    """responses callback serving ``variables`` page by page with an x-total header."""

    def callback(request):
        query = query_of(request)
        page, per_page = int(query["page"]), int(query["per_page"])
        chunk = variables[(page - 1) * per_page : page * per_page]
        return (200, {"x-total": str(len(variables))}, json.dumps(chunk))

    return callback


@pytest.fixture
def mock_client():
    """GitLabClient pointing at mock server."""
    return GitLabClient(MOCK_GITLAB_URL, "test-token")


@pytest.fixture
def sample_variables() -> list[dict[str, Any]]:
    """Variables spread over environments, mixing env_var and file types."""
    return [
        make_variable("TEST_VARIABLE_1", '{"test_variable":"one"}', "file", "dev"),
        make_variable("TEST_VARIABLE_2", "TEST_2", "env_var", "dev"),
        make_variable("TEST_VARIABLE_3", "TEST_3", "env_var", "*"),
        make_variable("TEST_VARIABLE_4", '{"test_variable":"four"}', "file", "*"),
        make_variable("TEST_VARIABLE_5", "TEST_5", "env_var", "qa"),
        make_variable("TEST_VARIABLE_6", "TEST_6", "env_var", "prod"),
        make_variable("TEST_VARIABLE_7", '{"test_variable":"seven"}', "file", "prod"),
        make_variable("TEST_VARIABLE_8", "TEST_8", "env_var", "prod"),
    ]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep GitLab settings of the developer machine out of the tests."""
    for name in ("GITLAB_URL", "GITLAB_API_TOKEN", "GITLAB_TOKEN"):
        monkeypatch.delenv(name, raising=False)
