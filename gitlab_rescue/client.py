"""GitLab API client for CI/CD variables, with retry support."""

from __future__ import annotations

import logging
import math
import threading
import time
import urllib.parse
from typing import Any

import requests

from gitlab_rescue.errors import ApiError, VariableNotFoundError
from gitlab_rescue.logging_utils import LOGGER_NAME
from gitlab_rescue.models import (
    API_V4,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    RETRY_BACKOFF_FACTOR,
    RETRYABLE_STATUS_CODES,
    TOTAL_HEADER,
    Container,
    ContainerType,
    PageResult,
    RetrievalRequest,
    Settings,
    Variable,
)


def encode_path(identifier: str | int) -> str:
    """Percent-encode a path segment; already encoded input is left as is."""
    return urllib.parse.quote(urllib.parse.unquote(str(identifier)), safe="")


class GitLabClient:
    """Read-only wrapper around the GitLab REST API v4 variable endpoints."""

    def __init__(
        self,
        base_url: str,
        token: str,
        max_retries: int = DEFAULT_MAX_RETRIES,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_url = f"{self.base_url}{API_V4}"
        self.headers = {"PRIVATE-TOKEN": token}
        self._local = threading.local()
        self.max_retries = max_retries
        self.timeout = timeout
        self.logger = logging.getLogger(LOGGER_NAME)

    @property
    def session(self) -> requests.Session:
        """Session of the calling thread; page workers never share one."""
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers.update(self.headers)
            self._local.session = session
        return session

    @classmethod
    def from_settings(cls, settings: Settings) -> GitLabClient:
        return cls(settings.url, settings.token, max_retries=settings.max_retries, timeout=settings.timeout)

    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """Make an HTTP request with retry logic for transient failures."""
        url = f"{self.api_url}{endpoint}"
        kwargs.setdefault("timeout", self.timeout)
        last_exception: Exception | None = None

        for attempt in range(self.max_retries + 1):
            try:
                self.logger.debug(
                    f"{method.upper()} {url} {kwargs.get('params') or ''} "
                    f"(attempt {attempt + 1}/{self.max_retries + 1})"
                )
                resp = self.session.request(method, url, **kwargs)

                # Retry on rate limit or server errors
                if resp.status_code in RETRYABLE_STATUS_CODES and attempt < self.max_retries:
                    wait_time = self._calculate_backoff(resp, attempt)
                    self.logger.warning(f"Retryable error {resp.status_code}, waiting {wait_time:.1f}s before retry")
                    time.sleep(wait_time)
                    continue

                if resp.status_code >= 400:
                    self.logger.debug(f"API error {resp.status_code}: {resp.text[:500]}")
                resp.raise_for_status()
                return resp

            except requests.exceptions.ConnectionError as e:
                last_exception = e
                if attempt < self.max_retries:
                    wait_time = RETRY_BACKOFF_FACTOR * (2**attempt)
                    self.logger.warning(f"Connection error, retrying in {wait_time:.1f}s: {e}")
                    time.sleep(wait_time)
                    continue
                raise

        if last_exception:
            raise last_exception
        raise RuntimeError("Unexpected retry loop exit")

    def _calculate_backoff(self, resp: requests.Response, attempt: int) -> float:
        """Calculate backoff time, respecting Retry-After header for 429s."""
        if resp.status_code == 429:
            retry_after = resp.headers.get("Retry-After")
            if retry_after:
                try:
                    wait_time = float(retry_after)
                except ValueError:
                    wait_time = math.nan
                if math.isfinite(wait_time):
                    return max(0.0, wait_time)
        return RETRY_BACKOFF_FACTOR * (2**attempt)

    def _get(self, endpoint: str, params: dict | None = None) -> requests.Response:
        """GET an endpoint, translating transport failures into ApiError."""
        try:
            return self._request("GET", endpoint, params=params)
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise ApiError(f"GitLab API responded {status} for {endpoint}", status_code=status) from e
        except requests.RequestException as e:
            raise ApiError(f"Request to {self.api_url}{endpoint} failed: {e}") from e

    @staticmethod
    def _json(resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise ApiError(f"Invalid JSON in response from {resp.url}") from e

    # -- Variable source --

    def get_variable(self, container: Container, name: str, environment: str | None = None) -> Variable:
        """
        Fetch a single variable from a project or group.

        The environment scope filter only applies to projects; group lookups
        ignore it.
        """
        endpoint = f"/{container.endpoint}/{encode_path(container.id)}/variables/{encode_path(name)}"
        params = None
        if container.type == ContainerType.PROJECT and environment is not None:
            params = {"filter[environment_scope]": environment}

        try:
            resp = self._get(endpoint, params=params)
        except ApiError as e:
            if e.status_code == 404:
                scope = f" (environment '{environment}')" if params else ""
                raise VariableNotFoundError(
                    f"Variable {name} not found in {container.type.value} {container.id}{scope}",
                    status_code=404,
                ) from e
            raise
        return Variable.from_api(self._json(resp))

    def get_page(self, request: RetrievalRequest) -> PageResult:
        """Fetch one page of variables together with the total item count."""
        container = request.container
        resp = self._get(
            f"/{container.endpoint}/{encode_path(container.id)}/variables",
            params={"page": request.page, "per_page": request.per_page},
        )
        raw_total = resp.headers.get(TOTAL_HEADER)
        try:
            total = int(raw_total)
        except (TypeError, ValueError):
            raise ApiError(
                f"Missing or invalid {TOTAL_HEADER} header listing variables of "
                f"{container.type.value} {container.id}: {raw_total!r}"
            ) from None

        data = self._json(resp)
        if not isinstance(data, list):
            raise ApiError(f"Expected a list of variables, got {type(data).__name__}")
        return PageResult(items=[Variable.from_api(item) for item in data], total=total)

    def get_project(self, project: str) -> dict:
        """Get project details by ID or path."""
        return self._json(self._get(f"/projects/{encode_path(project)}"))
