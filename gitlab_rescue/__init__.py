"""
gitlab-rescue: read-only CLI for GitLab CI/CD variables.

Prints a single project or group variable, or exports every variable of a
project as shell statements ("dotenv"), writing variables of type File to disk.

Environment:
    GITLAB_API_TOKEN - GitLab API token (GITLAB_TOKEN is also accepted)
    GITLAB_URL       - GitLab instance URL (default: https://gitlab.com)
"""

from gitlab_rescue.cli import main

__version__ = "0.1.0"
__all__ = ["main", "__version__"]
