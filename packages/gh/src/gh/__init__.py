"""GitHub API client utilities."""

from .client import GitHubClient, get_token
from .errors import (
    ConflictError,
    GitHubAPIError,
    GitHubError,
    GitHubTransportError,
    NotAFileError,
    NotFoundError,
)
from .models import (
    GitHubBranch,
    GitHubCommit,
    GitHubContent,
    GitHubDirectory,
    GitHubFile,
    GitHubWriteResult,
)

__all__ = [
    "GitHubClient",
    "GitHubContent",
    "GitHubFile",
    "GitHubDirectory",
    "GitHubBranch",
    "GitHubCommit",
    "GitHubWriteResult",
    "GitHubError",
    "GitHubAPIError",
    "GitHubTransportError",
    "NotFoundError",
    "ConflictError",
    "NotAFileError",
    "get_token",
]
