"""GitHub API errors."""

import httpx


class GitHubError(Exception):
    """Base error raised by the GitHub client."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class GitHubAPIError(GitHubError):
    """Non-2xx response from the GitHub API."""

    def __init__(self, status_code: int, message: str, path: str | None = None):
        self.status_code = status_code
        self.path = path
        text = f"{message} (HTTP {status_code})"
        if path:
            text = f"{path}: {text}"
        super().__init__(text)


class NotFoundError(GitHubAPIError):
    """Resource does not exist (or is hidden from this token)."""


class ConflictError(GitHubAPIError):
    """Write rejected because the blob SHA no longer matches."""


class NotAFileError(GitHubError):
    """Path resolved to something other than a file."""

    def __init__(self, path: str, kind: str):
        self.path = path
        self.kind = kind
        super().__init__(f"Path is not a file: {path} ({kind})")


class GitHubTransportError(GitHubError):
    """Network failure that survived the retry policy."""

    def __init__(self, error: httpx.HTTPError):
        self.error = error
        super().__init__(str(error) or error.__class__.__name__)


def error_from_response(response: httpx.Response, path: str | None = None) -> GitHubAPIError:
    """Build a typed error from a failed response."""
    message = response.reason_phrase or "Request failed"
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("message"):
        message = data["message"]

    status = response.status_code
    if status == 404:
        return NotFoundError(status, message, path)
    # 422 is what GitHub sends when an update omits the sha
    if status == 409 or (status == 422 and "sha" in message.lower()):
        return ConflictError(status, message, path)
    return GitHubAPIError(status, message, path)
