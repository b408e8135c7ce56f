"""GitHub API client."""

import base64
import logging
import os
import subprocess
from typing import Any
from urllib.parse import quote

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    before_sleep_log,
)

from .errors import GitHubTransportError, NotAFileError, error_from_response
from .models import (
    GitHubBranch,
    GitHubContent,
    GitHubDirectory,
    GitHubFile,
    GitHubWriteResult,
)

logger = logging.getLogger(__name__)

# Retry configuration
DEFAULT_MAX_RETRIES = 3
DEFAULT_MIN_WAIT = 1  # seconds
DEFAULT_MAX_WAIT = 10  # seconds
DEFAULT_PER_PAGE = 100

# Retryable exceptions
RETRYABLE_EXCEPTIONS = (
    httpx.ConnectError,
    httpx.ConnectTimeout,
    httpx.ReadTimeout,
    httpx.WriteTimeout,
    httpx.PoolTimeout,
    httpx.NetworkError,
)


def get_token_from_gh_cli() -> str | None:
    """
    Get GitHub token from gh cli.

    Returns:
        Token string or None if gh cli not available/authenticated
    """
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode == 0 and result.stdout.strip():
            logger.info("Using token from gh cli")
            return result.stdout.strip()
    except (subprocess.TimeoutExpired, FileNotFoundError) as e:
        logger.debug("gh cli not available: %s", e)
    return None


def get_token(token: str | None = None, use_gh_cli: bool = False) -> str | None:
    """
    Get GitHub token from various sources.

    Priority:
    1. Explicitly provided token
    2. Environment variable GH_TOKEN / GITHUB_TOKEN
    3. gh cli (`gh auth token`) - only if use_gh_cli=True

    Args:
        token: Explicitly provided token
        use_gh_cli: Whether to use gh cli credentials (requires user consent)

    Returns:
        GitHub token or None
    """
    if token:
        logger.debug("Using explicitly provided token")
        return token

    env_token = os.environ.get("GH_TOKEN") or os.environ.get("GITHUB_TOKEN")
    if env_token:
        logger.info("Using token from environment variable")
        return env_token

    if use_gh_cli:
        return get_token_from_gh_cli()

    return None


def create_retry_decorator(max_retries: int = DEFAULT_MAX_RETRIES):
    """Create a retry decorator with specified max retries."""
    return retry(
        retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS),
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential(multiplier=1, min=DEFAULT_MIN_WAIT, max=DEFAULT_MAX_WAIT),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


def encode_content(content: str | bytes) -> str:
    """Base64-encode a file body for the contents API."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return base64.b64encode(content).decode("ascii")


def decode_content(raw: bytes) -> tuple[str, bool]:
    """Decode a blob as UTF-8 text, returning ("", True) for binary data."""
    try:
        return raw.decode("utf-8"), False
    except UnicodeDecodeError:
        return "", True


class GitHubClient:
    """GitHub REST API client with retry support."""

    BASE_URL = "https://api.github.com"

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
        use_gh_cli: bool = False,
        max_retries: int = DEFAULT_MAX_RETRIES,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize GitHub client.

        Args:
            token: GitHub personal access token (optional)
            base_url: Custom base URL (defaults to GitHub API)
            timeout: Request timeout in seconds
            use_gh_cli: Use gh cli credentials (requires user consent)
            max_retries: Maximum number of retry attempts (default: 3)
            transport: Custom httpx transport (tests, proxies)
        """
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.transport = transport
        self.headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "repo-explorer-github-client",
        }

        resolved_token = get_token(token, use_gh_cli=use_gh_cli)
        self.authenticated = bool(resolved_token)

        if resolved_token:
            self.headers["Authorization"] = f"token {resolved_token}"
            logger.debug("GitHub client initialized with token")
        else:
            logger.warning("GitHub client initialized without token (rate limited)")
        logger.info("GitHub client ready, base_url=%s, max_retries=%d", self.base_url, max_retries)

    def _http(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout, headers=self.headers, transport=self.transport)

    def _request(
        self, method: str, endpoint: str, path: str | None = None, **kwargs: Any
    ) -> httpx.Response:
        """Make HTTP request to GitHub API with retry."""
        # Pagination links are already absolute
        url = endpoint if endpoint.startswith("http") else f"{self.base_url}{endpoint}"

        @create_retry_decorator(self.max_retries)
        def do_request() -> httpx.Response:
            logger.debug("Request: %s %s", method, url)
            with self._http() as client:
                response = client.request(method, url, **kwargs)
                logger.debug(
                    "Response: %s %s (status=%d)",
                    method,
                    endpoint,
                    response.status_code,
                )
                return response

        try:
            response = do_request()
        except httpx.HTTPError as e:
            logger.error("Request failed: %s %s: %s", method, url, e)
            raise GitHubTransportError(e) from e

        if response.status_code >= 500:
            logger.warning("Server error %d for %s %s", response.status_code, method, endpoint)
        if response.is_error:
            raise error_from_response(response, path)
        return response

    def _download(self, url: str) -> bytes:
        """Download raw content from URL with retry."""
        @create_retry_decorator(self.max_retries)
        def do_download() -> httpx.Response:
            logger.debug("Downloading: %s", url)
            with self._http() as client:
                response = client.get(url)
                return response

        try:
            response = do_download()
        except httpx.HTTPError as e:
            raise GitHubTransportError(e) from e
        if response.is_error:
            raise error_from_response(response)
        return response.content

    @staticmethod
    def _contents_endpoint(owner: str, repo: str, path: str) -> str:
        return f"/repos/{owner}/{repo}/contents/{quote(path.strip('/'), safe='/')}"

    def get_contents(
        self, owner: str, repo: str, path: str = "", ref: str | None = None
    ) -> list[GitHubContent]:
        """
        Get repository contents.

        Args:
            owner: Repository owner
            repo: Repository name
            path: Path in repository (empty for root)
            ref: Branch/tag/commit (default branch when omitted)

        Returns:
            List of GitHubContent items
        """
        endpoint = self._contents_endpoint(owner, repo, path)
        params = {"ref": ref} if ref else {}
        logger.info("Fetching contents: %s/%s path=%s ref=%s", owner, repo, path, ref)
        response = self._request("GET", endpoint, path=path or "/", params=params)
        data = response.json()

        # Handle single file response
        if isinstance(data, dict):
            logger.debug("Single item response: %s", data.get("name"))
            return [GitHubContent(**data)]

        logger.debug("Directory listing: %d items", len(data))
        return [GitHubContent(**item) for item in data]

    def get_file_content(
        self, owner: str, repo: str, path: str, ref: str | None = None
    ) -> GitHubFile:
        """
        Get file content with decoded text.

        Args:
            owner: Repository owner
            repo: Repository name
            path: File path in repository
            ref: Branch/tag/commit (default branch when omitted)

        Returns:
            GitHubFile with decoded content
        """
        logger.info("Fetching file content: %s/%s path=%s", owner, repo, path)
        contents = self.get_contents(owner, repo, path, ref)
        target = path.strip("/")
        if not contents:
            kind = "empty directory"
        elif len(contents) > 1 or not target or contents[0].path.startswith(target + "/"):
            kind = "dir"
        else:
            # A symlink to a file comes back as the target file
            kind = contents[0].type
        if kind != "file":
            logger.error("Path is not a file: %s (%s)", path, kind)
            raise NotAFileError(path, kind)
        item = contents[0]

        if item.encoding == "base64" and item.content is not None:
            logger.debug("Decoding base64 content for: %s", path)
            # b64decode drops the line breaks GitHub wraps the body with
            raw = base64.b64decode(item.content)
        elif item.download_url:
            # Bodies above 1 MB come back with encoding "none"
            logger.debug("Downloading from URL: %s", item.download_url)
            raw = self._download(item.download_url)
        else:
            raw = b""

        text, binary = decode_content(raw)
        if binary:
            logger.info("Binary file: %s (%d bytes)", path, len(raw))
        logger.debug("File content fetched: %s (%d bytes)", path, len(raw))

        return GitHubFile(
            name=item.name,
            path=item.path,
            sha=item.sha,
            size=item.size,
            html_url=item.html_url,
            content=text,
            binary=binary,
        )

    def get_directory_tree(
        self,
        owner: str,
        repo: str,
        path: str = "",
        ref: str | None = None,
        recursive: bool = False,
    ) -> GitHubDirectory:
        """
        Get directory tree recursively.

        Args:
            owner: Repository owner
            repo: Repository name
            path: Directory path (empty for root)
            ref: Branch/tag/commit (default branch when omitted)
            recursive: Whether to recursively fetch subdirectories

        Returns:
            GitHubDirectory with all items
        """
        logger.info(
            "Fetching directory tree: %s/%s path=%s recursive=%s",
            owner, repo, path, recursive
        )
        items: list[GitHubContent] = []
        contents = self.get_contents(owner, repo, path, ref)

        for item in contents:
            items.append(item)
            if recursive and item.type == "dir":
                logger.debug("Recursing into directory: %s", item.path)
                subdir = self.get_directory_tree(
                    owner, repo, item.path, ref, recursive=True
                )
                items.extend(subdir.items)

        logger.debug("Directory tree fetched: %s (%d items)", path, len(items))
        return GitHubDirectory(path=path, items=items)

    def list_branches(
        self, owner: str, repo: str, per_page: int = DEFAULT_PER_PAGE
    ) -> list[GitHubBranch]:
        """
        List all branches, following pagination.

        Args:
            owner: Repository owner
            repo: Repository name
            per_page: Page size requested from the API (max 100)

        Returns:
            List of GitHubBranch objects
        """
        logger.info("Fetching branches: %s/%s", owner, repo)
        branches: list[GitHubBranch] = []
        url: str | None = f"/repos/{owner}/{repo}/branches"
        params: dict[str, Any] | None = {"per_page": per_page}

        while url:
            response = self._request("GET", url, params=params)
            branches.extend(GitHubBranch(**item) for item in response.json())
            url = response.links.get("next", {}).get("url")
            # The next link already carries the query string
            params = None

        logger.debug("Found %d branches", len(branches))
        return branches

    def put_file(
        self,
        owner: str,
        repo: str,
        path: str,
        content: str | bytes,
        message: str,
        sha: str | None = None,
        branch: str | None = None,
    ) -> GitHubWriteResult:
        """
        Create or update a file.

        Args:
            owner: Repository owner
            repo: Repository name
            path: File path in repository
            content: New file body
            message: Commit message
            sha: Blob SHA being replaced (None to create a new file)
            branch: Target branch (default branch when omitted)

        Returns:
            GitHubWriteResult with the new content node and commit
        """
        endpoint = self._contents_endpoint(owner, repo, path)
        body: dict[str, Any] = {"message": message, "content": encode_content(content)}
        if sha:
            body["sha"] = sha
        if branch:
            body["branch"] = branch

        logger.info(
            "Writing file: %s/%s path=%s branch=%s sha=%s", owner, repo, path, branch, sha
        )
        response = self._request("PUT", endpoint, path=path, json=body)
        result = GitHubWriteResult(**response.json())
        logger.debug("Committed %s as %s", path, result.commit.sha)
        return result
