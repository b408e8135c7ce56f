"""Repository explorer state."""

import logging
from typing import Callable

from gh import (
    ConflictError,
    GitHubBranch,
    GitHubClient,
    GitHubContent,
    GitHubError,
    GitHubFile,
)

from .formatting import breadcrumbs, crumb_path, parent_path
from .tree import ContentCache, FileTree, PathNotFoundError

logger = logging.getLogger(__name__)

TOKEN_WARNING = "No GitHub token configured. Rate limits may apply for public repositories."

# Errors a single user action may end with; anything else is a bug
ACTION_ERRORS = (GitHubError, PathNotFoundError, ValueError, IndexError)


def describe_error(error: Exception, fallback: str) -> str:
    """Human readable message for the error banner."""
    return str(error) or fallback


class RepositoryExplorer:
    """
    State of one browsing session over a repository.

    Every action makes its API calls one after another and reports failure
    through ``error`` instead of raising.
    """

    def __init__(
        self,
        client: GitHubClient,
        owner: str,
        repo: str,
        branch: str | None = None,
    ):
        self.client = client
        self.owner = owner
        self.repo = repo
        self.branch = branch

        self.files: list[GitHubContent] = []
        self.selected_file: GitHubFile | None = None
        self.current_path = ""
        self.crumbs: list[str] = []
        self.branches: list[GitHubBranch] = []
        self.loading = False
        self.error: str | None = None

        self.tree = FileTree(loader=self._fetch_listing)
        self.cache = ContentCache()
        logger.debug("Explorer created for %s branch=%s", self.full_name, branch)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def has_token(self) -> bool:
        return self.client.authenticated

    @property
    def token_warning(self) -> str | None:
        return None if self.has_token else TOKEN_WARNING

    def _fetch_listing(self, path: str) -> list[GitHubContent]:
        return self.client.get_contents(self.owner, self.repo, path, ref=self.branch)

    def _run(self, fallback: str, action: Callable[[], object]) -> bool:
        self.loading = True
        self.error = None
        try:
            action()
        except ACTION_ERRORS as e:
            self.error = describe_error(e, fallback)
            logger.warning("%s: %s", fallback, self.error)
            return False
        finally:
            self.loading = False
        return True

    def dismiss_error(self) -> None:
        self.error = None

    # ============ Navigation ============

    def explore(self, path: str = "", refresh: bool = False) -> bool:
        """List a directory; a file path opens the file instead."""
        path = path.strip("/")

        def action() -> None:
            if refresh:
                self.tree.invalidate(path)
            if path:
                node = self.tree.node(path)
                if not node.item.is_dir:
                    self._open(node.path, refresh)
                    return
            self.files = self.tree.listing(path)
            self.current_path = path
            self.crumbs = breadcrumbs(path)
            logger.info("Listed %s:/%s (%d items)", self.full_name, path, len(self.files))

        return self._run("Failed to fetch repository contents", action)

    def open_folder(self, path: str) -> bool:
        return self.explore(path)

    def open_entry(self, item: GitHubContent) -> bool:
        if item.is_dir:
            return self.open_folder(item.path)
        return self.open_file(item.path)

    def click_breadcrumb(self, index: int) -> bool:
        try:
            path = crumb_path(self.crumbs, index)
        except IndexError as e:
            self.error = str(e)
            return False
        return self.explore(path)

    def go_back(self) -> bool:
        return self.explore(parent_path(self.current_path))

    def go_home(self) -> bool:
        return self.explore("")

    def reload(self) -> bool:
        """Refetch the current directory and the selected file."""
        ok = self.explore(self.current_path, refresh=True)
        if ok and self.selected_file is not None:
            ok = self.open_file(self.selected_file.path, refresh=True)
        return ok

    # ============ Files ============

    def _open(self, path: str, refresh: bool) -> None:
        snapshot = None if refresh else self.cache.get(path)
        if snapshot is None:
            snapshot = self.client.get_file_content(self.owner, self.repo, path, ref=self.branch)
            self.cache.put(snapshot)
        else:
            logger.debug("Content cache hit: %s", path)
        self.selected_file = snapshot

    def open_file(self, path: str, refresh: bool = False) -> bool:
        path = path.strip("/")
        return self._run("Failed to fetch file content", lambda: self._open(path, refresh))

    def _refresh_parent(self, path: str) -> None:
        """Drop the listing that a write under ``path`` made stale."""
        # New files can create directories the tree has never listed.
        ancestor = parent_path(path)
        while ancestor and self.tree.find(ancestor) is None:
            ancestor = parent_path(ancestor)
        if not self.tree.is_loaded(ancestor):
            return
        self.tree.invalidate(ancestor)
        current = self.current_path
        if not ancestor or current == ancestor or current.startswith(ancestor + "/"):
            self.files = self.tree.listing(current)

    def _after_commit(self, path: str) -> None:
        """Refresh listings once a commit has landed; failures only set the banner."""
        fallback = "Committed, but failed to refresh directory listing"
        if not self._run(fallback, lambda: self._refresh_parent(path)):
            self.error = f"{fallback}: {self.error}"

    def save_file(self, content: str, message: str | None = None) -> bool:
        """Commit new content for the selected file, guarded by its sha."""
        snapshot = self.selected_file
        if snapshot is None:
            self.error = "No file selected"
            return False
        if snapshot.binary:
            self.error = f"Cannot edit binary file: {snapshot.path}"
            return False
        message = message or f"Update {snapshot.path}"

        def action() -> None:
            try:
                result = self.client.put_file(
                    self.owner,
                    self.repo,
                    snapshot.path,
                    content,
                    message,
                    sha=snapshot.sha,
                    branch=self.branch,
                )
            except ConflictError as e:
                raise ConflictError(
                    e.status_code,
                    "changed remotely since it was opened, reload before saving",
                    snapshot.path,
                ) from e

            updates = {"content": content, "size": len(content.encode("utf-8"))}
            if result.content is not None:
                updates.update(sha=result.content.sha, size=result.content.size)
            self.selected_file = snapshot.model_copy(update=updates)
            self.cache.put(self.selected_file)
            logger.info("Saved %s in commit %s", snapshot.path, result.commit.sha)

        if not self._run("Failed to save file", action):
            return False
        self._after_commit(snapshot.path)
        return True

    def create_file(self, path: str, content: str, message: str | None = None) -> bool:
        """Create a new file and select it."""
        path = path.strip("/")
        message = message or f"Create {path}"

        def action() -> None:
            if not path:
                raise ValueError("File path is required")
            result = self.client.put_file(
                self.owner, self.repo, path, content, message, branch=self.branch
            )
            item = result.content
            self.selected_file = GitHubFile(
                name=item.name if item else path.rsplit("/", 1)[-1],
                path=path,
                sha=item.sha if item else "",
                size=item.size if item else len(content.encode("utf-8")),
                html_url=item.html_url if item else None,
                content=content,
            )
            self.cache.put(self.selected_file)
            logger.info("Created %s in commit %s", path, result.commit.sha)

        if not self._run("Failed to create file", action):
            return False
        self._after_commit(path)
        return True

    # ============ Branches ============

    def load_branches(self) -> bool:
        def action() -> None:
            self.branches = self.client.list_branches(self.owner, self.repo)

        return self._run("Failed to fetch branches", action)

    def switch_branch(self, name: str) -> bool:
        """Switch ref; everything fetched so far is discarded."""
        name = name.strip()
        if self.branches and name not in {b.name for b in self.branches}:
            self.error = f"Unknown branch: {name}"
            return False

        logger.info("Switching %s to branch %s", self.full_name, name)
        self.branch = name
        self.files = []
        self.selected_file = None
        self.current_path = ""
        self.crumbs = []
        self.tree.reset()
        self.cache.clear()
        return self.explore("")

    # ============ Tree ============

    def load_tree(self) -> bool:
        return self._run("Failed to fetch repository contents", self.tree.root)

    def expand(self, path: str) -> bool:
        return self._run("Failed to expand directory", lambda: self.tree.expand(path))

    def collapse(self, path: str) -> bool:
        return self._run("Failed to collapse directory", lambda: self.tree.collapse(path))
