"""GitHub API data models."""

from typing import Literal
from pydantic import BaseModel, Field


class GitHubContent(BaseModel):
    """GitHub content item (file or directory)."""

    name: str
    path: str
    sha: str
    size: int = 0
    url: str
    html_url: str | None = None
    git_url: str | None = None
    download_url: str | None = None
    type: Literal["file", "dir", "symlink", "submodule"]
    content: str | None = None  # Base64 encoded content for files
    encoding: str | None = None  # "base64", or "none" above 1 MB

    @property
    def is_dir(self) -> bool:
        return self.type == "dir"


class GitHubFile(BaseModel):
    """GitHub file with decoded content."""

    name: str
    path: str
    sha: str
    size: int
    html_url: str | None = None
    content: str
    encoding: str = "utf-8"
    binary: bool = False


class GitHubDirectory(BaseModel):
    """GitHub directory listing."""

    path: str
    items: list[GitHubContent] = Field(default_factory=list)


class GitHubBranchCommit(BaseModel):
    """Head commit reference of a branch."""

    sha: str
    url: str | None = None


class GitHubBranch(BaseModel):
    """GitHub branch."""

    name: str
    commit: GitHubBranchCommit
    protected: bool = False

    @property
    def head_sha(self) -> str:
        return self.commit.sha


class GitHubCommit(BaseModel):
    """Commit created by a contents write."""

    sha: str
    message: str | None = None
    html_url: str | None = None


class GitHubWriteResult(BaseModel):
    """Response of the create-or-update contents endpoint."""

    content: GitHubContent | None = None
    commit: GitHubCommit
