"""Explorer configuration."""

import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

from gh import GitHubClient

logger = logging.getLogger(__name__)

ENV_OWNER = "GITHUB_OWNER"
ENV_REPO = "GITHUB_REPO"
ENV_BRANCH = "GITHUB_BRANCH"


class ExplorerConfig(BaseModel):
    """Which repository to explore and how to reach it."""

    owner: str
    repo: str
    branch: str | None = None
    token: str | None = None
    use_gh_cli: bool = False
    max_retries: int = 3
    timeout: float = 30.0

    @field_validator("owner", "repo")
    @classmethod
    def _check_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        if "/" in value:
            raise ValueError(f"must not contain '/': {value}")
        return value

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @staticmethod
    def slug(value: str) -> tuple[str, str]:
        """Split "owner/repo" into its parts."""
        owner, sep, repo = value.strip().strip("/").partition("/")
        if not sep or not owner or not repo or "/" in repo:
            raise ValueError(f"Expected owner/repo, got: {value}")
        return owner, repo

    @classmethod
    def from_env(cls, **overrides) -> "ExplorerConfig":
        """Build config from environment variables (and .env), then overrides."""
        load_dotenv()
        values = {
            "owner": os.environ.get(ENV_OWNER, ""),
            "repo": os.environ.get(ENV_REPO, ""),
            "branch": os.environ.get(ENV_BRANCH) or None,
            "token": os.environ.get("GITHUB_TOKEN") or os.environ.get("GH_TOKEN"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        logger.debug("Config for %s/%s branch=%s", values["owner"], values["repo"], values["branch"])
        return cls(**values)

    def make_client(self, **kwargs) -> GitHubClient:
        return GitHubClient(
            token=self.token,
            use_gh_cli=self.use_gh_cli,
            max_retries=self.max_retries,
            timeout=self.timeout,
            **kwargs,
        )
