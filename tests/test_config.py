import pytest
from pydantic import ValidationError

from repo_explorer.config import ExplorerConfig


def test_full_name():
    config = ExplorerConfig(owner=" octo ", repo="demo")
    assert config.full_name == "octo/demo"
    assert config.branch is None


@pytest.mark.parametrize(("owner", "repo"), [("", "demo"), ("octo", ""), ("oc/to", "demo")])
def test_invalid_names(owner: str, repo: str):
    with pytest.raises(ValidationError):
        ExplorerConfig(owner=owner, repo=repo)


def test_slug():
    assert ExplorerConfig.slug("octo/demo") == ("octo", "demo")
    with pytest.raises(ValueError):
        ExplorerConfig.slug("octo")
    with pytest.raises(ValueError):
        ExplorerConfig.slug("a/b/c")


def test_from_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("GITHUB_OWNER", "octo")
    monkeypatch.setenv("GITHUB_REPO", "demo")
    monkeypatch.setenv("GITHUB_BRANCH", "dev")
    monkeypatch.setenv("GITHUB_TOKEN", "secret")

    config = ExplorerConfig.from_env()
    assert (config.owner, config.repo, config.branch, config.token) == ("octo", "demo", "dev", "secret")

    assert ExplorerConfig.from_env(branch="main").branch == "main"


def test_make_client_uses_token(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GH_TOKEN", raising=False)
    client = ExplorerConfig(owner="octo", repo="demo", token="abc", max_retries=5).make_client()
    assert client.headers["Authorization"] == "token abc"
    assert client.max_retries == 5
