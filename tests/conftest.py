"""Shared fixtures: an in-memory GitHub served through httpx.MockTransport."""

import base64
import hashlib
import json
import re

import httpx
import pytest

from gh import GitHubClient

API_HOST = "api.github.com"
RAW_HOST = "raw.githubusercontent.com"
OWNER = "octo"
REPO = "demo"

ROUTE = re.compile(r"^/repos/(?P<owner>[^/]+)/(?P<repo>[^/]+)/(?P<rest>.*)$")


def blob_sha(data: bytes) -> str:
    return hashlib.sha1(b"blob %d\0" % len(data) + data).hexdigest()


def wrap_base64(data: bytes) -> str:
    """Base64 with a newline every 60 chars, like the real API."""
    encoded = base64.b64encode(data).decode("ascii")
    return "\n".join(encoded[i:i + 60] for i in range(0, len(encoded), 60)) + "\n"


class FakeGitHub:
    """Enough of the branches and contents endpoints to drive the explorer."""

    def __init__(self, branches: dict[str, dict[str, bytes]], default_branch: str = "main"):
        self.files = {name: dict(files) for name, files in branches.items()}
        self.default_branch = default_branch
        self.protected: set[str] = set()
        self.large: set[str] = set()
        self.requests: list[httpx.Request] = []
        self.commits = 0

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def commit(self, path: str, data: bytes, branch: str | None = None) -> None:
        """Change a file behind the explorer's back."""
        self.files[branch or self.default_branch][path] = data

    def requests_to(self, method: str, fragment: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and fragment in r.url.path]

    # ============ Routing ============

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == RAW_HOST:
            return self._raw(request)

        match = ROUTE.match(request.url.path)
        if not match or (match["owner"], match["repo"]) != (OWNER, REPO):
            return self._error(404, "Not Found")
        rest = match["rest"]
        if rest == "branches":
            return self._branches(request)
        if rest == "contents" or rest.startswith("contents/"):
            path = rest[len("contents"):].strip("/")
            if request.method == "GET":
                return self._get_contents(request, path)
            if request.method == "PUT":
                return self._put_contents(request, path)
        return self._error(404, "Not Found")

    @staticmethod
    def _error(status: int, message: str) -> httpx.Response:
        return httpx.Response(status, json={"message": message})

    def _entry(self, path: str, branch: str, type: str) -> dict:
        data = self.files[branch].get(path, b"")
        entry = {
            "name": path.rsplit("/", 1)[-1],
            "path": path,
            "sha": blob_sha(data) if type == "file" else blob_sha(path.encode()),
            "size": len(data) if type == "file" else 0,
            "url": f"https://{API_HOST}/repos/{OWNER}/{REPO}/contents/{path}?ref={branch}",
            "html_url": f"https://github.com/{OWNER}/{REPO}/blob/{branch}/{path}",
            "git_url": f"https://{API_HOST}/repos/{OWNER}/{REPO}/git/blobs/x",
            "download_url": None,
            "type": type,
        }
        if type == "file":
            entry["download_url"] = f"https://{RAW_HOST}/{OWNER}/{REPO}/{branch}/{path}"
        return entry

    def _children(self, path: str, branch: str) -> list[dict]:
        prefix = f"{path}/" if path else ""
        seen: dict[str, str] = {}
        for file_path in self.files[branch]:
            if not file_path.startswith(prefix):
                continue
            head, sep, _ = file_path[len(prefix):].partition("/")
            seen[prefix + head] = "dir" if sep else "file"
        return [self._entry(p, branch, t) for p, t in sorted(seen.items())]

    def _get_contents(self, request: httpx.Request, path: str) -> httpx.Response:
        branch = request.url.params.get("ref", self.default_branch)
        if branch not in self.files:
            return self._error(404, f"No commit found for the ref {branch}")
        files = self.files[branch]
        if path in files:
            entry = self._entry(path, branch, "file")
            if path in self.large:
                entry.update(content="", encoding="none")
            else:
                entry.update(content=wrap_base64(files[path]), encoding="base64")
            return httpx.Response(200, json=entry)
        children = self._children(path, branch)
        if not children:
            return self._error(404, "Not Found")
        return httpx.Response(200, json=children)

    def _put_contents(self, request: httpx.Request, path: str) -> httpx.Response:
        body = json.loads(request.content)
        branch = body.get("branch", self.default_branch)
        files = self.files.setdefault(branch, {})
        sha = body.get("sha")
        if path in files:
            if sha is None:
                return self._error(422, 'Invalid request.\n\n"sha" wasn\'t supplied.')
            if sha != blob_sha(files[path]):
                return self._error(409, f"{path} does not match {sha}")
        files[path] = base64.b64decode(body["content"])
        self.commits += 1
        commit = {
            "sha": f"{self.commits:040x}",
            "message": body["message"],
            "html_url": f"https://github.com/{OWNER}/{REPO}/commit/{self.commits:040x}",
        }
        return httpx.Response(
            200 if sha else 201,
            json={"content": self._entry(path, branch, "file"), "commit": commit},
        )

    def _branches(self, request: httpx.Request) -> httpx.Response:
        per_page = int(request.url.params.get("per_page", 30))
        page = int(request.url.params.get("page", 1))
        names = sorted(self.files)
        chunk = names[(page - 1) * per_page: page * per_page]
        data = [
            {
                "name": name,
                "commit": {"sha": blob_sha(name.encode()), "url": "https://example.invalid"},
                "protected": name in self.protected,
            }
            for name in chunk
        ]
        headers = {}
        if page * per_page < len(names):
            next_url = f"https://{API_HOST}/repos/{OWNER}/{REPO}/branches?per_page={per_page}&page={page + 1}"
            headers["Link"] = f'<{next_url}>; rel="next"'
        return httpx.Response(200, json=data, headers=headers)

    def _raw(self, request: httpx.Request) -> httpx.Response:
        _, owner, repo, branch, path = request.url.path.split("/", 4)
        data = self.files.get(branch, {}).get(path)
        if data is None:
            return httpx.Response(404, text="404: Not Found")
        return httpx.Response(200, content=data)


SAMPLE_FILES = {
    "README.md": b"# Demo\n\nA demo repository.\n\n## Usage\n\n- install\n- run\n",
    "setup.cfg": b"[metadata]\nname = demo\n",
    "src/app.py": b"print('hello')\n",
    "src/lib/util.py": b"def util():\n    return 1\n",
    "docs/guide.md": b"# Guide\n",
    "assets/logo.png": b"\x89PNG\r\n\x1a\n\x00\x00\xff\xfe",
}


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub(
        {
            "main": SAMPLE_FILES,
            "dev": {**SAMPLE_FILES, "src/new.py": b"x = 1\n"},
        }
    )


@pytest.fixture
def client(fake_github: FakeGitHub) -> GitHubClient:
    return GitHubClient(token="test-token", transport=fake_github.transport(), max_retries=1)
