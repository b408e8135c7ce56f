"""Lazy file tree with expand/collapse and per-path caches."""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator

from gh import GitHubContent, GitHubFile

logger = logging.getLogger(__name__)

Loader = Callable[[str], list[GitHubContent]]


def sort_items(items: list[GitHubContent]) -> list[GitHubContent]:
    """Directories first, then files, each by name (case-insensitive)."""
    return sorted(items, key=lambda item: (not item.is_dir, item.name.lower()))


@dataclass
class TreeNode:
    """Tree entry; ``children`` stays None until the directory is loaded."""

    item: GitHubContent
    children: list["TreeNode"] | None = None
    expanded: bool = False

    @property
    def path(self) -> str:
        return self.item.path

    @property
    def loaded(self) -> bool:
        return self.children is not None


class PathNotFoundError(LookupError):
    """Path is not present in the loaded tree."""


@dataclass
class FileTree:
    """Repository tree that fetches each directory at most once."""

    loader: Loader
    _root: list[TreeNode] | None = field(default=None, init=False)
    _nodes: dict[str, TreeNode] = field(default_factory=dict, init=False)

    def _load(self, path: str) -> list[TreeNode]:
        logger.debug("Loading tree level: %s", path or "/")
        nodes = [TreeNode(item=item) for item in sort_items(self.loader(path))]
        for node in nodes:
            self._nodes[node.path] = node
        return nodes

    def root(self) -> list[TreeNode]:
        if self._root is None:
            self._root = self._load("")
        return self._root

    def node(self, path: str) -> TreeNode:
        path = path.strip("/")
        if path not in self._nodes:
            # Load ancestors top-down without expanding them
            parent = "/".join(path.split("/")[:-1])
            if parent:
                self.listing(parent)
            else:
                self.root()
        try:
            return self._nodes[path]
        except KeyError:
            raise PathNotFoundError(f"No such path: {path}") from None

    def is_loaded(self, path: str) -> bool:
        path = path.strip("/")
        if not path:
            return self._root is not None
        node = self._nodes.get(path)
        return node is not None and node.loaded

    def find(self, path: str) -> TreeNode | None:
        """Already-loaded node for ``path``, without fetching."""
        return self._nodes.get(path.strip("/"))

    def listing(self, path: str = "") -> list[GitHubContent]:
        """Children of ``path``, loading them if needed."""
        path = path.strip("/")
        if not path:
            return [node.item for node in self.root()]
        node = self.node(path)
        if not node.item.is_dir:
            raise ValueError(f"Not a directory: {path}")
        if node.children is None:
            node.children = self._load(path)
        return [child.item for child in node.children]

    def expand(self, path: str) -> TreeNode:
        node = self.node(path)
        if not node.item.is_dir:
            raise ValueError(f"Not a directory: {path}")
        if node.children is None:
            node.children = self._load(node.path)
        else:
            logger.debug("Tree cache hit: %s", node.path)
        node.expanded = True
        return node

    def collapse(self, path: str) -> TreeNode:
        node = self.node(path)
        node.expanded = False
        return node

    def toggle(self, path: str) -> TreeNode:
        node = self.node(path)
        return self.collapse(path) if node.expanded else self.expand(path)

    def visible(self) -> Iterator[tuple[int, TreeNode]]:
        """Yield (depth, node) in display order."""
        stack = [(0, node) for node in reversed(self.root())]
        while stack:
            depth, node = stack.pop()
            yield depth, node
            if node.expanded and node.children:
                stack.extend((depth + 1, child) for child in reversed(node.children))

    def invalidate(self, path: str) -> None:
        """Forget the cached listing of one directory."""
        path = path.strip("/")
        if not path:
            self.reset()
            return
        node = self._nodes.get(path)
        if node is not None and node.children is not None:
            prefix = path + "/"
            for key in [k for k in self._nodes if k.startswith(prefix)]:
                del self._nodes[key]
            node.children = None
            node.expanded = False

    def reset(self) -> None:
        self._root = None
        self._nodes.clear()


class ContentCache:
    """File snapshots memoized by path."""

    def __init__(self):
        self._files: dict[str, GitHubFile] = {}

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, path: str) -> bool:
        return path in self._files

    def get(self, path: str) -> GitHubFile | None:
        return self._files.get(path)

    def put(self, snapshot: GitHubFile) -> None:
        self._files[snapshot.path] = snapshot

    def invalidate(self, path: str) -> None:
        self._files.pop(path, None)

    def clear(self) -> None:
        self._files.clear()
