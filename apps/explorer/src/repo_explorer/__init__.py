"""GitHub repository explorer."""

from .config import ExplorerConfig
from .explorer import RepositoryExplorer
from .outline import MarkdownOutline
from .shell import ExplorerShell
from .tree import ContentCache, FileTree, TreeNode

__all__ = [
    "ExplorerConfig",
    "RepositoryExplorer",
    "ExplorerShell",
    "FileTree",
    "TreeNode",
    "ContentCache",
    "MarkdownOutline",
]
