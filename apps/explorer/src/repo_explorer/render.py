"""Text rendering of explorer state."""

import click

from gh import GitHubBranch, GitHubFile

from .explorer import RepositoryExplorer
from .formatting import file_icon, format_file_size
from .tree import FileTree

BINARY_PLACEHOLDER = "Binary file or content too large to display"
EMPTY_SELECTION = "Select a file to view its content"


def render_banner(error: str | None) -> list[str]:
    if not error:
        return []
    return [
        click.style("Error", fg="red", bold=True),
        click.style(f"  {error}", fg="red"),
    ]


def render_token_warning(explorer: RepositoryExplorer) -> list[str]:
    warning = explorer.token_warning
    return [click.style(f"⚠️ {warning}", fg="yellow")] if warning else []


def render_header(explorer: RepositoryExplorer) -> str:
    name = explorer.full_name
    if explorer.branch:
        name = f"{name}@{explorer.branch}"
    return " / ".join([click.style(name, bold=True), *explorer.crumbs])


def render_listing(explorer: RepositoryExplorer) -> list[str]:
    """Breadcrumbs, back entry and one numbered line per item."""
    lines = [render_header(explorer)]
    if explorer.crumbs:
        lines.append("    ← ..")
    for index, item in enumerate(explorer.files, start=1):
        line = f"{index:>3} {file_icon(item.name, item.type)} {item.name}"
        if item.is_dir:
            line += " →"
        else:
            size = format_file_size(item.size)
            if size:
                line += click.style(f"  {size}", dim=True)
        lines.append(line)
    if not explorer.files:
        lines.append(click.style("    (empty)", dim=True))
    return lines


def render_file(snapshot: GitHubFile | None) -> list[str]:
    if snapshot is None:
        return [click.style(f"📁 {EMPTY_SELECTION}", dim=True)]
    header = click.style(snapshot.name, bold=True)
    size = format_file_size(snapshot.size)
    if size:
        header += click.style(f"  {size}", dim=True)
    body = BINARY_PLACEHOLDER if snapshot.binary or not snapshot.content else snapshot.content
    return [header, "", *body.splitlines()]


def render_tree(tree: FileTree) -> list[str]:
    lines = []
    for depth, node in tree.visible():
        item = node.item
        if item.is_dir:
            marker = "▾" if node.expanded else "▸"
        else:
            marker = " "
        lines.append(f"{'  ' * depth}{marker} {file_icon(item.name, item.type)} {item.name}")
    return lines


def render_branches(branches: list[GitHubBranch], current: str | None) -> list[str]:
    lines = []
    for branch in branches:
        marker = "*" if branch.name == current else " "
        line = f"{marker} {branch.name}  {branch.head_sha[:7]}"
        if branch.protected:
            line += click.style("  protected", fg="yellow")
        lines.append(line)
    return lines
