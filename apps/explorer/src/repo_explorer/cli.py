"""CLI for the repository explorer."""

import logging
from pathlib import Path, PurePosixPath
from typing import NoReturn

import click
from dotenv import load_dotenv
from pydantic import ValidationError

from gh import GitHubError

from .config import ENV_BRANCH, ENV_OWNER, ENV_REPO, ExplorerConfig
from .explorer import RepositoryExplorer
from .formatting import file_icon, format_file_size
from .outline import MarkdownOutline, is_markdown, render_outline
from .render import render_banner, render_branches, render_file, render_listing, render_tree
from .shell import ExplorerShell

# Load .env (GITHUB_TOKEN, GITHUB_OWNER, GITHUB_REPO) before click reads envvars
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_TREE_DEPTH = 2


def setup_logging(verbose: int) -> None:
    """Setup logging."""
    level = logging.DEBUG if verbose >= 2 else logging.INFO if verbose == 1 else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_explorer(config: ExplorerConfig) -> RepositoryExplorer:
    return RepositoryExplorer(config.make_client(), config.owner, config.repo, config.branch)


def get_explorer(ctx: click.Context) -> RepositoryExplorer:
    """Validate options and build the explorer on first use."""
    obj = ctx.find_root().obj
    if "explorer" not in obj:
        options = obj["options"]
        owner, repo = options["owner"], options["repo"]
        try:
            if repo and "/" in repo:
                owner, repo = ExplorerConfig.slug(repo)
            config = ExplorerConfig(
                owner=owner or "",
                repo=repo or "",
                branch=options["branch"],
                token=options["token"],
                use_gh_cli=options["use_gh_cli"],
                max_retries=options["retries"],
            )
        except (ValidationError, ValueError) as e:
            raise click.UsageError(
                f"Repository required: pass --owner/--repo or set {ENV_OWNER}/{ENV_REPO} ({e})"
            ) from e
        obj["config"] = config
        obj["explorer"] = build_explorer(config)
    return obj["explorer"]


def fail(message: str | None) -> NoReturn:
    """Print the error banner to stderr and exit 1."""
    for line in render_banner(message or "Unknown error"):
        click.echo(line, err=True)
    raise SystemExit(1)


def echo_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


# ============ CLI Group ============

@click.group()
@click.option("--owner", envvar=ENV_OWNER, help="Repository owner")
@click.option("--repo", envvar=ENV_REPO, help="Repository name (or owner/name)")
@click.option("--branch", "-b", envvar=ENV_BRANCH, help="Branch (default branch if omitted)")
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub token")
@click.option("--use-gh-cli", is_flag=True, help="Use gh cli credentials")
@click.option("--retries", "-r", type=int, default=3, help="Retry attempts")
@click.option("-v", "--verbose", count=True, help="Verbosity (-v, -vv)")
@click.pass_context
def cli(
    ctx: click.Context,
    owner: str | None,
    repo: str | None,
    branch: str | None,
    token: str | None,
    use_gh_cli: bool,
    retries: int,
    verbose: int,
) -> None:
    """Browse and edit a GitHub repository through the Contents API."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["options"] = {
        "owner": owner,
        "repo": repo,
        "branch": branch,
        "token": token,
        "use_gh_cli": use_gh_cli,
        "retries": retries,
    }


# ============ Read Commands ============

@cli.command()
@click.pass_context
def branches(ctx):
    """List branches."""
    explorer = get_explorer(ctx)
    if not explorer.load_branches():
        fail(explorer.error)
    echo_lines(render_branches(explorer.branches, explorer.branch))


@cli.command()
@click.argument("path", default="")
@click.option("-R", "--recursive", is_flag=True, help="List every file below PATH")
@click.pass_context
def ls(ctx, path, recursive):
    """List a directory (or show a file)."""
    explorer = get_explorer(ctx)
    if recursive:
        try:
            directory = explorer.client.get_directory_tree(
                explorer.owner, explorer.repo, path, explorer.branch, recursive=True
            )
        except GitHubError as e:
            fail(str(e))
        for item in directory.items:
            size = "" if item.is_dir else format_file_size(item.size)
            click.echo(f"{file_icon(item.name, item.type)} {item.path}  {size}".rstrip())
        return

    if not explorer.explore(path):
        fail(explorer.error)
    if explorer.selected_file is not None:
        echo_lines(render_file(explorer.selected_file))
    else:
        echo_lines(render_listing(explorer))


@cli.command()
@click.option("-d", "--depth", type=click.IntRange(min=1), default=DEFAULT_TREE_DEPTH, show_default=True)
@click.pass_context
def tree(ctx, depth):
    """Print the file tree down to DEPTH levels."""
    explorer = get_explorer(ctx)
    if not explorer.load_tree():
        fail(explorer.error)
    for level in range(depth - 1):
        pending = [
            node.path
            for d, node in explorer.tree.visible()
            if d == level and node.item.is_dir and not node.expanded
        ]
        for path in pending:
            if not explorer.expand(path):
                fail(explorer.error)
    echo_lines(render_tree(explorer.tree))


@cli.command()
@click.argument("path")
@click.pass_context
def show(ctx, path):
    """Print a file."""
    explorer = get_explorer(ctx)
    if not explorer.open_file(path):
        fail(explorer.error)
    echo_lines(render_file(explorer.selected_file))


@cli.command()
@click.argument("path")
@click.pass_context
def outline(ctx, path):
    """Print the heading outline of a Markdown file."""
    if not is_markdown(path):
        fail(f"Not a Markdown file: {path}")
    explorer = get_explorer(ctx)
    if not explorer.open_file(path):
        fail(explorer.error)
    parsed = MarkdownOutline().parse(explorer.selected_file.content)
    if parsed["title"]:
        click.echo(click.style(parsed["title"], bold=True))
    echo_lines(render_outline(parsed))


# ============ Write Commands ============

@cli.command()
@click.argument("path")
@click.option("-m", "--message", help="Commit message")
@click.pass_context
def edit(ctx, path, message):
    """Edit a file in $EDITOR and commit it."""
    explorer = get_explorer(ctx)
    if not explorer.open_file(path):
        fail(explorer.error)
    snapshot = explorer.selected_file
    if snapshot.binary:
        fail(f"Cannot edit binary file: {snapshot.path}")

    text = click.edit(snapshot.content, extension=PurePosixPath(snapshot.name).suffix or ".txt")
    if text is None or text == snapshot.content:
        click.echo("No changes.")
        return
    if not explorer.save_file(text, message):
        fail(explorer.error)
    click.echo(f"Saved {snapshot.path} ({explorer.selected_file.sha[:7]})")


@cli.command()
@click.argument("path")
@click.option(
    "-f", "--from-file", "source",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Local file with the new content",
)
@click.option("-m", "--message", help="Commit message")
@click.option("--create", is_flag=True, help="Create PATH instead of updating it")
@click.pass_context
def put(ctx, path, source, message, create):
    """Commit a local file's content to PATH."""
    explorer = get_explorer(ctx)
    try:
        content = source.read_bytes().decode("utf-8")
    except UnicodeDecodeError:
        fail(f"Not a UTF-8 text file: {source}")

    if create:
        ok = explorer.create_file(path, content, message)
    else:
        ok = explorer.open_file(path, refresh=True) and explorer.save_file(content, message)
    if not ok:
        fail(explorer.error)
    click.echo(f"Committed {explorer.selected_file.path} ({explorer.selected_file.sha[:7]})")


# ============ Interactive ============

@cli.command()
@click.argument("path", default="")
@click.pass_context
def browse(ctx, path):
    """Interactive explorer."""
    ExplorerShell(get_explorer(ctx)).run(path)


if __name__ == "__main__":
    cli()
